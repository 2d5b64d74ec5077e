"""Pytest fixtures: an in-memory Shopify GraphQL store and an API client."""
import json
import re
from typing import Any, Dict, List, Optional, Set

import pytest
from fastapi.testclient import TestClient

from occasions.config import Settings
from occasions.dependencies import get_settings, get_shopify_client
from occasions.exceptions import RemoteUnavailableError
from occasions.main import app

OPERATION_RE = re.compile(r"\b(?:query|mutation)\s+(\w+)")


class FakeShopify:
    """
    Stand-in for ShopifyClient that answers the named operations the
    services send, backed by dicts.
    """

    def __init__(self):
        self.metaobjects: Dict[str, dict] = {}
        self.metafields: Dict[str, Dict[tuple, str]] = {}
        self.definitions: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        self.fail_on: Set[str] = set()
        self.user_errors: Dict[str, List[dict]] = {}
        self._next_id = 1000

    # ------------------------------------------------------------------
    # Helpers for tests
    # ------------------------------------------------------------------

    def metafield(self, owner: str, namespace: str, key: str) -> Optional[str]:
        return self.metafields.get(owner, {}).get((namespace, key))

    def set_metafield(self, owner: str, namespace: str, key: str, value: str) -> None:
        self.metafields.setdefault(owner, {})[(namespace, key)] = value

    def operations(self) -> List[str]:
        return [name for name, _, _ in self.calls]

    def writes(self) -> List[List[dict]]:
        return [v["metafields"] for name, v, _ in self.calls if name == "metafieldsSet"]

    def retried(self) -> Dict[str, Set[bool]]:
        """Operation name -> the retry_throttled values it was sent with."""
        seen: Dict[str, Set[bool]] = {}
        for name, _, retry_throttled in self.calls:
            seen.setdefault(name, set()).add(retry_throttled)
        return seen

    # ------------------------------------------------------------------
    # ShopifyClient interface
    # ------------------------------------------------------------------

    def graphql(self, query: str, variables: Optional[dict] = None, retry_throttled: bool = False) -> Dict[str, Any]:
        name = OPERATION_RE.search(query).group(1)
        variables = variables or {}
        self.calls.append((name, variables, retry_throttled))
        if name in self.fail_on:
            raise RemoteUnavailableError(f"{name} unavailable")
        return getattr(self, f"_op_{name}")(variables)

    def _node(self, gid: str) -> dict:
        return self.metaobjects[gid]

    def _op_metaobjectCreate(self, variables):
        errors = self.user_errors.get("metaobjectCreate")
        if errors:
            return {"metaobjectCreate": {"metaobject": None, "userErrors": errors}}
        self._next_id += 1
        data = variables["metaobject"]
        gid = f"gid://shopify/Metaobject/{self._next_id}"
        self.metaobjects[gid] = {
            "id": gid,
            "handle": f"{data['type'].replace('_', '-')}-{self._next_id}",
            "type": data["type"],
            "fields": [dict(f) for f in data["fields"]],
        }
        return {"metaobjectCreate": {"metaobject": self._node(gid), "userErrors": []}}

    def _op_metaobjectUpdate(self, variables):
        gid = variables["id"]
        if gid not in self.metaobjects:
            return {
                "metaobjectUpdate": {
                    "metaobject": None,
                    "userErrors": [{"field": ["id"], "message": "Record not found"}],
                }
            }
        node = self.metaobjects[gid]
        current = {f["key"]: f for f in node["fields"]}
        for field in variables["metaobject"]["fields"]:
            current[field["key"]] = dict(field)
        node["fields"] = list(current.values())
        return {"metaobjectUpdate": {"metaobject": node, "userErrors": []}}

    def _op_metaobjectDelete(self, variables):
        gid = variables["id"]
        if gid not in self.metaobjects:
            return {
                "metaobjectDelete": {
                    "deletedId": None,
                    "userErrors": [{"field": ["id"], "message": "Record not found"}],
                }
            }
        del self.metaobjects[gid]
        return {"metaobjectDelete": {"deletedId": gid, "userErrors": []}}

    def _op_customerMetafield(self, variables):
        owner = variables["customerId"]
        value = self.metafield(owner, variables["namespace"], variables["key"])
        metafield = {"id": "gid://shopify/Metafield/1", "value": value} if value is not None else None
        return {"customer": {"id": owner, "metafield": metafield}}

    def _op_customerRewardState(self, variables):
        owner = variables["customerId"]
        flag = self.metafield(owner, variables["flagNamespace"], variables["flagKey"])
        points = self.metafield(owner, variables["pointsNamespace"], variables["pointsKey"])
        return {
            "customer": {
                "id": owner,
                "rewardFlag": {"value": flag} if flag is not None else None,
                "loyaltyPoints": {"value": points} if points is not None else None,
            }
        }

    def _op_metafieldsSet(self, variables):
        errors = self.user_errors.get("metafieldsSet")
        if errors:
            return {"metafieldsSet": {"metafields": [], "userErrors": errors}}
        for entry in variables["metafields"]:
            self.set_metafield(entry["ownerId"], entry["namespace"], entry["key"], entry["value"])
        return {"metafieldsSet": {"metafields": variables["metafields"], "userErrors": []}}

    def _op_customerOccasions(self, variables):
        owner = variables["customerId"]
        raw = self.metafield(owner, variables["namespace"], variables["key"])
        if raw is None:
            return {"customer": {"id": owner, "metafield": None}}
        try:
            ids = json.loads(raw)
        except ValueError:
            ids = []
        nodes = [self._node(gid) for gid in ids if gid in self.metaobjects]
        start = int(variables.get("after") or 0)
        end = start + variables["first"]
        page_info = {"hasNextPage": end < len(nodes), "endCursor": str(end)}
        return {
            "customer": {
                "id": owner,
                "metafield": {
                    "value": raw,
                    "references": {"pageInfo": page_info, "nodes": nodes[start:end]},
                },
            }
        }

    def _op_metaobjectDefinitionByType(self, variables):
        return {"metaobjectDefinitionByType": self.definitions.get(variables["type"])}


@pytest.fixture
def config():
    return Settings(
        shopify_store_domain="test-store",
        shopify_access_token="shpat_test",
        _env_file=None,
    )


@pytest.fixture
def fake_shopify():
    return FakeShopify()


@pytest.fixture
def client(fake_shopify, config):
    app.dependency_overrides[get_shopify_client] = lambda: fake_shopify
    app.dependency_overrides[get_settings] = lambda: config
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def event_payload():
    return {
        "customer": "123",
        "date": "2025-01-01",
        "occasion_type": "Anniversary",
        "occasion_name": "Anniv",
    }
