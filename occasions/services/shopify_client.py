"""Shopify Admin GraphQL transport."""
import logging
import time
from typing import Any, Dict, Optional

import requests

from occasions.config import Settings
from occasions.exceptions import (
    ConfigurationError,
    RemoteUnavailableError,
    RemoteValidationError,
)

logger = logging.getLogger(__name__)


class ShopifyClient:
    """
    Thin client for the Shopify Admin GraphQL endpoint.

    Every outbound call of the service goes through `graphql`. HTTP 429 is
    retried once after a fixed backoff, and only when the caller asks for it
    (the primary metaobject mutation does, reconciliation reads/writes do not).
    """

    def __init__(self, config: Settings):
        self.config = config

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.config.shopify_access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _post(self, payload: dict) -> requests.Response:
        try:
            return requests.post(
                self.config.graphql_url,
                json=payload,
                headers=self._headers(),
                timeout=self.config.shopify_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("Shopify request failed: %s", e)
            raise RemoteUnavailableError(f"Shopify API unreachable: {e}")

    def graphql(
        self,
        query: str,
        variables: Optional[dict] = None,
        retry_throttled: bool = False,
    ) -> Dict[str, Any]:
        """Run a query or mutation and return its `data` object."""
        if not self.config.shopify_configured:
            raise ConfigurationError(
                "Shopify credentials not configured. Set SHOPIFY_STORE_DOMAIN and SHOPIFY_ACCESS_TOKEN."
            )

        payload = {"query": query, "variables": variables or {}}
        logger.debug("GraphQL request variables: %s", payload["variables"])

        response = self._post(payload)
        if response.status_code == 429 and retry_throttled:
            backoff = self.config.shopify_throttle_backoff_seconds
            logger.warning("Shopify throttled the request, retrying once in %.1fs", backoff)
            time.sleep(backoff)
            response = self._post(payload)

        if response.status_code >= 400:
            logger.error("Shopify API HTTP error: %s", response.status_code)
            raise RemoteUnavailableError(
                f"Shopify API HTTP error: {response.status_code}",
                {"status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError:
            logger.error("Invalid response from Shopify API: %r", response.text[:200])
            raise RemoteUnavailableError("Invalid response from Shopify API")

        if not isinstance(data, dict):
            raise RemoteUnavailableError("Invalid response from Shopify API")

        if data.get("errors"):
            errors = data["errors"]
            if not isinstance(errors, list):
                errors = [{"message": str(errors)}]
            logger.warning("GraphQL errors: %s", errors)
            raise RemoteValidationError("GraphQL errors", errors)

        logger.debug("GraphQL response data: %s", data.get("data"))
        return data.get("data") or {}


def raise_user_errors(result: Optional[dict], message: str = "User errors") -> None:
    """Raise RemoteValidationError when a mutation payload carries userErrors."""
    user_errors = (result or {}).get("userErrors") or []
    if user_errors:
        logger.info("%s: %s", message, user_errors)
        raise RemoteValidationError(message, user_errors)
