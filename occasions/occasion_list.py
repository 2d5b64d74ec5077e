"""Serialization of the customer's occasion list metafield.

The list is stored as a JSON array of metaobject GIDs in one customer
metafield. Both the read path (reconciliation, listing) and the write path
go through these helpers so they agree on one encoding.
"""
import json
from typing import Iterable, List, Optional


def parse_occasion_list(raw: Optional[str]) -> List[str]:
    """Decode a stored list. Missing or malformed values decode to []."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def dump_occasion_list(ids: Iterable[str]) -> str:
    """Encode ids as a canonical JSON array, keeping order."""
    return json.dumps(list(ids))


def append_occasion(ids: List[str], occasion_id: str) -> List[str]:
    if occasion_id in ids:
        return list(ids)
    return [*ids, occasion_id]


def remove_occasion(ids: List[str], occasion_id: str) -> List[str]:
    return [item for item in ids if item != occasion_id]
