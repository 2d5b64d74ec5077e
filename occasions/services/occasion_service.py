"""Occasion listing for a customer."""
import logging
from typing import List

from occasions.config import Settings
from occasions.gid import customer_gid
from occasions.schemas import Occasion, OccasionsResponse
from occasions.services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


CUSTOMER_OCCASIONS_QUERY = """
query customerOccasions($customerId: ID!, $namespace: String!, $key: String!, $first: Int!, $after: String) {
  customer(id: $customerId) {
    id
    metafield(namespace: $namespace, key: $key) {
      value
      references(first: $first, after: $after) {
        pageInfo { hasNextPage endCursor }
        nodes {
          ... on Metaobject {
            id
            handle
            type
            fields {
              key
              value
            }
          }
        }
      }
    }
  }
}
"""


class OccasionService:
    """Reads the live customer_event records referenced by a customer."""

    PAGE_SIZE = 50

    def __init__(self, client: ShopifyClient, config: Settings):
        self.client = client
        self.config = config

    def list_occasions(self, customer: str) -> OccasionsResponse:
        owner = customer_gid(customer)
        occasions: List[Occasion] = []
        for node in self._referenced_nodes(owner):
            # Deleted metaobjects come back as empty nodes or not at all
            if not node or not node.get("id"):
                continue
            if node.get("type") and node["type"] != self.config.event_metaobject_type:
                continue
            fields = {f["key"]: f.get("value") or "" for f in node.get("fields") or []}
            occasions.append(
                Occasion(
                    id=node["id"],
                    handle=node.get("handle"),
                    occasion_name=fields.get("occasion_name", ""),
                    type=fields.get("type", ""),
                    date=fields.get("date", ""),
                    other_occasion=fields.get("other_occasion", ""),
                )
            )

        logger.info("Found %d occasions for %s", len(occasions), owner)
        return OccasionsResponse(occasions=occasions, count=len(occasions))

    def _referenced_nodes(self, owner: str) -> List[dict]:
        """All nodes referenced by the occasion list metafield, page by page."""
        nodes: List[dict] = []
        has_next_page = True
        cursor = None

        while has_next_page:
            data = self.client.graphql(
                CUSTOMER_OCCASIONS_QUERY,
                {
                    "customerId": owner,
                    "namespace": self.config.occasions_namespace,
                    "key": self.config.occasions_list_key,
                    "first": self.PAGE_SIZE,
                    "after": cursor,
                },
            )
            metafield = (data.get("customer") or {}).get("metafield") or {}
            references = metafield.get("references") or {}
            nodes.extend(references.get("nodes") or [])

            page_info = references.get("pageInfo") or {}
            has_next_page = page_info.get("hasNextPage", False)
            cursor = page_info.get("endCursor")

        return nodes
