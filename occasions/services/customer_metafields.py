"""Customer metafield reads and writes."""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from occasions.services.shopify_client import ShopifyClient, raise_user_errors

logger = logging.getLogger(__name__)


CUSTOMER_METAFIELD_QUERY = """
query customerMetafield($customerId: ID!, $namespace: String!, $key: String!) {
  customer(id: $customerId) {
    id
    metafield(namespace: $namespace, key: $key) {
      id
      value
    }
  }
}
"""

CUSTOMER_REWARD_STATE_QUERY = """
query customerRewardState(
  $customerId: ID!
  $flagNamespace: String!
  $flagKey: String!
  $pointsNamespace: String!
  $pointsKey: String!
) {
  customer(id: $customerId) {
    id
    rewardFlag: metafield(namespace: $flagNamespace, key: $flagKey) {
      value
    }
    loyaltyPoints: metafield(namespace: $pointsNamespace, key: $pointsKey) {
      value
    }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      namespace
      key
      value
    }
    userErrors {
      field
      message
    }
  }
}
"""


@dataclass
class MetafieldWrite:
    namespace: str
    key: str
    value: str
    type: str = "single_line_text_field"

    def as_input(self, owner_id: str) -> dict:
        return {
            "ownerId": owner_id,
            "namespace": self.namespace,
            "key": self.key,
            "value": self.value,
            "type": self.type,
        }


def _value_of(node: Optional[dict]) -> Optional[str]:
    if not node:
        return None
    return node.get("value")


class CustomerMetafields:
    """Reads and writes metafields owned by a single customer."""

    def __init__(self, client: ShopifyClient):
        self.client = client

    def get_value(self, customer_gid: str, namespace: str, key: str) -> Optional[str]:
        data = self.client.graphql(
            CUSTOMER_METAFIELD_QUERY,
            {"customerId": customer_gid, "namespace": namespace, "key": key},
        )
        return _value_of((data.get("customer") or {}).get("metafield"))

    def get_reward_state(
        self,
        customer_gid: str,
        flag_namespace: str,
        flag_key: str,
        points_namespace: str,
        points_key: str,
    ) -> Tuple[Optional[str], Optional[str]]:
        """Return the raw (flag, points) values; None when unset."""
        data = self.client.graphql(
            CUSTOMER_REWARD_STATE_QUERY,
            {
                "customerId": customer_gid,
                "flagNamespace": flag_namespace,
                "flagKey": flag_key,
                "pointsNamespace": points_namespace,
                "pointsKey": points_key,
            },
        )
        customer = data.get("customer") or {}
        return _value_of(customer.get("rewardFlag")), _value_of(customer.get("loyaltyPoints"))

    def set_values(self, customer_gid: str, writes: List[MetafieldWrite]) -> None:
        """Write all entries in a single metafieldsSet call."""
        data = self.client.graphql(
            METAFIELDS_SET_MUTATION,
            {"metafields": [w.as_input(customer_gid) for w in writes]},
        )
        raise_user_errors(data.get("metafieldsSet"), "Metafield update failed")
        logger.debug(
            "Set metafields %s on %s",
            ", ".join(f"{w.namespace}.{w.key}={w.value}" for w in writes),
            customer_gid,
        )
