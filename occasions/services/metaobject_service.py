"""Metaobject service layer - create/update/delete of customer events."""
import logging
from typing import Dict, List, Optional

from occasions.config import Settings
from occasions.exceptions import RemoteUnavailableError, ValidationError
from occasions.gid import customer_gid, metaobject_gid
from occasions.schemas import DeleteEventRequest, EventRequest, MetaobjectRecord
from occasions.services.shopify_client import ShopifyClient, raise_user_errors

logger = logging.getLogger(__name__)


METAOBJECT_FIELDS_FRAGMENT = """
  id
  handle
  type
  fields {
    key
    value
  }
"""

METAOBJECT_CREATE_MUTATION = """
mutation metaobjectCreate($metaobject: MetaobjectCreateInput!) {
  metaobjectCreate(metaobject: $metaobject) {
    metaobject {%s}
    userErrors {
      field
      message
    }
  }
}
""" % METAOBJECT_FIELDS_FRAGMENT

METAOBJECT_UPDATE_MUTATION = """
mutation metaobjectUpdate($id: ID!, $metaobject: MetaobjectUpdateInput!) {
  metaobjectUpdate(id: $id, metaobject: $metaobject) {
    metaobject {%s}
    userErrors {
      field
      message
    }
  }
}
""" % METAOBJECT_FIELDS_FRAGMENT

METAOBJECT_DELETE_MUTATION = """
mutation metaobjectDelete($id: ID!) {
  metaobjectDelete(id: $id) {
    deletedId
    userErrors {
      field
      message
    }
  }
}
"""

REQUIRED_EVENT_FIELDS = ("customer", "date", "occasion_type", "occasion_name")


def parse_metaobject(node: Optional[dict]) -> MetaobjectRecord:
    """Flatten a metaobject node into a record with a key -> value map."""
    if not node or not node.get("id"):
        raise RemoteUnavailableError("Shopify returned no metaobject")
    fields = {f["key"]: f.get("value") for f in node.get("fields") or []}
    return MetaobjectRecord(
        id=node["id"],
        handle=node.get("handle"),
        type=node.get("type"),
        fields=fields,
    )


class MetaobjectService:
    """Service for mutating customer_event metaobjects."""

    def __init__(self, client: ShopifyClient, config: Settings):
        self.client = client
        self.config = config

    def validate_event(self, event: EventRequest) -> None:
        missing = [name for name in REQUIRED_EVENT_FIELDS if not getattr(event, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", {"missing": missing})

    def _event_fields(self, event: EventRequest, owner_gid: str) -> List[Dict[str, str]]:
        return [
            {"key": "customer", "value": owner_gid},
            {"key": "date", "value": event.date},
            {"key": "type", "value": event.occasion_type},
            {"key": "other_occasion", "value": event.other_occasion or ""},
            {"key": "occasion_name", "value": event.occasion_name},
        ]

    def create_event(self, event: EventRequest) -> MetaobjectRecord:
        self.validate_event(event)
        owner_gid = customer_gid(event.customer)

        data = self.client.graphql(
            METAOBJECT_CREATE_MUTATION,
            {
                "metaobject": {
                    "type": self.config.event_metaobject_type,
                    "fields": self._event_fields(event, owner_gid),
                }
            },
            retry_throttled=True,
        )
        result = data.get("metaobjectCreate")
        raise_user_errors(result)
        record = parse_metaobject((result or {}).get("metaobject"))
        logger.info("Created %s %s for %s", self.config.event_metaobject_type, record.id, owner_gid)
        return record

    def update_event(self, event: EventRequest) -> MetaobjectRecord:
        if not event.id:
            raise ValidationError("Missing occasion ID")
        self.validate_event(event)
        event_gid = metaobject_gid(event.id)
        owner_gid = customer_gid(event.customer)

        data = self.client.graphql(
            METAOBJECT_UPDATE_MUTATION,
            {"id": event_gid, "metaobject": {"fields": self._event_fields(event, owner_gid)}},
            retry_throttled=True,
        )
        result = data.get("metaobjectUpdate")
        raise_user_errors(result)
        record = parse_metaobject((result or {}).get("metaobject"))
        logger.info("Updated %s %s for %s", self.config.event_metaobject_type, record.id, owner_gid)
        return record

    def save_event(self, event: EventRequest) -> MetaobjectRecord:
        """Create the event, or update it when an id is given."""
        if event.id:
            return self.update_event(event)
        return self.create_event(event)

    def delete_event(self, request: DeleteEventRequest) -> str:
        """Delete an event and return the deleted GID."""
        if not request.id:
            raise ValidationError("Missing occasion ID")
        if not request.customer:
            raise ValidationError("Missing customer GID")
        customer_gid(request.customer)
        event_gid = metaobject_gid(request.id)

        data = self.client.graphql(
            METAOBJECT_DELETE_MUTATION,
            {"id": event_gid},
            retry_throttled=True,
        )
        result = data.get("metaobjectDelete")
        raise_user_errors(result)
        deleted_id = (result or {}).get("deletedId") or event_gid
        logger.info("Deleted %s %s", self.config.event_metaobject_type, deleted_id)
        return deleted_id
