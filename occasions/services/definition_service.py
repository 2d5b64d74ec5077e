"""Metaobject definition lookups for the event form."""
import json
import logging
from typing import Any, List, Optional

from occasions.config import Settings
from occasions.exceptions import NotFoundError, ValidationError
from occasions.schemas import FieldDefinitionResponse
from occasions.services.shopify_client import ShopifyClient

logger = logging.getLogger(__name__)


METAOBJECT_DEFINITION_QUERY = """
query metaobjectDefinitionByType($type: String!) {
  metaobjectDefinitionByType(type: $type) {
    id
    type
    fieldDefinitions {
      key
      name
      type {
        name
      }
      validations {
        name
        value
      }
    }
  }
}
"""


def extract_choices(field_definition: dict) -> List[Any]:
    """Return the decoded `choices` validation of a field, or []."""
    choices: List[Any] = []
    for validation in field_definition.get("validations") or []:
        if validation.get("name") != "choices" or not validation.get("value"):
            continue
        try:
            parsed = json.loads(validation["value"])
        except ValueError:
            logger.warning("Unreadable choices on field %s", field_definition.get("key"))
            continue
        if isinstance(parsed, list):
            choices = parsed
    return choices


class DefinitionService:
    def __init__(self, client: ShopifyClient, config: Settings):
        self.client = client
        self.config = config

    def get_field_definition(self, type_name: Optional[str], field: Optional[str]) -> FieldDefinitionResponse:
        type_name = type_name or self.config.event_metaobject_type
        if not field:
            raise ValidationError("Missing field key")

        data = self.client.graphql(METAOBJECT_DEFINITION_QUERY, {"type": type_name})
        definition = data.get("metaobjectDefinitionByType")
        if not definition:
            raise NotFoundError(f"Metaobject definition not found for type: {type_name}")

        field_definition = next(
            (fd for fd in definition.get("fieldDefinitions") or [] if fd.get("key") == field),
            None,
        )
        if not field_definition:
            raise NotFoundError(f"Field not found: {field}")

        return FieldDefinitionResponse(
            choices=extract_choices(field_definition),
            fieldDefinition=field_definition,
        )
