"""Occasion listing and form metadata router."""
from fastapi import APIRouter, Depends

from occasions.dependencies import get_definition_service, get_occasion_service
from occasions.exceptions import ValidationError
from occasions.schemas import (
    DefinitionRequest,
    FieldDefinitionResponse,
    OccasionsRequest,
    OccasionsResponse,
)
from occasions.services import DefinitionService, OccasionService

router = APIRouter()


@router.post("/get-occasions", response_model=OccasionsResponse)
def get_occasions(
    request: OccasionsRequest,
    service: OccasionService = Depends(get_occasion_service),
):
    """List the customer's live occasions."""
    if not request.customer:
        raise ValidationError("Missing customer GID")
    return service.list_occasions(request.customer)


@router.post("/get-metaobject-definition", response_model=FieldDefinitionResponse)
def get_metaobject_definition(
    request: DefinitionRequest,
    service: DefinitionService = Depends(get_definition_service),
):
    """Get a metaobject field definition and its allowed choices."""
    return service.get_field_definition(request.type, request.field)
