"""Pydantic schemas for request/response validation."""
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator


class IdModel(BaseModel):
    """Accepts numeric ids posted as JSON numbers."""

    @field_validator("id", "customer", mode="before", check_fields=False)
    @classmethod
    def number_to_str(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


# ============================================================================
# Request Schemas
# ============================================================================
# Required fields are validated by the services so that a missing value is
# answered with the same 400 envelope as every other validation failure.

class EventRequest(IdModel):
    id: Optional[str] = None
    customer: Optional[str] = None
    date: Optional[str] = None
    occasion_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("occasion_type", "type"),
    )
    other_occasion: Optional[str] = None
    occasion_name: Optional[str] = None

    class Config:
        populate_by_name = True


class ChangeEventRequest(EventRequest):
    operation: Optional[str] = None


class DeleteEventRequest(IdModel):
    id: Optional[str] = None
    customer: Optional[str] = None


class OccasionsRequest(IdModel):
    customer: Optional[str] = None


class DefinitionRequest(BaseModel):
    type: Optional[str] = None
    field: Optional[str] = None


# ============================================================================
# Reward configuration
# ============================================================================

class RewardConfig(BaseModel):
    points_target: int = Field(ge=1)
    points_value: int = Field(ge=0)
    points_namespace: str
    points_key: str


# ============================================================================
# Response Schemas
# ============================================================================

class MetaobjectRecord(BaseModel):
    id: str
    handle: Optional[str] = None
    type: Optional[str] = None
    fields: Dict[str, Optional[str]] = {}


class SaveEventResponse(BaseModel):
    success: bool = True
    metaobject: MetaobjectRecord
    message: str


class DeleteEventResponse(BaseModel):
    success: bool = True
    deletedId: Optional[str] = None
    message: str = "Metaobject deleted successfully"


class Occasion(BaseModel):
    id: str
    handle: Optional[str] = None
    occasion_name: str = ""
    type: str = ""
    date: str = ""
    other_occasion: str = ""


class OccasionsResponse(BaseModel):
    success: bool = True
    occasions: List[Occasion] = []
    count: int = 0


class FieldDefinitionResponse(BaseModel):
    success: bool = True
    choices: List[Any] = []
    fieldDefinition: Dict[str, Any]
