"""Error taxonomy shared by services and routers."""
from typing import Any, Dict, List, Optional


class OccasionsError(Exception):
    """Base error. Carries the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(OccasionsError):
    """Missing or malformed input from the caller."""

    status_code = 400


class RemoteValidationError(OccasionsError):
    """Shopify rejected the request (userErrors or GraphQL errors)."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.errors = [
            {"field": _field_path(err.get("field")), "message": err.get("message", "")}
            for err in (errors or [])
        ]
        super().__init__(message, self.errors)


class NotFoundError(OccasionsError):
    status_code = 404


class ConfigurationError(OccasionsError):
    """Shopify credentials are not configured."""

    status_code = 500


class RemoteUnavailableError(OccasionsError):
    """Transport failure, HTTP error status or unreadable body from Shopify."""

    status_code = 502


class ReconciliationError(OccasionsError):
    """Failure while syncing customer metafields. Never surfaced to callers."""


def _field_path(field: Any) -> Optional[str]:
    # userErrors report the field as a path list, e.g. ["metaobject", "fields", "0"]
    if field is None:
        return None
    if isinstance(field, (list, tuple)):
        return ".".join(str(part) for part in field)
    return str(field)
