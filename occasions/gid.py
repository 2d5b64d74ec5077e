"""Shopify global id helpers."""
from occasions.exceptions import ValidationError

GID_PREFIX = "gid://shopify/"


def to_gid(value, resource: str) -> str:
    """
    Normalize a raw numeric id or a full GID to the GID form.

    "123" -> "gid://shopify/Customer/123" for resource "Customer". A full GID
    must name the same resource and end in a numeric id.
    """
    if value is None:
        raise ValidationError(f"Missing {resource} id")
    text = str(value).strip()
    prefix = f"{GID_PREFIX}{resource}/"
    if text.startswith(prefix) and text[len(prefix):].isdigit():
        return text
    if text.isdigit():
        return f"{GID_PREFIX}{resource}/{text}"
    raise ValidationError(f"Invalid {resource} id: {text!r}")


def customer_gid(value) -> str:
    return to_gid(value, "Customer")


def metaobject_gid(value) -> str:
    return to_gid(value, "Metaobject")
