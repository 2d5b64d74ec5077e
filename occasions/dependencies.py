"""FastAPI dependencies wiring settings, client and services per request."""
from functools import partial
from typing import Callable, Optional

from fastapi import Depends, Header
from pydantic import ValidationError as PydanticValidationError

from occasions.config import Settings, get_settings
from occasions.exceptions import ValidationError
from occasions.schemas import RewardConfig
from occasions.services import (
    DefinitionService,
    LedgerService,
    MetaobjectService,
    OccasionService,
    ShopifyClient,
)


def get_shopify_client(config: Settings = Depends(get_settings)) -> ShopifyClient:
    return ShopifyClient(config)


def get_metaobject_service(
    client: ShopifyClient = Depends(get_shopify_client),
    config: Settings = Depends(get_settings),
) -> MetaobjectService:
    return MetaobjectService(client, config)


def get_ledger_service(
    client: ShopifyClient = Depends(get_shopify_client),
    config: Settings = Depends(get_settings),
) -> LedgerService:
    return LedgerService(client, config)


def get_occasion_service(
    client: ShopifyClient = Depends(get_shopify_client),
    config: Settings = Depends(get_settings),
) -> OccasionService:
    return OccasionService(client, config)


def get_definition_service(
    client: ShopifyClient = Depends(get_shopify_client),
    config: Settings = Depends(get_settings),
) -> DefinitionService:
    return DefinitionService(client, config)


def build_reward_config(
    config: Settings,
    points_target: Optional[str] = None,
    points_value: Optional[str] = None,
    points_field: Optional[str] = None,
) -> RewardConfig:
    """
    Reward campaign settings from the X-Points-* header values.

    X-Points-Target, X-Points-Value and X-Points-Field ("namespace.key")
    override the server defaults so one deployment can serve several
    campaigns.
    """
    field = (points_field or config.default_points_field).strip()
    namespace, _, key = field.partition(".")
    if not namespace or not key or "." in key:
        raise ValidationError(f"Invalid points field {field!r}, expected 'namespace.key'")

    try:
        return RewardConfig(
            points_target=points_target if points_target is not None else config.default_points_target,
            points_value=points_value if points_value is not None else config.default_points_value,
            points_namespace=namespace,
            points_key=key,
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid reward configuration headers",
            [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
        )


def get_reward_config(
    x_points_target: Optional[str] = Header(None),
    x_points_value: Optional[str] = Header(None),
    x_points_field: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
) -> RewardConfig:
    return build_reward_config(config, x_points_target, x_points_value, x_points_field)


def get_reward_loader(
    x_points_target: Optional[str] = Header(None),
    x_points_value: Optional[str] = Header(None),
    x_points_field: Optional[str] = Header(None),
    config: Settings = Depends(get_settings),
) -> Callable[[], RewardConfig]:
    """Deferred get_reward_config, for endpoints that only reward on some paths."""
    return partial(build_reward_config, config, x_points_target, x_points_value, x_points_field)
