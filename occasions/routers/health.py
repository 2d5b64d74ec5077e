"""Health check and status endpoints."""
from fastapi import APIRouter, Depends

from occasions.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
async def health_check(config: Settings = Depends(get_settings)):
    """Check API status and whether Shopify is configured."""
    return {
        "status": "healthy" if config.shopify_configured else "degraded",
        "shopify_configured": config.shopify_configured,
    }


@router.get("/config")
async def get_config(config: Settings = Depends(get_settings)):
    """Get current configuration (non-sensitive)."""
    return {
        "shopify_shop": config.shop_host,
        "shopify_api_version": config.shopify_api_version,
        "event_metaobject_type": config.event_metaobject_type,
        "metafields": {
            "occasions_list": f"{config.occasions_namespace}.{config.occasions_list_key}",
            "occasions_count": f"{config.occasions_namespace}.{config.occasions_count_key}",
            "reward_flag": f"{config.reward_flag_namespace}.{config.reward_flag_key}",
        },
        "reward_defaults": {
            "points_target": config.default_points_target,
            "points_value": config.default_points_value,
            "points_field": config.default_points_field,
        },
    }
