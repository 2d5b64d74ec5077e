"""Application configuration."""
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App settings
    app_name: str = "Customer Occasions API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Shopify
    shopify_store_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2025-01"
    shopify_timeout_seconds: float = 30.0
    shopify_throttle_backoff_seconds: float = 2.0

    # Metaobject
    event_metaobject_type: str = "customer_event"

    # Customer metafields kept in sync with the events
    occasions_namespace: str = "custom"
    occasions_list_key: str = "my_occasions"
    occasions_count_key: str = "no_occasions"
    reward_flag_namespace: str = "custom"
    reward_flag_key: str = "occasion_reward_granted"

    # Reward defaults, overridable per request
    default_points_target: int = 3
    default_points_value: int = 5
    default_points_field: str = "loyalty.points"

    # CORS
    cors_allow_origins: List[str] = ["*"]

    @property
    def shop_host(self) -> str:
        """Store host name; a bare store handle gets the myshopify suffix."""
        domain = self.shopify_store_domain.strip().lower()
        domain = domain.replace("https://", "").replace("http://", "").rstrip("/")
        if domain and "." not in domain:
            domain = f"{domain}.myshopify.com"
        return domain

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_host}/admin/api/{self.shopify_api_version}/graphql.json"

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shop_host and self.shopify_access_token)

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings object."""
    return settings
