"""Application configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="ROWGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Row security
    secure_enabled: bool = Field(
        default=True,
        description="Filter secured rows unless a request switches it off",
    )
    secure_attribute: str = Field(default="rbac_on", description="Secured flag field")
    secure_item_attribute: str = Field(
        default="rbac_item",
        description="Field holding the permission name",
    )
    access_roles_field: str = Field(
        default="secure_access_roles",
        description="Request body field with the desired role list",
    )
    item_prefix: str = Field(default="ACCESS_", description="Derived permission name prefix")

    # Keycloak OIDC
    keycloak_url: str = Field(
        default="http://localhost:8080",
        description="Keycloak server URL",
    )
    keycloak_realm: str = Field(default="rowguard", description="Keycloak realm")
    keycloak_client_id: str = Field(default="rowguard-api", description="Keycloak client ID")
    keycloak_client_secret: str = Field(default="", description="Keycloak client secret")
    admin_role: str = Field(default="admin", description="Realm role granting admin bypass")

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
