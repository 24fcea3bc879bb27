from typing import TYPE_CHECKING, Any, Dict, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from scimpatch.utils.schema_tree import SchemaConfig


DEFAULT_MUTABLE_USER_ATTRIBUTES_SCHEMA: Dict[str, Any] = {
    "userName": "user_name",
    "displayName": "display_name",
    "name": {
        "givenName": "given_name",
        "familyName": "family_name",
    },
    "emails": [
        {"type": "work", "value": "email"},
        {"type": "home", "value": "personal_email"},
    ],
    "phoneNumbers": [
        {"type": "work", "value": "phone_number"},
    ],
    "active": "active",
    "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User": {
        "department": "department",
        "employeeNumber": "employee_number",
    },
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Database Configuration
    database_url: str = Field("sqlite://db.sqlite3", description="Database URL used for company lookups")

    # Application Configuration
    app_name: str = Field("ScimPatch", description="Application name")
    environment: str = Field("development", description="Environment (development, staging, production)")
    debug: bool = Field(True, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # API Configuration
    api_prefix: str = Field("/scim/v2", description="API route prefix")
    filtered_params: List[str] = Field(["password", "api_token", "token"], description="Request params masked in logs")

    # Authentication
    jwt_secret: str = Field("change-me", description="Secret used to sign bearer tokens")
    jwt_algorithm: str = Field("HS256", description="Bearer token signing algorithm")
    basic_auth_model_searchable_attribute: str = Field("subdomain", description="Company field used to find the tenant")
    basic_auth_model_authenticatable_attribute: str = Field("api_token", description="Credential checked against the tenant")

    # Schemas
    mutable_user_attributes_schema: Dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_MUTABLE_USER_ATTRIBUTES_SCHEMA),
        description="SCIM attribute name -> storage location for PATCH operations",
    )
    mutable_user_attributes_filter_keys: List[str] = Field(
        ["type"],
        description="Sub-attributes of multi-valued attributes that only select an element",
    )

    # Server
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(8000, description="Server port")
    reload: bool = Field(True, description="Enable auto-reload")

    @field_validator("environment")
    def validate_environment(cls, v: str) -> str:
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def tortoise_orm_config(self) -> dict:
        return {
            "connections": {"default": self.database_url},
            "apps": {
                "models": {
                    "models": ["scimpatch.models"],
                    "default_connection": "default",
                }
            },
            "use_tz": True,
            "timezone": "UTC",
        }

    def schema_config(self) -> "SchemaConfig":
        """Build the immutable schema configuration shared by all requests."""
        from scimpatch.utils.schema_tree import SchemaConfig

        return SchemaConfig.from_mappings(
            self.mutable_user_attributes_schema,
            filter_attributes=self.mutable_user_attributes_filter_keys,
        )


# Create a singleton instance
settings = Settings()
