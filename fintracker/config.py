# fintracker/config.py
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-insecure-jwt-secret-change-me-before-deploying"

DEFAULT_CORS_ORIGINS = ",".join(
    [
        "http://localhost:5173",
        "http://localhost:3000",
        "https://fintracker-frontend.vercel.app",
    ]
)


class Settings(BaseSettings):
    """Runtime configuration, read from the environment and an optional ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(
        "development",
        validation_alias=AliasChoices("environment", "node_env"),
        description="'production' turns on the HTTPS redirect and verified TLS to the store.",
    )
    host: str = Field("0.0.0.0", description="Interface uvicorn binds to.")
    port: int = Field(5000, ge=1, le=65535)
    log_level: str = Field("INFO")

    database_url: str = Field("sqlite:///./local.db")
    database_sslmode: str = Field(
        "verify-full",
        description="libpq sslmode used in production.",
    )
    database_sslrootcert: Optional[str] = Field(
        None,
        description="CA bundle for the store certificate; 'system' uses the OS trust store.",
    )
    database_pool_timeout: float = Field(10.0, gt=0)
    database_connect_timeout: int = Field(10, gt=0)
    database_statement_timeout_ms: int = Field(15000, ge=0)
    create_tables: bool = Field(True)

    jwt_secret: str = Field(DEV_JWT_SECRET)
    jwt_algorithm: str = Field("HS256")
    jwt_expires_minutes: int = Field(60, gt=0)
    bcrypt_rounds: int = Field(10, ge=4, le=31)
    enforce_token_identity: bool = Field(
        False,
        description="Require a bearer token on transaction routes and match its userId claim.",
    )

    cors_origins: str = Field(DEFAULT_CORS_ORIGINS, description="Comma separated origins.")
    cors_allow_credentials: bool = Field(True)

    @field_validator("environment")
    @classmethod
    def _normalise_environment(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def _require_real_secret_in_production(self) -> "Settings":
        if self.is_production and self.jwt_secret == DEV_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set when ENVIRONMENT=production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
