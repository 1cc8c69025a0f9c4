from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from functools import lru_cache
from typing import List, Optional
import enum


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or invalid."""


class AuthProviderType(str, enum.Enum):
    SUPABASE = "supabase"  # Remote lookup against the Supabase auth API
    JWT = "jwt"            # Local verification of HS256 access tokens


class AdminAuthPolicy(str, enum.Enum):
    ALLOW_PROVIDER_SUPER_ADMIN = "allow_provider_super_admin"
    REQUIRE_PROFILE_ROLE_ONLY = "require_profile_role_only"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Database - privileged connection, bypasses row-level security
    database_url: str = Field(alias="DATABASE_URL")

    # Token verification
    auth_provider: AuthProviderType = Field(default=AuthProviderType.SUPABASE, alias="AUTH_PROVIDER")
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    service_role_key: str = Field(default="", alias="SUPABASE_SERVICE_ROLE_KEY")
    # Restricted key, only ever used to verify user tokens
    anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("anon_key", "SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"),
    )
    jwt_secret: str = Field(default="", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    auth_timeout_seconds: float = Field(default=10.0, alias="AUTH_TIMEOUT_SECONDS")

    admin_auth_policy: AdminAuthPolicy = Field(
        default=AdminAuthPolicy.ALLOW_PROVIDER_SUPER_ADMIN,
        alias="ADMIN_AUTH_POLICY",
    )

    # CORS - comma-separated
    allowed_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        alias="ALLOWED_ORIGINS",
    )

    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    # Only behind a proxy that sets X-Forwarded-For itself
    trust_proxy_headers: bool = Field(default=False, alias="TRUST_PROXY_HEADERS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: Optional[bool] = Field(default=None, alias="LOG_JSON")

    enable_debug_endpoints: bool = Field(default=False, alias="ENABLE_DEBUG_ENDPOINTS")
    create_tables: bool = Field(default=False, alias="CREATE_TABLES")

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosted Postgres gives postgres://; SQLAlchemy expects postgresql://."""
        v = v.strip()
        if not v:
            raise ValueError("DATABASE_URL is required and cannot be empty")
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @model_validator(mode="after")
    def check_auth_provider_config(self) -> "Settings":
        if self.auth_provider == AuthProviderType.SUPABASE:
            missing = [
                name for name, value in (
                    ("SUPABASE_URL", self.supabase_url),
                    ("SUPABASE_SERVICE_ROLE_KEY", self.service_role_key),
                ) if not value
            ]
            if missing:
                raise ValueError(f"{', '.join(missing)} required when AUTH_PROVIDER=supabase")
        elif not self.jwt_secret:
            raise ValueError("JWT_SECRET required when AUTH_PROVIDER=jwt")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def use_json_logs(self) -> bool:
        if self.log_json is None:
            return self.is_production
        return self.log_json

    @property
    def debug_endpoints_enabled(self) -> bool:
        return self.enable_debug_endpoints and not self.is_production

    @property
    def token_verification_key(self) -> str:
        """Key sent as `apikey` when verifying tokens; falls back to the service key."""
        return self.anon_key or self.service_role_key

    @property
    def cors_origins(self) -> List[str]:
        """
        Parse allowed origins from comma-separated string.
        Returns a list suitable for CORSMiddleware.
        """
        origins = []
        for origin in self.allowed_origins.split(","):
            origin = origin.strip().rstrip("/")
            if origin and origin not in origins:
                origins.append(origin)
        return origins or ["http://localhost:5173"]


def load_settings(**overrides) -> Settings:
    """Build and validate settings, raising ConfigurationError on any problem."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "settings"
            problems.append(f"{location}: {error.get('msg')}")
        raise ConfigurationError("Invalid configuration - " + "; ".join(problems)) from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return load_settings()
