"""
Plannora settings.

One `Settings` object covers MongoDB, session tokens and cookies, the
fallback admin login, CORS, auth rate limits, security headers, logging,
metrics and chat paging. Values come from `PLANNORA_*` environment
variables or a `.env` file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Plannora API settings (e.g. `PLANNORA_MONGODB_URL` sets `mongodb_url`)."""

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="Plannora API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="API version"
    )
    api_prefix: str = Field(
        default="/api",
        description="API URL prefix"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="development",
        description="Environment: development|staging|production"
    )
    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=5001,
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Database Settings (MongoDB)
    # =========================================================================

    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL"
    )
    mongodb_database: str = Field(
        default="plannora",
        description="MongoDB database name"
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long the driver waits for a reachable server (ms)",
        gt=0
    )
    mongodb_max_pool_size: int = Field(
        default=10,
        description="Maximum connections kept by the MongoClient pool",
        gt=0,
        le=200
    )
    seed_vendors: bool = Field(
        default=True,
        description="Seed the vendor directory on startup when it is empty"
    )

    # =========================================================================
    # JWT Authentication Settings
    # =========================================================================

    jwt_secret_key: str = Field(
        default="change-this-secret-key-in-production-minimum-32-characters",
        description="Secret key for JWT token signing (MUST be changed in production)",
        min_length=32
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_expire_days: int = Field(
        default=30,
        description="Session token lifetime in days",
        gt=0,
        le=365
    )

    # =========================================================================
    # Session Cookie Settings
    # =========================================================================

    cookie_name: str = Field(
        default="token",
        description="Name of the cookie carrying the session token"
    )
    cookie_secure: bool = Field(
        default=False,
        description="Mark the session cookie as Secure (enable behind HTTPS)"
    )
    cookie_samesite: str = Field(
        default="lax",
        description="SameSite policy of the session cookie"
    )

    # =========================================================================
    # Fallback Admin
    # =========================================================================

    fallback_admin_email: str = Field(
        default="admin@example.com",
        description="Email accepted by the fallback admin login"
    )
    fallback_admin_password: Optional[str] = Field(
        default=None,
        description=(
            "Password accepted by the fallback admin login while the database "
            "is unreachable. Fallback login is disabled when unset."
        )
    )

    # =========================================================================
    # Password Hashing Settings
    # =========================================================================

    password_bcrypt_rounds: int = Field(
        default=10,
        description="BCrypt cost factor",
        ge=4,
        le=15
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials (cookies, authorization headers) in CORS"
    )
    cors_allow_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods"
    )
    cors_allow_headers: List[str] = Field(
        default=["*"],
        description="Allowed HTTP headers"
    )

    # =========================================================================
    # Rate Limiting Settings
    # =========================================================================

    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting on the authentication endpoints"
    )
    rate_limit_requests: int = Field(
        default=20,
        description="Max authentication attempts per window",
        gt=0,
        le=10000
    )
    rate_limit_window: int = Field(
        default=60,
        description="Rate limit window (seconds)",
        gt=0,
        le=3600
    )

    # =========================================================================
    # Security Settings
    # =========================================================================

    security_headers_enabled: bool = Field(
        default=True,
        description="Enable security headers (X-Frame-Options, etc.)"
    )
    security_require_https: bool = Field(
        default=False,
        description="Send HSTS header (enable in production behind TLS)"
    )
    security_hsts_max_age: int = Field(
        default=31536000,
        description="HSTS max age (seconds)"
    )

    # =========================================================================
    # Monitoring and Logging
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Pagination Settings
    # =========================================================================

    messages_default_limit: int = Field(
        default=50,
        description="Default number of chat messages per page",
        gt=0,
        le=500
    )
    messages_max_limit: int = Field(
        default=200,
        description="Maximum number of chat messages per page",
        gt=0,
        le=1000
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Upper-case standard level name."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Lower-case deployment name; `test` is used by the test suite."""
        allowed = ["development", "staging", "production", "test"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: List[str]) -> List[str]:
        """Fall back to allowing every origin when none are configured."""
        if not v:
            return ["*"]
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Validate JWT algorithm is a supported HMAC algorithm."""
        allowed = ["HS256", "HS384", "HS512"]
        if v not in allowed:
            raise ValueError(f"jwt_algorithm must be one of {allowed}, got: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("cookie_samesite")
    @classmethod
    def validate_cookie_samesite(cls, v: str) -> str:
        """Validate the SameSite policy."""
        allowed = ["lax", "strict", "none"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"cookie_samesite must be one of {allowed}, got: {v}")
        return v_lower

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Local development."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Production; hides /api/debug."""
        return self.environment == "production"

    @property
    def fallback_admin_enabled(self) -> bool:
        """Fallback admin login is only possible when a password is configured."""
        return bool(self.fallback_admin_email and self.fallback_admin_password)

    @property
    def jwt_expire_seconds(self) -> int:
        """Session lifetime in seconds (used for the cookie max-age)."""
        return self.jwt_expire_days * 24 * 60 * 60

    @property
    def rate_limit(self) -> str:
        """Rate limit expression understood by slowapi."""
        return f"{self.rate_limit_requests}/{self.rate_limit_window} seconds"

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="PLANNORA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings built once per process from the environment."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
