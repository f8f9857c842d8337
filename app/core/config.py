# python
# app/core/config.py
"""Configuration settings for the Gemini Chat API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class RateLimitBackendEnum(str, Enum):
    memory = "memory"
    redis = "redis"


SUPPORTED_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
)


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Gemini Chat API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Authentication (Clerk) =====
    clerk_secret_key: str | None = Field(default=None, description="Clerk secret key")
    clerk_api_url: AnyHttpUrl = Field(default="https://api.clerk.com", description="Clerk API URL")
    clerk_jwks_url: str | None = Field(
        default=None, description="JWKS endpoint of the Clerk frontend API"
    )
    clerk_issuer: str | None = Field(default=None, description="Expected JWT issuer")
    clerk_verify_signature: bool = Field(
        default=True, description="Verify JWT signatures against the Clerk JWKS"
    )

    # ===== AI Service (Gemini) =====
    default_model: str = Field(default="gemini-2.5-flash", description="Model used when none is selected")
    ai_temperature: float = Field(default=0.7, description="Sampling temperature for chat generation")
    ai_stream_flush_batch_size: int = Field(
        default=5, description="Number of streamed chunks between message patches"
    )
    ai_request_timeout: int = Field(default=120, description="AI stream timeout in seconds")

    # ===== File Storage Settings (MinIO / S3 compatible) =====
    minio_endpoint: str = Field(default="localhost:9000", description="MinIO/S3 endpoint host:port")
    minio_access_key: str | None = Field(default=None, description="MinIO access key")
    minio_secret_key: str | None = Field(default=None, description="MinIO secret key")
    minio_bucket: str = Field(default="chat-attachments", description="Bucket for attachments")
    minio_secure: bool = Field(default=False, description="Use TLS for MinIO")
    upload_url_expiry_seconds: int = Field(default=3600, description="Presigned URL lifetime")

    # ===== Redis Configuration =====
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")

    # ===== Application Limits =====
    max_attachment_size: int = Field(
        default=10 * 1024 * 1024, description="Largest attachment sent to the model (10 MiB)"
    )
    max_message_length: int = Field(default=10000, description="Maximum message content length")
    max_title_length: int = Field(default=200, description="Maximum conversation title length")
    max_api_key_length: int = Field(default=500, description="Maximum stored API key length")

    # ===== Rate Limiting =====
    rate_limit_backend: RateLimitBackendEnum = Field(
        default=RateLimitBackendEnum.memory, description="Rate limiter store"
    )
    ai_rate_limit_requests: int = Field(default=10, description="Generation requests per user per period")
    ai_rate_limit_period: int = Field(default=60, description="Generation rate limit period in seconds")

    # ===== Retention =====
    retention_days: int = Field(default=30, description="Days before idle conversations are removed")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Background Tasks (Celery) =====
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2", description="Celery result backend"
    )

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def has_file_storage(self) -> bool:
        return bool(self.minio_access_key and self.minio_secret_key)

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
        return v

    @field_validator("default_model")
    @classmethod
    def validate_default_model(cls, v):
        if v not in SUPPORTED_MODELS:
            raise ValueError(f"Default model must be one of: {', '.join(SUPPORTED_MODELS)}")
        return v

    @field_validator("max_attachment_size")
    @classmethod
    def validate_attachment_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum attachment size cannot exceed 100MB")
        return v

    @field_validator("ai_stream_flush_batch_size")
    @classmethod
    def validate_flush_batch_size(cls, v):
        if v < 1:
            raise ValueError("Stream flush batch size must be at least 1")
        return v


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.is_production and not settings.clerk_jwks_url:
            errors.append("CLERK_JWKS_URL is required in production")
        if settings.is_production and not settings.has_file_storage:
            errors.append("MINIO_ACCESS_KEY and MINIO_SECRET_KEY are required in production")
        if settings.is_production and not settings.clerk_verify_signature:
            errors.append("CLERK_VERIFY_SIGNATURE cannot be disabled in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "RateLimitBackendEnum",
    "SUPPORTED_MODELS",
]
