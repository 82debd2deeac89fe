from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    APP_NAME: str = "BeBrand"
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./bebrand.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Placeholder secret keeps local/test runs working; real deployments override via env.
    JWT_SECRET: str = "test-jwt-secret"
    JWT_ALGORITHM: str = "HS256"

    # Paystack
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_API_BASE_URL: str = "https://api.paystack.co"
    PAYSTACK_CALLBACK_URL: Optional[str] = None
    PAYSTACK_TIMEOUT_SECONDS: float = 15.0
    CURRENCY: str = "NGN"

    # Email (Brevo transactional API)
    BREVO_API_KEY: str = ""
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    BREVO_SENDER_EMAIL: str = "noreply@bebrand.com"
    BREVO_SENDER_NAME: str = "BeBrand"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def paystack_enabled(self) -> bool:
        key = (self.PAYSTACK_SECRET_KEY or "").strip()
        return bool(key) and not key.startswith("your-")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
