"""OTP Auth: configuration loaded from environment."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database (identity directory) ─────────────────────
    database_url: str = "sqlite+aiosqlite:///./otp_auth.db"

    # ── Key-value store ───────────────────────────────────
    kv_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"

    # ── Session tokens ────────────────────────────────────
    jwt_secret: str = "dev-secret-change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = Field(24, gt=0)

    # ── OTP ───────────────────────────────────────────────
    otp_length: int = Field(6, ge=4, le=10)
    otp_expiration_seconds: int = Field(120, gt=0)
    otp_rate_limit_count: int = Field(3, gt=0)
    otp_rate_limit_window_minutes: int = Field(10, gt=0)
    otp_address_limit_multiplier: int = Field(2, ge=1)

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Auth"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def otp_rate_limit_window_seconds(self) -> int:
        return self.otp_rate_limit_window_minutes * 60

    @property
    def jwt_expiration_seconds(self) -> int:
        return self.jwt_expiration_hours * 3600


# Singleton settings instance
settings = Settings()
