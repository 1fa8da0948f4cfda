import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.environment = os.getenv("ENVIRONMENT", "production").strip().lower()
        self.jwt_secret = self._get("JWT_SECRET")
        self.jwt_refresh_secret = self._get("JWT_REFRESH_SECRET")
        if self.jwt_secret == self.jwt_refresh_secret:
            raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must be different")
        self.jwt_expiry_time = os.getenv("JWT_EXPIRY_TIME", "12h").strip() or "12h"
        self.jwt_refresh_expiry_time = os.getenv("JWT_REFRESH_EXPIRY_TIME", "7d").strip() or "7d"
        self.basic_auth_enabled = self._get_bool("BASIC_AUTH_ENABLED", default=False)
        self.otp_expiration_minutes = self._get_int("OTP_EXPIRATION_MINUTES", default=5)
        if self.otp_expiration_minutes <= 0:
            raise RuntimeError("OTP_EXPIRATION_MINUTES must be a positive integer")
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/keyward.db")).resolve()
        self.redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.admin_default_email = (os.getenv("ADMIN_EMAIL") or "").strip().lower() or None
        self.admin_default_password = os.getenv("ADMIN_PASSWORD") or None
        if self.admin_default_password is not None and len(self.admin_default_password) < 6:
            raise RuntimeError("ADMIN_PASSWORD must be at least 6 characters")
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL", "")
        self.smtp_timeout_seconds = self._get_float("SMTP_TIMEOUT_SECONDS", default=10.0)
        if self.smtp_timeout_seconds <= 0:
            raise RuntimeError("SMTP_TIMEOUT_SECONDS must be positive")
        self.google_client_id = (os.getenv("GOOGLE_CLIENT_ID") or "").strip() or None
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be a number") from exc

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip().lower() in _TRUTHY
