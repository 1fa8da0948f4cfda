import pytest

from keyward.core.config import Settings


@pytest.fixture(autouse=True)
def base_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "access-secret")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "refresh-secret")
    for key in (
        "ENVIRONMENT",
        "ADMIN_EMAIL",
        "ADMIN_PASSWORD",
        "BASIC_AUTH_ENABLED",
        "JWT_EXPIRY_TIME",
        "JWT_REFRESH_EXPIRY_TIME",
        "OTP_EXPIRATION_MINUTES",
        "SMTP_PORT",
        "SMTP_TIMEOUT_SECONDS",
        "GOOGLE_CLIENT_ID",
        "CORS_ALLOW_ORIGINS",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings()

    assert settings.environment == "production"
    assert settings.is_development is False
    assert settings.jwt_expiry_time == "12h"
    assert settings.jwt_refresh_expiry_time == "7d"
    assert settings.basic_auth_enabled is False
    assert settings.otp_expiration_minutes == 5
    assert settings.admin_default_email is None
    assert settings.cors_allow_origins == ["*"]
    assert settings.smtp_timeout_seconds == 10.0
    assert settings.google_client_id is None


def test_missing_jwt_secret_is_fatal(monkeypatch):
    monkeypatch.delenv("JWT_SECRET")

    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        Settings()


def test_identical_secrets_are_rejected(monkeypatch):
    monkeypatch.setenv("JWT_REFRESH_SECRET", "access-secret")

    with pytest.raises(RuntimeError, match="must be different"):
        Settings()


def test_short_admin_password_is_rejected(monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "abc")

    with pytest.raises(RuntimeError, match="ADMIN_PASSWORD"):
        Settings()


def test_overrides(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Development")
    monkeypatch.setenv("ADMIN_EMAIL", " Root@Example.com ")
    monkeypatch.setenv("BASIC_AUTH_ENABLED", "true")
    monkeypatch.setenv("OTP_EXPIRATION_MINUTES", "10")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")

    settings = Settings()

    assert settings.is_development is True
    assert settings.admin_default_email == "root@example.com"
    assert settings.basic_auth_enabled is True
    assert settings.otp_expiration_minutes == 10
    assert settings.cors_allow_origins == ["https://a.example", "https://b.example"]


def test_non_integer_setting_is_fatal(monkeypatch):
    monkeypatch.setenv("SMTP_PORT", "abc")

    with pytest.raises(RuntimeError, match="SMTP_PORT"):
        Settings()


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_bad_smtp_timeout_is_fatal(monkeypatch, value):
    monkeypatch.setenv("SMTP_TIMEOUT_SECONDS", value)

    with pytest.raises(RuntimeError, match="SMTP_TIMEOUT_SECONDS"):
        Settings()


def test_google_client_id_is_read(monkeypatch):
    monkeypatch.setenv("SMTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", " web-client.apps.googleusercontent.com ")

    settings = Settings()

    assert settings.smtp_timeout_seconds == 2.5
    assert settings.google_client_id == "web-client.apps.googleusercontent.com"
