"""Shared fixtures: temporary SQLite store, fakeredis revocation store, recording email sender."""

from typing import Any, Dict, List, Optional, Tuple

import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from keyward.application.security.passwords import hash_password
from keyward.core.app_factory import build_container, create_application
from keyward.core.config import Settings
from keyward.domain.models import AccountStatus, AdminRole
from keyward.domain.ports.notifications import EmailTemplate
from keyward.infrastructure.persistence.sqlite import SQLiteDatabase
from keyward.infrastructure.repositories.admin_repository import AdminRepository
from keyward.infrastructure.repositories.user_repository import UserRepository

DEFAULT_PASSWORD = "Secret123"


class RecordingEmailSender:
    """Email collaborator double that keeps every message it is asked to send."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, EmailTemplate, Dict[str, Any]]] = []

    async def send_email(self, recipient: str, template: EmailTemplate, context: Dict[str, Any]) -> bool:
        self.sent.append((recipient, template, dict(context)))
        return True

    def last_code(self, recipient: str, template: Optional[EmailTemplate] = None) -> str:
        for sent_to, sent_template, context in reversed(self.sent):
            if sent_to == recipient and (template is None or sent_template == template):
                return context["code"]
        raise AssertionError(f"No email sent to {recipient}")

    def count(self, template: EmailTemplate) -> int:
        return sum(1 for _, sent_template, _ in self.sent if sent_template == template)


class UnavailableRedis:
    """Stands in for a Redis server that cannot be reached."""

    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    async def delete(self, key):
        raise RedisConnectionError("connection refused")

    async def ping(self):
        raise RedisConnectionError("connection refused")

    async def aclose(self):
        return None


@pytest.fixture
def settings(monkeypatch, tmp_path) -> Settings:
    monkeypatch.setenv("JWT_SECRET", "test-access-secret-0123456789abcdef")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdef")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "keyward.db"))
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6399/0")
    monkeypatch.setenv("ENVIRONMENT", "test")
    for key in (
        "ADMIN_EMAIL",
        "ADMIN_PASSWORD",
        "BASIC_AUTH_ENABLED",
        "JWT_EXPIRY_TIME",
        "JWT_REFRESH_EXPIRY_TIME",
        "GOOGLE_CLIENT_ID",
        "SMTP_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(key, raising=False)
    return Settings()


@pytest.fixture
def database(settings):
    db = SQLiteDatabase(settings.database_path)
    yield db
    db.close()


@pytest.fixture
def redis_client():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def container(settings, database, redis_client, email_sender):
    return build_container(settings, database, redis_client, email_sender=email_sender)


@pytest.fixture
def user_factory(database):
    repository = UserRepository(database)

    def _create(
        email: str = "jane@example.com",
        password: str = DEFAULT_PASSWORD,
        *,
        verified: bool = True,
        status: AccountStatus = AccountStatus.ACTIVE,
        deleted: bool = False,
    ):
        user = repository.create(
            email=email,
            password_hash=hash_password(password),
            first_name="Jane",
            last_name="Doe",
            email_verified=verified,
        )
        if status != AccountStatus.ACTIVE or deleted:
            user = repository.update(user.id, status=status, is_deleted=deleted or None)
        return user

    return _create


@pytest.fixture
def admin_factory(database):
    repository = AdminRepository(database)

    def _create(
        email: str = "admin@example.com",
        password: str = DEFAULT_PASSWORD,
        *,
        role: AdminRole = AdminRole.ADMIN,
        is_super: bool = False,
        status: AccountStatus = AccountStatus.ACTIVE,
    ):
        admin = repository.create(
            email=email,
            password_hash=hash_password(password),
            first_name="Ada",
            last_name="Admin",
            role=role,
            is_super=is_super,
        )
        if status != AccountStatus.ACTIVE:
            admin = repository.update(admin.id, status=status)
        return admin

    return _create


@pytest.fixture
def client(settings, database, redis_client, email_sender):
    app = create_application(settings)
    with TestClient(app) as test_client:
        app.state.container = build_container(settings, database, redis_client, email_sender=email_sender)
        yield test_client


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
