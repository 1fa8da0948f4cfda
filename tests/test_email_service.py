import asyncio
import logging
import smtplib

import pytest

from keyward.application.services.notifications import dispatch_email
from keyward.domain.ports.notifications import EmailTemplate
from keyward.services.email_service import EmailService


class ExplodingSender:
    async def send_email(self, recipient, template, context):
        raise RuntimeError("smtp down")


class StalledSender:
    async def send_email(self, recipient, template, context):
        await asyncio.sleep(60)
        return True


class RecordingSMTP:
    instances = []

    def __init__(self, host, port, timeout):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.messages = []
        RecordingSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        pass

    def login(self, username, password):
        self.credentials = (username, password)

    def send_message(self, msg):
        self.messages.append(msg)


def test_render_fills_template():
    subject, body = EmailService.render(
        EmailTemplate.ADMIN_PASSWORD_RESET,
        {"name": "Ada Admin", "code": "4821", "expiry_minutes": 5, "request_ip": "10.0.0.1"},
    )

    assert "Admin password reset" in subject
    assert "Hi Ada Admin" in body
    assert "4821" in body
    assert "10.0.0.1" in body


@pytest.mark.asyncio
async def test_unconfigured_smtp_logs_message(caplog):
    service = EmailService()

    with caplog.at_level(logging.INFO, logger="keyward.services.email_service"):
        sent = await service.send_email("jane@example.com", EmailTemplate.EMAIL_VERIFICATION, {"code": "123456"})

    assert sent is True
    assert service.enabled is False
    assert "123456" in caplog.text


@pytest.mark.asyncio
async def test_dispatch_email_never_raises():
    assert await dispatch_email(ExplodingSender(), "jane@example.com", EmailTemplate.EMAIL_VERIFICATION, {}) is False
    assert await dispatch_email(None, "jane@example.com", EmailTemplate.EMAIL_VERIFICATION, {}) is False


@pytest.mark.asyncio
async def test_dispatch_email_gives_up_after_timeout(caplog):
    loop = asyncio.get_running_loop()
    started = loop.time()

    with caplog.at_level(logging.WARNING, logger="keyward.application.services.notifications"):
        sent = await dispatch_email(
            StalledSender(), "jane@example.com", EmailTemplate.EMAIL_VERIFICATION, {}, timeout=0.05
        )

    assert sent is False
    assert loop.time() - started < 5
    assert "timed out" in caplog.text


@pytest.mark.asyncio
async def test_smtp_connection_uses_configured_timeout(monkeypatch):
    RecordingSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", RecordingSMTP)
    service = EmailService(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="pw",
        from_email="no-reply@example.com",
        timeout_seconds=3.5,
    )

    sent = await service.send_email("jane@example.com", EmailTemplate.EMAIL_VERIFICATION, {"code": "123456"})

    assert sent is True
    [connection] = RecordingSMTP.instances
    assert (connection.host, connection.port, connection.timeout) == ("smtp.example.com", 2525, 3.5)
    assert connection.messages[0]["To"] == "jane@example.com"
