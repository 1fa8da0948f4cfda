"""Service for sending emails."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional, Tuple

from keyward.domain.ports.notifications import EmailTemplate

logger = logging.getLogger(__name__)

# template -> (subject, plain-text body); bodies are ``str.format`` templates.
_TEMPLATES: Dict[EmailTemplate, Tuple[str, str]] = {
    EmailTemplate.EMAIL_VERIFICATION: (
        "Verify your email - Keyward",
        "Hi {name},\n\n"
        "Your verification code is {code}.\n"
        "It expires in {expiry_minutes} minutes.\n\n"
        "If you did not create an account you can ignore this email.",
    ),
    EmailTemplate.USER_PASSWORD_RESET: (
        "Your password reset code - Keyward",
        "Hi {name},\n\n"
        "Use the code {code} to reset your password.\n"
        "It expires in {expiry_minutes} minutes.\n\n"
        "If you did not request a reset you can ignore this email.",
    ),
    EmailTemplate.ADMIN_PASSWORD_RESET: (
        "Admin password reset code - Keyward",
        "Hi {name},\n\n"
        "A password reset was requested for your admin account from IP {request_ip}.\n"
        "Your code is {code}; it expires in {expiry_minutes} minutes.\n\n"
        "If this wasn't you, contact another administrator.",
    ),
}


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Keyward",
        timeout_seconds: float = 10.0,
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port or 587
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.timeout_seconds = timeout_seconds
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    async def send_email(self, recipient: str, template: EmailTemplate, context: Dict[str, Any]) -> bool:
        """
        Render ``template`` with ``context`` and deliver it.

        Args:
            recipient: Recipient email
            template: Which message to send
            context: Values substituted into the template

        Returns:
            True if sent (or logged when SMTP is not configured), False otherwise
        """
        subject, text_body = self.render(template, context)
        if not self.enabled:
            logger.info("SMTP not configured; email to %s (%s):\n%s", recipient, subject, text_body)
            return True
        return await asyncio.to_thread(self._send_email, recipient, subject, text_body)

    @staticmethod
    def render(template: EmailTemplate, context: Dict[str, Any]) -> Tuple[str, str]:
        subject, body = _TEMPLATES[EmailTemplate(template)]
        values = {"name": "", "code": "", "expiry_minutes": "", "request_ip": "Unknown"}
        values.update({key: value for key, value in context.items() if value is not None})
        return subject, body.format(**values)

    def _send_email(self, to_email: str, subject: str, text_body: str) -> bool:
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email
            msg.attach(MIMEText(text_body, "plain", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_seconds) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            return False
