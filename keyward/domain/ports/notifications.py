from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Protocol


class EmailTemplate(StrEnum):
    EMAIL_VERIFICATION = "email-verification"
    USER_PASSWORD_RESET = "user-password-reset"
    ADMIN_PASSWORD_RESET = "admin-password-reset"


class EmailSender(Protocol):
    """Outbound email collaborator. Implementations report failure by raising or returning False."""

    async def send_email(self, recipient: str, template: EmailTemplate, context: Dict[str, Any]) -> bool:
        ...
