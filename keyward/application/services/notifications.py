import asyncio
import logging
from typing import Any, Dict, Optional

from keyward.domain.ports.notifications import EmailSender, EmailTemplate

logger = logging.getLogger(__name__)


async def dispatch_email(
    sender: Optional[EmailSender],
    recipient: str,
    template: EmailTemplate,
    context: Dict[str, Any],
    timeout: Optional[float] = None,
) -> bool:
    """Send an email without letting delivery problems affect the calling flow.

    ``timeout`` bounds how long the caller waits; a send still running after it
    is cancelled and reported as undelivered.
    """
    if sender is None:
        logger.warning("No email sender configured; dropping %s email to %s", template, recipient)
        return False
    try:
        delivered = await asyncio.wait_for(sender.send_email(recipient, template, context), timeout)
    except asyncio.TimeoutError:
        logger.warning("Sending %s email to %s timed out after %ss", template, recipient, timeout)
        return False
    except Exception:  # noqa: BLE001
        logger.exception("Sending %s email to %s failed", template, recipient)
        return False
    if not delivered:
        logger.warning("%s email to %s was not delivered", template, recipient)
    return bool(delivered)
