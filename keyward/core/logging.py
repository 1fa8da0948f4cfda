import logging
import os
from typing import Optional

AUDIT_LOGGER_NAME = "keyward.audit"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging defaults for the application.

    The security audit channel (``keyward.audit``) never drops below WARNING so
    that rejected authorization attempts are always emitted.
    """
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    if audit.getEffectiveLevel() > logging.WARNING:
        audit.setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)
