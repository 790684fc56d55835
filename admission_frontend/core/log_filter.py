# admission_frontend/core/log_filter.py
"""
Credential and PII redaction for log output.

The admissions client logs every HTTP exchange. Bearer tokens and actor
e-mail addresses must never reach a log sink:
- `Authorization: Bearer ...` values are replaced with `Bearer <redacted>`
- e-mail addresses are replaced with `[EMAIL_REDACTED]`
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def mask_value(value: str, visible_chars: int = 4) -> str:
    """Mask value showing only last N characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def sanitize_text(text: str) -> str:
    """Redact bearer tokens and e-mail addresses found inline in text."""
    if not text:
        return text
    text = BEARER_PATTERN.sub(r"\1<redacted>", text)
    return EMAIL_PATTERN.sub("[EMAIL_REDACTED]", text)


def _sanitize_arg(arg: Any) -> Any:
    if isinstance(arg, str):
        return sanitize_text(arg)
    return arg


class RedactingFilter(logging.Filter):
    """
    Rewrites the message and string arguments of every record it sees.

    Attach it to handlers (not loggers) so records propagated from child
    loggers are covered too.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = sanitize_text(record.msg)
        if isinstance(record.args, dict):
            record.args = {k: _sanitize_arg(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(_sanitize_arg(a) for a in record.args)
        return True


def configure_logging(level: Optional[str] = None) -> None:
    """
    Basic configuration for scripts, with redaction on every root handler.

    Safe to call more than once.
    """
    if level is None:
        from admission_frontend.core.config import settings
        level = settings.LOG_LEVEL

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in root.handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())
