"""Structured logging configuration using structlog.

JSON output for production, coloured console output for development.
Audit and compliance events routinely carry actor e-mails and identity
document numbers, so PII redaction is on unless explicitly disabled.
"""

import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "credentials",
    "email",
    "emails",
    "phone",
    "pan",
    "aadhar",
    "aadhaar",
})

# Any key ending in one of these is treated as sensitive (user_email, pan_number, ...)
SENSITIVE_SUFFIXES: tuple[str, ...] = ("_email", "_token", "_number", "_password")

VALUE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[EMAIL]"),
    (re.compile(r"\b[A-Z]{5}[0-9]{4}[A-Z]\b"), "[PAN]"),
    (re.compile(r"\b[2-9]\d{3}\s?\d{4}\s?\d{4}\b"), "[AADHAAR]"),
)

REDACTED = "[REDACTED]"

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def is_sensitive_key(key: str) -> bool:
    key = key.lower()
    return key in SENSITIVE_KEYS or key.endswith(SENSITIVE_SUFFIXES)


class PIIRedactor:
    """Processor that redacts PII from log events.

    Values under sensitive keys are replaced outright. Every other string,
    at any nesting depth, is scanned for e-mail addresses, PAN and Aadhaar
    numbers that slipped into free text such as error messages or findings.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                key: REDACTED if is_sensitive_key(str(key)) else self._redact(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._redact(item) for item in value]
        if isinstance(value, str):
            for pattern, replacement in VALUE_PATTERNS:
                value = pattern.sub(replacement, value)
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_pii: Whether to redact PII from events
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if redact_pii:
        processors.append(PIIRedactor())

    if format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for a module.

    Args:
        name: Logger name, normally the module's __name__
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
