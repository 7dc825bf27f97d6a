"""Structured logging configuration using structlog.

JSON lines in production, a colored console in development. Events pass
through PatientDataRedactor so patient identifiers, contact details and
free-text answers stay out of log sinks.
"""

import re
import sys
from collections.abc import Iterable, Mapping
from typing import Any, cast

import structlog
from pydantic import BaseModel
from structlog.types import EventDict, WrappedLogger

from vitalis.config.models.observability import LoggingConfig

REDACTED = "[REDACTED]"

# Keys whose values identify a patient or carry what they said
PATIENT_KEYS: frozenset[str] = frozenset({
    "patient_identifier",
    "identifier",
    "identifiers",
    "search_text",
    "given_name",
    "family_name",
    "birthdate",
    "address",
    "email",
    "phone",
    "value_text",
    "comment",
})

CREDENTIAL_KEYS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-\(\)]{8,}\d")

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class PatientDataRedactor:
    """Processor that keeps patient data out of log events.

    Values under a sensitive key are replaced outright, at any depth.
    Pydantic models (a logged PatientRef, say) are dumped and redacted like
    dicts. Remaining strings are scrubbed of emails and phone numbers.
    """

    def __init__(self, extra_keys: Iterable[str] = ()) -> None:
        self._keys = PATIENT_KEYS | CREDENTIAL_KEYS | {k.lower() for k in extra_keys}

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact_mapping(event_dict))

    def _redact_mapping(self, data: Mapping[Any, Any]) -> dict[Any, Any]:
        return {
            key: REDACTED if str(key).lower() in self._keys else self._scrub(value)
            for key, value in data.items()
        }

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        if isinstance(value, Mapping):
            return self._redact_mapping(value)
        if isinstance(value, str):
            return PHONE_PATTERN.sub("[PHONE]", EMAIL_PATTERN.sub("[EMAIL]", value))
        if isinstance(value, list | tuple):
            return [self._scrub(item) for item in value]
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
    redacted_keys: Iterable[str] = (),
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_pii: Whether to redact patient data from logs
        redacted_keys: Extra keys to redact on top of the built-in ones
    """
    processors: list[Any] = [structlog.contextvars.merge_contextvars]

    # Before the timestamp, which the phone pattern would mangle
    if redact_pii:
        processors.append(PatientDataRedactor(redacted_keys))

    processors.extend([
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ])

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            LEVELS.get(level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Configure structured logging from the logging settings section."""
    setup_logging(
        level=config.level,
        format=config.format,
        redact_pii=config.redact_pii,
        redacted_keys=config.redacted_keys,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given module name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
