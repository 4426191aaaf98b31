"""Console logging adapter.

Structured logs to stdout through structlog, either as colored console
lines or as one JSON object per line.

Secrets never reach the output: context keys naming codes, tokens or
passwords are masked by ``redact_secrets`` before rendering. Services only
log metadata, so the processor is a backstop for host code sharing the
logger.

Does NOT inherit from LoggerProtocol (PEP 544 structural subtyping).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

REDACTED = "[redacted]"

SECRET_KEYS = frozenset(
    {
        "code",
        "password",
        "new_password",
        "token",
        "access_token",
        "refresh_token",
        "session_token",
        "plaintext",
    }
)


def redact_secrets(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor masking secret-bearing context keys."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def _processors(use_json: bool) -> list[Any]:
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
        renderer,
    ]


class ConsoleAdapter:
    """Console logger backed by structlog.

    Args:
        use_json (bool): One JSON object per line when True.
        level (str): Minimum level name (DEBUG, INFO, ...).
        service (str): Value of the ``service`` field on every line.

    Usage:
        logger = ConsoleAdapter(use_json=True)
        logger.info("auth_event", event_type="UserLoggedIn", user_id=str(user_id))
    """

    def __init__(
        self, *, use_json: bool = False, level: str = "INFO", service: str = "turnstile"
    ) -> None:
        structlog.configure(
            processors=_processors(use_json),
            wrapper_class=structlog.make_filtering_bound_logger(
                logging.getLevelName(level.upper())
            ),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
            cache_logger_on_first_use=True,
        )
        self._logger = structlog.get_logger().bind(service=service)

    @classmethod
    def _wrap(cls, bound: Any) -> ConsoleAdapter:
        adapter = cls.__new__(cls)
        adapter._logger = bound
        return adapter

    def debug(self, message: str, /, **context: Any) -> None:
        self._logger.debug(message, **context)

    def info(self, message: str, /, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error, flattening ``error`` into type and message fields."""
        self._logger.error(message, **_with_error(context, error))

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        self._logger.critical(message, **_with_error(context, error))

    def bind(self, **context: Any) -> ConsoleAdapter:
        """Return a new adapter carrying ``context`` on every line."""
        return self._wrap(self._logger.bind(**context))

    def with_context(self, **context: Any) -> ConsoleAdapter:
        """Alias for bind()."""
        return self.bind(**context)


def _with_error(context: dict[str, Any], error: Exception | None) -> dict[str, Any]:
    if error is not None:
        context["error_type"] = type(error).__name__
        context["error_message"] = str(error)
    return context
