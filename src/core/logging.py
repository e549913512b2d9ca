"""structlog configuration for the client and the CLI.

Output goes to stderr, either as colored console lines (default) or as
JSON lines (`--log-json`). Identifier values are rendered as plain strings
and credentials never reach a log line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.domain.identifiers import APIKey, Identifier

LOGGER_NAMESPACES = ("core", "adapters", "cli")
NOISY_LIBRARIES = ("httpx", "httpcore")
SECRET_KEYS = frozenset({"api_key", "authorization"})
REDACTED = "***"


def _render_identifiers(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, APIKey):
            event_dict[key] = REDACTED
        elif isinstance(value, Identifier):
            event_dict[key] = str(value)
    return event_dict


def _redact_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        verbose: DEBUG for this project's loggers; otherwise WARNING and up.
        log_json: JSON renderer instead of the console renderer.
    """
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _render_identifiers,
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if log_json
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    level = logging.DEBUG if verbose else logging.WARNING
    for name in LOGGER_NAMESPACES:
        logging.getLogger(name).setLevel(level)
    # httpx logs every request at INFO.
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
