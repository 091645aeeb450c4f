"""Structured logging configuration using structlog.

Modules log through the standard library (``logging.getLogger(__name__)``
with %-style arguments). ``setup_logging`` routes those records through
structlog's ``ProcessorFormatter`` so every line, including
the database/search drivers', comes out in one format (JSON or console)
and carries any request context bound with ``bind_request_context``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from searchbattle.config.settings import ObservabilitySettings

# Driver loggers that log every request or statement at INFO.
_NOISY_LOGGERS = ("elastic_transport", "elasticsearch", "sqlalchemy.engine", "asyncio")


class _StructlogHandler(logging.StreamHandler):
    """Root handler installed by ``setup_logging``; replaced on reconfiguration."""


def setup_logging(settings: ObservabilitySettings | None = None) -> None:
    """Configure structured logging for Search Battle.

    Safe to call more than once (the app lifespan and the CLI both call it);
    the previous handler is swapped out rather than stacked.

    Args:
        settings: Observability settings. Uses defaults if None.
    """
    log_level = settings.log_level.upper() if settings else "INFO"
    log_format = settings.log_format if settings else "json"
    level = logging.getLevelName(log_level)
    if not isinstance(level, int):
        level = logging.INFO

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Any = structlog.dev.ConsoleRenderer() if log_format == "console" else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
    )
    handler = _StructlogHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, _StructlogHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Keep driver chatter out of INFO logs unless debugging.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)


def bind_request_context(**values: Any) -> None:
    """Attach ``values`` to every log line emitted from the current task."""
    structlog.contextvars.bind_contextvars(**values)
