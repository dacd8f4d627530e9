"""
structlog setup for pocketreader.

Library modules only call ``structlog.get_logger(__name__)``; nothing is
configured on import. Applications (and the CLI) call ``configure_logging``
once to route every record, structlog or stdlib, through one handler.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Dict, List

import structlog
from structlog.contextvars import get_contextvars

if TYPE_CHECKING:
    from pocketreader.config.config import MonitoringConfig

# Third-party loggers that are chatty at INFO and below during decoding.
QUIET_LOGGERS = ("charset_normalizer",)


def add_correlation_id(logger: logging.Logger, method_name: str, event_dict: Dict[Any, Any]) -> Dict[Any, Any]:
    """Copy a bound ``correlation_id`` (e.g. the saved item being read) onto the record."""
    ctx = get_contextvars()
    if "correlation_id" in ctx:
        event_dict["correlation_id"] = ctx["correlation_id"]
    return event_dict


def add_library_version(logger: logging.Logger, method_name: str, event_dict: Dict[Any, Any]) -> Dict[Any, Any]:
    """Stamp records from pocketreader loggers with the library version."""
    name = event_dict.get("logger") or getattr(logger, "name", "")
    if name and name.split(".", 1)[0] == "pocketreader":
        from pocketreader import __version__

        event_dict.setdefault("pocketreader_version", __version__)
    return event_dict


def shared_processors() -> List[Any]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        add_correlation_id,
        structlog.stdlib.add_logger_name,
        add_library_version,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def build_handler(config: MonitoringConfig) -> logging.Handler:
    """JSON lines to ``log_file`` when set, otherwise plain console output on stderr.

    stdout stays reserved for extracted articles.
    """
    renderer: Any
    handler: logging.Handler
    if config.log_file:
        renderer = structlog.processors.JSONRenderer()
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors(),
        )
    )
    return handler


def configure_logging(config: MonitoringConfig) -> None:
    """Route structlog and stdlib logging through a single handler at ``config.log_level``."""
    level = config.log_level.upper()
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[build_handler(config)],
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))

    structlog.configure(
        processors=shared_processors()
        + [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger("pocketreader.logging").info(
        "Logging configured", level=level, output=config.log_file or "stderr"
    )
