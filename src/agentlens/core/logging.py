"""
Structured logging configuration for agentlens.

Uses structlog so that every log entry is a key/value event that can carry
bound session context.

Setup:
    Call ``configure_logging(config.logging)`` once at process startup,
    where ``config`` is the loaded :class:`AgentLensConfig`.  Every module
    then uses::

        import structlog
        logger = structlog.get_logger()

    Bound loggers carry context automatically::

        log = logger.bind(session_id="abc123")
        log.debug("status_changed", previous="working", status="idle")
        # → {"event": "status_changed", "session_id": "abc123",
        #    "previous": "working", "status": "idle",
        #    "timestamp": "2026-10-16T...", "level": "debug"}

The interpreter runs on every PTY read, so it only emits debug-level
events on transitions (first detection, status change).  Info-level
events are reserved for session lifecycle.
"""

from __future__ import annotations

import logging
import sys

import structlog

from agentlens.core.config import LoggingConfig

# Loggers whose DEBUG output drowns session events
_QUIET_LOGGERS = ("asyncio",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _has_structlog_handler(root: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler)
        and isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        for h in root.handlers
    )


def configure_logging(
    settings: LoggingConfig | None = None,
    *,
    level: str | None = None,
    json_output: bool | None = None,
) -> None:
    """
    Configure structlog + stdlib logging for the process.

    Args:
        settings: The ``[logging]`` section of the agentlens config.
                  Defaults to :class:`LoggingConfig` defaults.
        level: Overrides ``settings.level`` (DEBUG, INFO, WARNING, ERROR).
        json_output: Overrides ``settings.format == "json"``.

    Safe to call more than once: the level and renderer are re-applied,
    but only one stderr handler is ever installed.
    """
    settings = settings or LoggingConfig()
    level_name = (level or settings.level).upper()
    use_json = settings.format == "json" if json_output is None else json_output

    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(use_json),
        ],
        foreign_pre_chain=shared,
    )

    root = logging.getLogger()
    if _has_structlog_handler(root):
        for handler in root.handlers:
            if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
                handler.setFormatter(formatter)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(getattr(logging, level_name, logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
