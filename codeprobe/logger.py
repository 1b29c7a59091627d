"""Structured logging for codeprobe.

Every tool call leaves a trace line (tool, reasoning, command or path, result
preview) on this channel. Logs go to stderr so stdout carries only the answer.
"""

from __future__ import annotations

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener

import structlog

_listener: QueueListener | None = None


def setup_logging(service: str = "codeprobe", level: str = "info", fmt: str = "console") -> None:
    """Configure structlog with non-blocking output.

    Must be called once at startup before any logging. *fmt* selects the
    renderer: ``"json"`` for one JSON object per line, anything else for the
    human-readable console renderer.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Async logging via QueueHandler + QueueListener
    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=10_000)
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)

    global _listener
    if _listener is not None:
        _listener.stop()
    _listener = QueueListener(log_queue, stream_handler, respect_handler_level=True)
    _listener.start()

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(QueueHandler(log_queue))
    root.setLevel(log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _add_service(service),
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exc_info itself.
        processors += [
            structlog.processors.UnicodeDecoder(),
            _add_service(service),
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def stop_logging() -> None:
    """Flush and stop the async log listener."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
        root = logging.getLogger()
        for handler in [h for h in root.handlers if isinstance(h, QueueHandler)]:
            root.removeHandler(handler)


def _add_service(service: str) -> structlog.types.Processor:
    """Return a processor that adds the service name to every log entry."""

    def processor(
        _logger: structlog.types.WrappedLogger,
        _method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict["service"] = service
        return event_dict

    return processor
