"""Structured logging configuration."""
import datetime
import inspect
import json
import logging
import sys
from typing import Any, List

import structlog
from structlog.types import Processor, EventDict

DEFAULT_LOG_LEVEL = "INFO"
IGNORED_LOGGERS = [
    "mcp.server.session",
    "mcp.server.stdio",
    "aiohttp",
    "asyncio"
]
CALLER_KEYS = ("module", "line", "file")


def add_timestamp(_, __, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to the event dict."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def add_caller_info(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Add caller info to the event dict."""
    frame = inspect.currentframe()
    if frame is not None:
        caller = frame.f_back
        while caller and (
            "structlog" in caller.f_code.co_filename
            or caller.f_code.co_filename == __file__
            or any(ignored in caller.f_code.co_filename for ignored in IGNORED_LOGGERS)
        ):
            caller = caller.f_back
        if caller:
            event_dict.update({
                "module": caller.f_code.co_name,
                "line": caller.f_lineno,
                "file": caller.f_code.co_filename.split("/")[-1]
            })
    return event_dict


def make_level_filter(min_level: str = DEFAULT_LOG_LEVEL) -> Processor:
    """Build a processor dropping events below `min_level` or from ignored loggers."""
    min_level_no = logging.getLevelName(min_level.upper())
    if not isinstance(min_level_no, int):
        min_level_no = logging.INFO

    def level_filter(logger: Any, name: str, event_dict: EventDict) -> EventDict:
        logger_name = getattr(logger, "name", "") or ""
        if any(ignored in logger_name for ignored in IGNORED_LOGGERS):
            raise structlog.DropEvent
        level_no = logging.getLevelName(str(event_dict.get("level", name)).upper())
        if isinstance(level_no, int) and level_no < min_level_no:
            raise structlog.DropEvent
        return event_dict

    return level_filter


def _unpack_event(event_dict: EventDict) -> EventDict:
    # Events are usually logged as a single dict carrying an "event" key.
    event = event_dict.get("event")
    if isinstance(event, dict):
        payload = dict(event)
        event_dict["event"] = payload.pop("event", "")
        for key, value in payload.items():
            event_dict.setdefault(key, value)
    return event_dict


class CompactJSONRenderer:
    """Single-line JSON renderer with minimal output."""
    def __call__(self, _: Any, __: str, event_dict: EventDict) -> str:
        event_dict = _unpack_event(event_dict)
        items = {
            "ts": event_dict.pop("timestamp", None),
            "lvl": event_dict.pop("level", "???"),
            "msg": event_dict.pop("event", ""),
            **{k: v for k, v in event_dict.items() if k in CALLER_KEYS}
        }
        if other := {k: v for k, v in event_dict.items() if k not in CALLER_KEYS}:
            items["data"] = other
        return json.dumps(items, separators=(",", ":"), default=str)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structured logging for the application.

    Everything goes to STDERR as compact JSON; STDOUT carries the MCP
    protocol stream and must stay clean.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO)
    )

    processors: List[Processor] = [
        structlog.stdlib.add_log_level,
        make_level_filter(level),
        add_timestamp,
        add_caller_info,
        CompactJSONRenderer()
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
