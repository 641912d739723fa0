"""JSON logging for index builds, lookups and the service lifecycle."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.config import dictConfig
from pathlib import Path
from time import perf_counter
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterator, Optional, TextIO

from .datatypes import ResolvedConfig

if TYPE_CHECKING:
    from .finder import DefaultFinder

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS: FrozenSet[str] = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, tuple):
        return list(value)
    return str(value)


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record; ``event`` and ``extra`` fields are lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS and key != "event"
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default, ensure_ascii=False)


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Route every ``tzlocate.*`` logger through one JSON handler on ``stream`` (stderr by default)."""

    handler: Dict[str, Any] = {"class": "logging.StreamHandler", "formatter": "json"}
    if stream is not None:
        handler["stream"] = stream

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JsonLogFormatter}},
            "handlers": {"default": handler},
            "root": {"handlers": ["default"], "level": level.upper()},
        }
    )


def get_logger(name: str = "tzlocate") -> logging.Logger:
    return logging.getLogger(name)


def log_finder_ready(config: ResolvedConfig, finder: "DefaultFinder") -> None:
    """Record which snapshots were loaded and what the finder will answer from."""

    fuzzy = finder.fuzzy
    get_logger("tzlocate.runtime").info(
        "finder_ready",
        extra={
            "event": "finder_ready",
            "config": config.redacted_dict(),
            "data_version": finder.data_version(),
            "reduced": finder.exact.reduced,
            "regions": len(finder.exact),
            "tiles": len(fuzzy),
            "zoom_range": (fuzzy.agg_zoom, fuzzy.idx_zoom) if len(fuzzy) else None,
        },
    )


@contextmanager
def timed_event(logger: logging.Logger, event: str, **fields: Any) -> Iterator[Dict[str, Any]]:
    """Log ``event`` with a ``duration_s`` field once the block completes.

    The yielded dict may be filled in by the block; its keys are merged into
    the emitted record.
    """

    extra: Dict[str, Any] = dict(fields)
    started = perf_counter()
    yield extra
    extra["duration_s"] = round(perf_counter() - started, 6)
    logger.info(event, extra={"event": event, **extra})
