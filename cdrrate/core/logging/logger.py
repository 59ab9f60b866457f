"""JSON-lines logging on top of loguru, with a per-run trace id."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from cdrrate.core.logging.config import LogConfig

_trace_id: ContextVar[str | None] = ContextVar("cdrrate_trace_id", default=None)
_bound_extra: ContextVar[dict[str, Any]] = ContextVar("cdrrate_bound_extra", default={})

# emitted as top-level keys; every other extra lands under "context"
PROMOTED_KEYS = ("stage", "error_code")


def _active_trace_id() -> str:
    value = _trace_id.get()
    if value is None:
        value = uuid4().hex
        _trace_id.set(value)
    return value


def _enrich(record: dict[str, Any]) -> None:
    """Loguru patcher: attach the trace id and any ``log_context`` values."""

    extra = record["extra"]
    if extra.get("trace_id"):
        _trace_id.set(extra["trace_id"])
    else:
        extra["trace_id"] = _active_trace_id()
    for key, value in _bound_extra.get().items():
        if extra.get(key) is None:
            extra[key] = value
    for key in PROMOTED_KEYS:
        extra.setdefault(key, None)


def _render(record: dict[str, Any]) -> str:
    extra = dict(record["extra"])
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "trace_id": extra.pop("trace_id", None),
    }
    for key in PROMOTED_KEYS:
        payload[key] = extra.pop(key, None)
    if extra:
        payload["context"] = extra
    if record["exception"] is not None:
        payload["exception"] = str(record["exception"])
    return json.dumps(payload, default=_encode)


def _encode(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else str(value)


class _StreamJsonSink:
    """Writes one JSON document per record to a text stream."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        self._stream.write(_render(message.record) + "\n")
        self._stream.flush()


class _FileJsonSink:
    """Appends one JSON document per record to a file."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, message: Any) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(_render(message.record) + "\n")


def _install(config: LogConfig) -> None:
    level = config.level.upper()
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        # stdout carries rated records, so console logs default to stderr
        handlers.append({"sink": _StreamJsonSink(config.console_stream or sys.stderr), "level": level})
    if config.file_output and config.file_path:
        handlers.append({"sink": _FileJsonSink(config.file_path), "level": level})
    logger.configure(handlers=handlers, patcher=_enrich, extra=dict(config.extra))


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """(Re)install the JSON sinks with ``level`` and any other :class:`LogConfig` field."""

    _install(LogConfig(level=level, **kwargs))


@contextmanager
def log_context(*, trace_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Run a block under one trace id with extra fields added to every record.

    Nested contexts merge their extras; the innermost trace id wins.
    """
    extra_token = _bound_extra.set({**_bound_extra.get(), **extra})
    active = trace_id or uuid4().hex
    trace_token = _trace_id.set(active)
    try:
        yield active
    finally:
        _trace_id.reset(trace_token)
        _bound_extra.reset(extra_token)


configure_logging()


__all__ = [
    "PROMOTED_KEYS",
    "configure_logging",
    "log_context",
    "logger",
]
