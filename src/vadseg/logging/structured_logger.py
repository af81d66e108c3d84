"""Structured logger with bound fields, and detection-pass timing."""

from __future__ import annotations

import functools
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

_active_pass: ContextVar[tuple[str, float] | None] = ContextVar("active_pass", default=None)


@contextmanager
def detection_pass(mode: str) -> Iterator[None]:
    """Scope one detection call.

    Records logged inside carry ``mode`` and ``elapsed_ms`` since the pass
    began. Passes nest; leaving one restores the enclosing pass.
    """
    token = _active_pass.set((mode, time.monotonic()))
    try:
        yield
    finally:
        _active_pass.reset(token)


def current_pass() -> str | None:
    active = _active_pass.get()
    return active[0] if active is not None else None


def elapsed_ms() -> int | None:
    """Milliseconds since the active pass began, or None outside a pass."""
    active = _active_pass.get()
    if active is None:
        return None
    return int((time.monotonic() - active[1]) * 1000)


class StructuredLogger:
    """Wraps a stdlib logger; keyword arguments land in ``record.extra_data``.

    ``bind`` returns a logger that adds the given fields to every record,
    call-site keywords taking precedence.
    """

    __slots__ = ("_logger", "_bound")

    def __init__(self, logger: logging.Logger, bound: dict[str, Any] | None = None) -> None:
        self._logger = logger
        self._bound = dict(bound or {})

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def bound(self) -> dict[str, Any]:
        return dict(self._bound)

    def bind(self, **fields: Any) -> StructuredLogger:
        return StructuredLogger(self._logger, {**self._bound, **fields})

    def _log(self, level: int, msg: str, args: tuple, kwargs: dict) -> None:
        if not self._logger.isEnabledFor(level):
            return
        exc_info = kwargs.pop("exc_info", None)
        if exc_info is True:
            exc_info = sys.exc_info()
        extra_data = {**self._bound, **kwargs}
        record = self._logger.makeRecord(
            self._logger.name, level, "", 0, msg, args,
            exc_info=exc_info, extra={"extra_data": extra_data},
        )
        active = _active_pass.get()
        if active is not None:
            mode, t0 = active
            record.mode = mode
            record.elapsed_ms = int((time.monotonic() - t0) * 1000)
        self._logger.handle(record)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, kwargs)

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)


@functools.lru_cache(maxsize=None)
def get_logger(name: str) -> StructuredLogger:
    """Shared unbound StructuredLogger for a module name."""
    return StructuredLogger(logging.getLogger(name))
