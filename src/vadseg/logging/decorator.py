"""@logged decorator for automatic function entry/exit logging."""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import Any

from vadseg.logging.structured_logger import get_logger


def _fmt_elapsed(t0: float) -> str:
    ms = int((time.monotonic() - t0) * 1000)
    return f"{ms / 1000:.1f}s" if ms >= 1000 else f"{ms}ms"


def logged(
    level: int = logging.DEBUG,
    *,
    log_args: bool = False,
    log_result: bool = False,
    entry: bool = True,
    exit: bool = True,
):
    """Decorator that logs function entry, exit, and exceptions.

    Args:
        level: Log level for entry/exit messages.
        log_args: Include function arguments in entry log.
        log_result: Include return value in exit log.
        entry: Log function entry.
        exit: Log function exit.
    """
    def decorator(fn):
        logger = get_logger(fn.__module__)
        fn_name = fn.__qualname__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            _kwargs: dict[str, Any] = {}
            if log_args:
                sig = inspect.signature(fn)
                bound = sig.bind(*args, **kwargs)
                bound.apply_defaults()
                _kwargs = {k: v for k, v in bound.arguments.items() if k != "self"}
            if entry:
                logger._log(level, f"→ {fn_name}", (), _kwargs)
            t0 = time.monotonic()
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                logger._log(
                    logging.ERROR, f"✗ {fn_name}", (),
                    {"error": str(e), "elapsed": _fmt_elapsed(t0)},
                )
                raise
            if exit:
                exit_kw: dict[str, Any] = {}
                if log_result:
                    exit_kw["result"] = result
                exit_kw["elapsed"] = _fmt_elapsed(t0)
                logger._log(level, f"← {fn_name}", (), exit_kw)
            return result
        return wrapper
    return decorator
