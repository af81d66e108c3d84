"""Opt-in output for the ``vadseg`` logger.

Importing vadseg installs only a NullHandler. An application that wants the
package's console and file output calls setup_logging(). Handlers go on the
``vadseg`` logger, so the root logger and other libraries are untouched.
Records still propagate; set ``propagate = False`` on the returned logger
if the root logger prints them too.
"""

from __future__ import annotations

import atexit
import logging
from pathlib import Path

from vadseg.errors import ConfigError
from vadseg.logging.formatters import JsonFormatter, PlainFormatter, SmartFormatter
from vadseg.logging.handlers import FileSink, file_sink

PACKAGE_LOGGER = "vadseg"

_handlers: list[logging.Handler] = []
_sinks: list[FileSink] = []


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ConfigError(f"invalid log_level: {name}")
    return level


def setup_logging(
    level: str | None = None,
    log_dir: str | Path | None = None,
    json_lines: bool | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach vadseg handlers, replacing any from an earlier call.

    Arguments left as None fall back to Settings, i.e. ``VAD_LOG_LEVEL``,
    ``VAD_LOG_DIR`` and ``VAD_LOG_JSON``. Files are only written when a log
    directory is given: ``vadseg.log``, ``vadseg_error.log`` (ERROR and
    above) and, with JSON enabled, ``vadseg.jsonl``.
    """
    from vadseg.config import Settings

    cfg = Settings()
    resolved = _resolve_level(level or cfg.log_level)
    directory = log_dir if log_dir is not None else cfg.log_dir
    with_json = cfg.log_json if json_lines is None else json_lines

    teardown_logging()
    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.setLevel(resolved)

    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(SmartFormatter())
        pkg.addHandler(stream)
        _handlers.append(stream)

    if directory:
        root = Path(directory)
        root.mkdir(parents=True, exist_ok=True)
        sinks = [
            file_sink(root / "vadseg.log", PlainFormatter()),
            file_sink(root / "vadseg_error.log", PlainFormatter(), level=logging.ERROR),
        ]
        if with_json:
            sinks.append(file_sink(root / "vadseg.jsonl", JsonFormatter()))
        for sink in sinks:
            sink.start()
            pkg.addHandler(sink.handler)
            _handlers.append(sink.handler)
            _sinks.append(sink)

    return pkg


def teardown_logging() -> None:
    """Detach handlers added by setup_logging and flush their files."""
    pkg = logging.getLogger(PACKAGE_LOGGER)
    for handler in _handlers:
        pkg.removeHandler(handler)
    _handlers.clear()
    for sink in _sinks:
        sink.stop()
    _sinks.clear()
    pkg.setLevel(logging.NOTSET)


atexit.register(teardown_logging)
