"""Rotating log files written from a background thread."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUPS = 5


@dataclass
class FileSink:
    """A rotating file fed through a queue.

    Attach ``handler`` to a logger; records are written by ``listener``
    once started. ``stop`` drains the queue and closes the file.
    """

    path: Path
    handler: QueueHandler
    listener: QueueListener
    _running: bool = field(default=False, repr=False)

    def start(self) -> None:
        if not self._running:
            self.listener.start()
            self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self.listener.stop()
        self._running = False
        for target in self.listener.handlers:
            target.close()


def file_sink(
    path: Path | str,
    formatter: logging.Formatter,
    *,
    level: int = logging.NOTSET,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUPS,
) -> FileSink:
    """Build a stopped FileSink; only records at ``level`` or above reach the file."""
    path = Path(path)
    target = RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
    )
    target.setLevel(level)
    target.setFormatter(formatter)
    queue: SimpleQueue = SimpleQueue()
    listener = QueueListener(queue, target, respect_handler_level=True)
    return FileSink(path=path, handler=QueueHandler(queue), listener=listener)
