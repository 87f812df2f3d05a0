from __future__ import annotations

"""
Logging Bootstrap.

Attaches a single QueueHandler to the root logger; a QueueListener thread
drains it into the console and file handlers, so log I/O never stalls an
export walk or the thread printing progress. Configuration happens once per
process.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from typing import List

from gallerysnap.infra.fs import get_user_data_dir
from gallerysnap.infra.logging.config import (
    CONSOLE_FORMAT,
    DATE_FORMAT,
    FILE_FORMAT,
    LoggingConfig,
)

_CONFIGURED_FLAG_ATTR: str = "_gallerysnap_configured"
_QUEUE_LISTENER_ATTR: str = "_gallerysnap_queue_listener"
_HANDLER_TAG_ATTR: str = "_gallerysnap_handler"


def get_default_log_path(file_name: str = "gallerysnap.log") -> str:
    """Log file location inside the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig) -> logging.Logger:
    """
    Route root logger records through a background queue listener.

    Later calls in the same process are no-ops.

    Args:
        cfg: Level and sinks to install.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False):
        return root

    level = cfg.level_value
    root.setLevel(level)

    sinks: List[logging.Handler] = []
    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        sinks.append(console)

    if cfg.log_file:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
            file_handler = RotatingFileHandler(
                cfg.log_file,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            sys.stderr.write(f"WARNING: Log file unavailable at '{cfg.log_file}': {e}\n")
        else:
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            sinks.append(file_handler)

    for sink in sinks:
        sink.setLevel(level)

    if not sinks:
        return root

    records: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(records)
    setattr(queue_handler, _HANDLER_TAG_ATTR, True)

    listener = QueueListener(records, *sinks, respect_handler_level=True)
    listener.start()
    atexit.register(_stop_listener, listener)

    root.addHandler(queue_handler)
    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    return root


def _stop_listener(listener: QueueListener) -> None:
    # stop() on an already stopped listener fails on its missing thread
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
