from __future__ import annotations

"""
Logging Configuration Model.
"""

import logging
from dataclasses import dataclass
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging bootstrap.

    Attributes:
        level: Minimum severity name ('DEBUG', 'INFO', ...). Unknown names
               fall back to INFO.
        console: Mirror records on stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size at which the log file rolls over.
        backup_count: Rolled-over files kept next to the active one.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024  # 2MB
    backup_count: int = 3

    @property
    def level_value(self) -> int:
        value = logging.getLevelName(str(self.level or "").strip().upper())
        return value if isinstance(value, int) else logging.INFO
