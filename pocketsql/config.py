"""
pocketsql/config.py

Runtime settings for a PocketSQL session.

Settings come from three places, lowest priority first:
- the defaults below
- POCKETSQL_* environment variables
- an explicit data directory (the CLI's first positional argument)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

DEFAULT_DATA_DIR = Path("./pocketsql_data")
DB_SUFFIX = ".db"
EXIT_TOKEN = "\\q"

ENV_DATA_DIR = "POCKETSQL_DATA_DIR"
ENV_LOG_LEVEL = "POCKETSQL_LOG_LEVEL"
ENV_MAX_ROWS = "POCKETSQL_MAX_ROWS"


@dataclass(frozen=True)
class Settings:
    """
    Session configuration.

    Attributes:
        data_dir: Directory holding one file per named database.
        suffix: File extension appended to every database name.
        journal_mode: SQLite journal mode applied on open.
        synchronous: SQLite synchronous level applied on open.
        foreign_keys: Whether foreign key enforcement is switched on.
        log_level: Level name for the package logger.
        max_display_rows: Row cap used by the interactive shell's table output.
        exit_token: Shorthand accepted in addition to EXIT/QUIT.
    """
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    suffix: str = DB_SUFFIX
    journal_mode: str = "WAL"
    synchronous: str = "NORMAL"
    foreign_keys: bool = True
    log_level: str = "WARNING"
    max_display_rows: int = 100
    exit_token: str = EXIT_TOKEN

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        data_dir: str | Path | None = None,
    ) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ).
            data_dir: Explicit data directory; overrides POCKETSQL_DATA_DIR.

        Returns:
            Settings instance.

        Raises:
            ValueError: if POCKETSQL_MAX_ROWS is not a positive integer.
        """
        env = os.environ if environ is None else environ

        if data_dir is None:
            data_dir = env.get(ENV_DATA_DIR) or DEFAULT_DATA_DIR

        max_rows = cls.max_display_rows
        raw_rows = env.get(ENV_MAX_ROWS)
        if raw_rows:
            if not raw_rows.strip().isdigit() or int(raw_rows) <= 0:
                raise ValueError(f"{ENV_MAX_ROWS} must be a positive integer, got {raw_rows!r}")
            max_rows = int(raw_rows)

        return cls(
            data_dir=Path(data_dir),
            log_level=(env.get(ENV_LOG_LEVEL) or cls.log_level).upper(),
            max_display_rows=max_rows,
        )
