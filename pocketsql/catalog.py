"""
pocketsql/catalog.py

Connection and catalog management for PocketSQL.

Responsibilities:
- Own the single active sqlite3 connection and the active database name.
- Create/open, close, drop and list the database files kept in one managed
  directory.
- Run statements against the active connection and hand back plain text
  cells (SQL NULL -> "NULL").
- Export the active database file.

Persistence:
- Each named database is one file: <data_dir>/<name>.db

Design notes:
- At most one connection is open. Opening another first closes the current
  one; a failure to close is logged and the open goes ahead.
- The connection is opened in autocommit mode so that statements take effect
  immediately and BEGIN/COMMIT typed by the user keep SQLite's own meaning.
- check_same_thread is off: callers serialize access (see session.py), so the
  connection may be used from whichever thread currently holds the lane.
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import Settings
from .errors import CatalogError, NoDatabaseError
from .log import get_logger
from .result import Result

logger = get_logger(__name__)

INTERNAL_TABLES = ("android_metadata",)
SIDE_FILE_SUFFIXES = ("-wal", "-shm", "-journal")

NULL_TEXT = "NULL"


def cell_to_text(value: Any) -> str:
    """
    Render one SQLite value as text.

    None becomes the literal "NULL"; BLOBs are shown as upper-case hex.
    """
    if value is None:
        return NULL_TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex().upper()
    return str(value)


def quote_identifier(name: str) -> str:
    """Quote an identifier for SQLite ("a""b" style)."""
    return '"' + name.replace('"', '""') + '"'


@dataclass
class Catalog:
    """
    Catalog of named databases plus the one currently open.

    Attributes:
        settings: Session settings (data directory, suffix, pragmas).
        connection: Active sqlite3 connection or None.
        active_name: File name of the active database (e.g. "shop.db") or None.
    """
    settings: Settings
    connection: sqlite3.Connection | None = field(default=None, repr=False)
    active_name: str | None = None

    @classmethod
    def open(cls, settings: Settings) -> "Catalog":
        """
        Create a catalog over settings.data_dir, creating the directory if needed.

        Args:
            settings: Session settings.

        Returns:
            Catalog with no database open.
        """
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return cls(settings=settings)

    @property
    def data_dir(self) -> Path:
        return self.settings.data_dir

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    @property
    def current_database_name(self) -> str | None:
        return self.active_name

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    # ---------- lifecycle ----------

    def open_or_create(self, name: str) -> bool:
        """
        Open (or create) the database file `name` and make it active.

        Any current connection is closed first. The new connection gets the
        configured journal mode, synchronous level and foreign key setting.

        Args:
            name: Normalized file name (e.g. "shop.db").

        Returns:
            True on success; False if SQLite rejects the file or path, in which
            case no database is left open.
        """
        self.close()

        path = self.path_for(name)
        conn: sqlite3.Connection | None = None
        try:
            conn = sqlite3.connect(str(path), isolation_level=None, check_same_thread=False)
            self._configure(conn)
        except (sqlite3.Error, OSError) as e:
            logger.warning("failed to open database %s: %s", path, e)
            if conn is not None:
                conn.close()
            return False

        self.connection = conn
        self.active_name = name
        logger.info("opened database %s", path)
        return True

    def _configure(self, conn: sqlite3.Connection) -> None:
        s = self.settings
        conn.execute(f"PRAGMA journal_mode = {s.journal_mode}").fetchall()
        conn.execute(f"PRAGMA synchronous = {s.synchronous}")
        conn.execute(f"PRAGMA foreign_keys = {'ON' if s.foreign_keys else 'OFF'}")

    def close(self) -> None:
        """Close the active connection, if any. Close errors are logged, not raised."""
        conn, name = self.connection, self.active_name
        self.connection = None
        self.active_name = None
        if conn is None:
            return
        try:
            conn.close()
        except sqlite3.Error as e:
            logger.warning("error while closing %s: %s", name, e)
        else:
            logger.info("closed database %s", name)

    def drop(self, name: str) -> bool:
        """
        Delete a database file, closing it first when it is the active one.

        Args:
            name: Normalized file name.

        Returns:
            True if the file was deleted, False if deletion failed.

        Raises:
            CatalogError: if the database file does not exist.
        """
        if self.active_name == name:
            self.close()

        path = self.path_for(name)
        if not path.is_file():
            raise CatalogError(f"Database '{name}' does not exist")

        try:
            path.unlink()
        except OSError as e:
            logger.warning("failed to delete %s: %s", path, e)
            return False

        for side in SIDE_FILE_SUFFIXES:
            extra = path.with_name(path.name + side)
            if extra.exists():
                try:
                    extra.unlink()
                except OSError as e:
                    logger.warning("failed to delete %s: %s", extra, e)

        logger.info("dropped database %s", path)
        return True

    # ---------- listings ----------

    def list_databases(self) -> list[str]:
        """Return database names (suffix stripped) found in the data directory, sorted."""
        suffix = self.settings.suffix
        if not self.data_dir.is_dir():
            return []
        names = [
            p.name[: -len(suffix)]
            for p in self.data_dir.iterdir()
            if p.is_file() and p.name.lower().endswith(suffix.lower()) and len(p.name) > len(suffix)
        ]
        return sorted(names)

    def list_tables(self) -> list[str]:
        """
        Return user table names of the active database, ordered by name.

        SQLite bookkeeping tables (sqlite_*) and android_metadata are excluded.

        Raises:
            NoDatabaseError: if nothing is open.
        """
        conn = self._require_connection()
        placeholders = ", ".join("?" for _ in INTERNAL_TABLES)
        cur = conn.execute(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            f"AND name NOT IN ({placeholders}) ORDER BY name",
            INTERNAL_TABLES,
        )
        return [row[0] for row in cur.fetchall()]

    def describe(self, table: str) -> Result:
        """
        Column metadata of `table` via PRAGMA table_info.

        Returns:
            Tabular Result (cid, name, type, notnull, dflt_value, pk), or a
            failure if the table does not exist.

        Raises:
            NoDatabaseError: if nothing is open.
            sqlite3.Error: on engine failure.
        """
        columns, rows = self.execute_returning(f"PRAGMA table_info({quote_identifier(table)})")
        if not rows:
            return Result.fail(f"no such table: {table}")
        return Result.table(f"Query returned {len(rows)} row(s)", columns, rows)

    # ---------- execution ----------

    def _require_connection(self) -> sqlite3.Connection:
        if self.connection is None:
            raise NoDatabaseError()
        return self.connection

    def execute_returning(self, sql: str) -> tuple[list[str], list[list[str]]]:
        """
        Run a row-returning statement.

        Returns:
            (columns, rows) with every cell rendered by cell_to_text.
        """
        conn = self._require_connection()
        cur = conn.execute(sql)
        try:
            columns = [d[0] for d in (cur.description or ())]
            rows = [[cell_to_text(v) for v in row] for row in cur.fetchall()]
        finally:
            cur.close()
        return columns, rows

    def execute_noreturn(self, sql: str) -> int:
        """
        Run a statement for its side effect.

        Returns:
            Rows changed as reported by SQLite (0 when it reports none).
        """
        conn = self._require_connection()
        cur = conn.execute(sql)
        try:
            return max(cur.rowcount, 0)
        finally:
            cur.close()

    # ---------- export ----------

    def export_bytes(self) -> bytes:
        """
        Return the active database file's bytes.

        The WAL is checkpointed first so the main file holds every committed
        change.

        Raises:
            NoDatabaseError: if nothing is open.
            CatalogError: if the file cannot be read.
        """
        conn = self._require_connection()
        try:
            conn.execute("PRAGMA wal_checkpoint(TRUNCATE)").fetchall()
        except sqlite3.Error as e:
            logger.warning("checkpoint before export failed: %s", e)

        path = self.path_for(self.active_name or "")
        try:
            return path.read_bytes()
        except OSError as e:
            raise CatalogError(f"Failed to read database '{self.active_name}': {e}") from e

    def export_to(self, dest: str | Path) -> bool:
        """
        Copy the active database file to `dest`.

        The bytes are written to a temporary file next to `dest` and moved into
        place, so a failed export never leaves a truncated file at `dest`.

        Args:
            dest: Target file, or an existing directory (the database's file
                  name is used inside it).

        Returns:
            True on success, False on any failure.
        """
        if self.connection is None:
            return False

        target = Path(dest)
        if target.is_dir():
            target = target / (self.active_name or "")

        tmp_name: str | None = None
        try:
            data = self.export_bytes()
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".export-", dir=str(target.parent))
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
            tmp_name = None
        except (OSError, CatalogError) as e:
            logger.warning("export to %s failed: %s", target, e)
            return False
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info("exported %s to %s", self.active_name, target)
        return True
