"""
pocketsql/session.py

Public session API for PocketSQL.

Responsibilities:
- Provide a simple library interface:
    - Session.open(settings_or_dir)
    - session.process(raw) -> Result
    - session.process_script(text) -> list[Result]
    - session.submit(raw) -> Future[Result]
- Route meta-commands (CREATE/DROP/USE DATABASE, SHOW ..., DESC, HELP, EXIT)
  to the catalog and everything else to SQLite, translating MySQL syntax on
  the way for actions.
- Serialize every command through one lane so open/close and statement
  execution never interleave on the shared connection.

process() never raises: every failure comes back as Result(success=False).
"""

from __future__ import annotations

import sqlite3
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path

import sqlparse

from .catalog import Catalog
from .commands import Command, CommandKind, classify, normalize_db_name, normalize_identifier
from .config import Settings
from .errors import InvalidNameError, PocketSQLError
from .log import get_logger
from .result import Result
from .translator import QUERY_RULES, is_noop, translate

logger = get_logger(__name__)

NO_DATABASE_MESSAGE = "No database is open. Use 'CREATE DATABASE dbname;' or 'USE dbname;'"

HELP_COLUMNS = ["Category", "Command", "Description"]
HELP_ROWS = [
    ["Basic", "CREATE DATABASE dbname", "Creates a new database and opens it"],
    ["Basic", "DROP DATABASE dbname", "Deletes a database"],
    ["Basic", "SHOW DATABASES", "Lists all databases"],
    ["Basic", "USE dbname", "Switches to database"],
    ["Basic", "SHOW TABLES", "Lists tables in database"],
    ["Basic", "DESC tablename", "Shows table structure"],
    ["Basic", "SHOW COLUMNS FROM tablename", "Shows table structure"],
    ["Basic", "HELP", "Shows this reference"],
    ["Basic", "EXIT / QUIT / \\q", "Leaves the shell"],
    ["Query", "SELECT ... FROM ...", "Returns rows"],
    ["Query", "PRAGMA ...", "Inspects engine settings and schema"],
    ["Query", "EXPLAIN ...", "Shows how a statement would run"],
    ["MySQL", "INT AUTO_INCREMENT PRIMARY KEY", "Becomes INTEGER PRIMARY KEY AUTOINCREMENT"],
    ["MySQL", "ENUM(...)", "Stored as TEXT"],
    ["MySQL", "TRUNCATE TABLE t", "Runs as DELETE FROM t"],
    ["MySQL", "INSERT IGNORE", "Runs as INSERT OR IGNORE"],
    ["MySQL", "NOW()", "Becomes CURRENT_TIMESTAMP"],
    ["MySQL", "ENGINE=, CHARSET=, COLLATE=", "Table options are dropped"],
    ["MySQL", "LOCK TABLES / PARTITION BY", "Accepted and ignored"],
]


@dataclass
class Session:
    """
    One user session: a catalog plus the serialization lane in front of it.

    Attributes:
        catalog: Connection/catalog manager owned by this session.
        settings: Session settings.
    """
    catalog: Catalog
    settings: Settings
    _lane: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _worker: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)
    _worker_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def open(cls, settings: Settings | str | Path | None = None) -> "Session":
        """
        Start a session.

        Args:
            settings: Settings, or a data directory path (other settings default),
                      or None for Settings() defaults.

        Returns:
            Session with no database open.
        """
        if settings is None:
            settings = Settings()
        elif not isinstance(settings, Settings):
            settings = Settings(data_dir=Path(settings))
        return cls(catalog=Catalog.open(settings), settings=settings)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # ---------- host surface ----------

    @property
    def is_open(self) -> bool:
        return self.catalog.is_open

    @property
    def current_database_name(self) -> str | None:
        return self.catalog.current_database_name

    def open_or_create(self, name: str) -> bool:
        """Normalize `name` and open it. False on invalid names or open failure."""
        try:
            db_name = normalize_db_name(name, self.settings.suffix)
        except InvalidNameError:
            return False
        with self._lane:
            return self.catalog.open_or_create(db_name)

    def close(self) -> None:
        with self._lane:
            self.catalog.close()

    def list_databases(self) -> list[str]:
        with self._lane:
            return self.catalog.list_databases()

    def list_tables(self) -> list[str]:
        """Tables of the active database ([] when nothing is open)."""
        with self._lane:
            if not self.catalog.is_open:
                return []
            return self.catalog.list_tables()

    def export_bytes(self) -> bytes:
        with self._lane:
            return self.catalog.export_bytes()

    def export_to(self, dest: str | Path) -> bool:
        with self._lane:
            return self.catalog.export_to(dest)

    def submit(self, raw: str) -> "Future[Result]":
        """
        Queue `raw` on the session's single worker thread.

        Submissions run one at a time in submission order.
        """
        with self._worker_lock:
            if self._worker is None:
                self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pocketsql")
            return self._worker.submit(self.process, raw)

    def shutdown(self) -> None:
        """Wait for queued submissions, then close the active database."""
        with self._worker_lock:
            worker, self._worker = self._worker, None
        if worker is not None:
            worker.shutdown(wait=True)
        self.close()

    # ---------- routing ----------

    def process(self, raw: str) -> Result:
        """
        Execute one command.

        Args:
            raw: Text as typed by the user.

        Returns:
            Result. Never raises.
        """
        with self._lane:
            try:
                return self._dispatch(classify(raw, self.settings.exit_token))
            except Exception as e:
                logger.exception("unexpected failure processing %r", raw)
                return Result.fail(str(e) or e.__class__.__name__)

    def process_script(self, text: str) -> list[Result]:
        """
        Execute every statement of a script in order.

        Statements are split with sqlparse. Processing stops after a command
        that requests exit.
        """
        results: list[Result] = []
        with self._lane:
            for stmt in sqlparse.split(text):
                if not stmt.strip():
                    continue
                res = self.process(stmt)
                results.append(res)
                if res.exit_requested:
                    break
        return results

    def _dispatch(self, cmd: Command) -> Result:
        kind = cmd.kind
        logger.debug("classified %s: %r", kind.name, cmd.text)

        if kind is CommandKind.EMPTY:
            return Result.fail("Empty SQL command")
        if kind is CommandKind.EXIT:
            return Result(success=True, message="Bye", exit_requested=True)
        if kind is CommandKind.CREATE_DATABASE:
            return self._create_database(cmd)
        if kind is CommandKind.DROP_DATABASE:
            return self._drop_database(cmd)
        if kind is CommandKind.USE_DATABASE:
            return self._use_database(cmd)
        if kind is CommandKind.SHOW_DATABASES:
            return self._show_databases()
        if kind is CommandKind.HELP:
            return Result.table("PocketSQL Command Reference:", HELP_COLUMNS, HELP_ROWS)

        if not self.catalog.is_open:
            return Result.fail(NO_DATABASE_MESSAGE)

        if kind is CommandKind.SHOW_TABLES:
            return self._show_tables()
        if kind is CommandKind.SHOW_COLUMNS:
            return self._show_columns(cmd)
        return self._execute(cmd)

    def _execute(self, cmd: Command) -> Result:
        start = time.perf_counter()
        try:
            if cmd.kind is CommandKind.QUERY:
                columns, rows = self.catalog.execute_returning(translate(cmd.text, QUERY_RULES))
                result = Result.table(f"Query returned {len(rows)} row(s)", columns, rows)
            else:
                sql = translate(cmd.text)
                affected = 0 if is_noop(sql) else self.catalog.execute_noreturn(sql)
                result = Result.ok("Command executed successfully", rows_affected=affected)
        except (sqlite3.Error, PocketSQLError) as e:
            result = Result.fail(str(e))
        return replace(result, elapsed=time.perf_counter() - start)

    # ---------- meta-commands ----------

    def _create_database(self, cmd: Command) -> Result:
        try:
            name = normalize_db_name(cmd.argument, self.settings.suffix)
        except InvalidNameError as e:
            return Result.fail(str(e))
        if self.catalog.open_or_create(name):
            return Result.ok(f"Database '{name}' created and opened successfully")
        return Result.fail(f"Failed to create database '{name}'")

    def _use_database(self, cmd: Command) -> Result:
        try:
            name = normalize_db_name(cmd.argument, self.settings.suffix)
        except InvalidNameError as e:
            return Result.fail(str(e))
        if self.catalog.open_or_create(name):
            return Result.ok(f"Switched to database '{name}'")
        return Result.fail(f"Failed to open database '{name}'")

    def _drop_database(self, cmd: Command) -> Result:
        try:
            name = normalize_db_name(cmd.argument, self.settings.suffix)
        except InvalidNameError as e:
            return Result.fail(str(e))
        if cmd.if_exists and not self.catalog.path_for(name).is_file():
            return Result.ok(f"Database '{name}' does not exist, nothing dropped")
        try:
            dropped = self.catalog.drop(name)
        except PocketSQLError as e:
            return Result.fail(str(e))
        if dropped:
            return Result.ok(f"Database '{name}' dropped successfully")
        return Result.fail(f"Failed to drop database '{name}'")

    def _show_databases(self) -> Result:
        rows = [[n] for n in self.catalog.list_databases()]
        return Result.table(f"Found {len(rows)} database(s)", ["Database"], rows)

    def _show_tables(self) -> Result:
        try:
            tables = self.catalog.list_tables()
        except sqlite3.Error as e:
            return Result.fail(str(e))
        rows = [[t] for t in tables]
        return Result.table(f"Found {len(rows)} table(s)", [f"Tables_in_{self.catalog.active_name}"], rows)

    def _show_columns(self, cmd: Command) -> Result:
        table = normalize_identifier(cmd.argument)
        if not table:
            return Result.fail("Invalid SHOW COLUMNS syntax. Use: SHOW COLUMNS FROM tablename;")
        try:
            return self.catalog.describe(table)
        except sqlite3.Error as e:
            return Result.fail(str(e))
