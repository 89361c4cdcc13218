"""
pocketsql/repl.py

Interactive MySQL-style shell for PocketSQL.

Responsibilities:
- Provide a CLI shell over a Session rooted at a data directory.
- Support multiline SQL input until a semicolon ';' is entered outside of quotes.
- Display tabular results as an ASCII box table, errors as
  "ERROR <code> (<sqlstate>): <message>".
- Provide small dot-commands the router does not know about:
    - .help
    - .sample
    - .export <path>

Usage:
    python -m pocketsql ./my_data_dir
If no directory is provided, POCKETSQL_DATA_DIR or ./pocketsql_data is used.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable

import sqlparse

try:
    import readline  # noqa: F401
except ImportError:
    # readline is optional; if missing, REPL still works.
    readline = None  # type: ignore[assignment]

from .commands import CommandKind, classify
from .config import Settings
from .errors import PocketSQLError
from .log import configure_logging
from .result import ERROR_PREFIX, Result
from .sample import load_sample_database
from .session import Session

PROMPT = "pocketsql> "
PROMPT_CONT = "    -> "

# Meta-commands that complete without a trailing ';'.
BARE_COMMANDS = {
    CommandKind.EXIT,
    CommandKind.HELP,
    CommandKind.SHOW_DATABASES,
    CommandKind.SHOW_TABLES,
}

# (substring, code, sqlstate); first match wins.
ERROR_CODES: tuple[tuple[str, int, str], ...] = (
    ("no such table", 1146, "42S02"),
    ("doesn't exist", 1146, "42S02"),
    ("no database", 1049, "42000"),
    ("syntax error", 1064, "42000"),
    ("already exists", 1050, "42S01"),
)
DEFAULT_ERROR_CODE = (1064, "42000")


def error_code(message: str) -> tuple[int, str]:
    """
    Map an engine error message to a MySQL-style (code, sqlstate) pair.

    Args:
        message: Failure message, with or without the "ERROR: " prefix.

    Returns:
        (code, sqlstate); unknown messages map to the generic syntax error.
    """
    lowered = message.lower()
    for needle, code, state in ERROR_CODES:
        if needle in lowered:
            return code, state
    return DEFAULT_ERROR_CODE


def format_error(message: str) -> str:
    """Render a failure message as "ERROR 1146 (42S02): no such table: t"."""
    text = message[len(ERROR_PREFIX):] if message.startswith(ERROR_PREFIX) else message
    code, state = error_code(text)
    return f"ERROR {code} ({state}): {text}"


def is_complete_statement(buf: str) -> bool:
    """
    Decide whether the current buffer contains at least one complete statement.

    A statement is considered complete when a semicolon ';' appears outside of
    quoted spans ('...', "..." or `...`) and outside "--" / "#" line comments.

    Args:
        buf: Current accumulated input buffer.

    Returns:
        True if complete, else False.
    """
    quote: str | None = None
    i = 0
    while i < len(buf):
        ch = buf[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == "#" or buf.startswith("--", i):
            end = buf.find("\n", i)
            if end == -1:
                return False
            i = end
        elif ch == ";":
            return True
        i += 1
    return False


def format_table(columns: list[str], rows: list[list[str]], max_rows: int | None = None) -> str:
    """
    Render columns/rows as a MySQL-style box table.

    Args:
        columns: Column header list.
        rows: Row values (already text).
        max_rows: Show at most this many rows, then a truncation note.

    Returns:
        A formatted string suitable for printing to console.
    """
    shown = rows if max_rows is None else rows[:max_rows]

    widths = [len(c) for c in columns]
    for r in shown:
        for i, cell in enumerate(r):
            widths[i] = max(widths[i], len(cell))

    def fmt_row(r: Iterable[str]) -> str:
        return "| " + " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(r)) + " |"

    sep = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    out = [sep, fmt_row(columns), sep]
    out.extend(fmt_row(r) for r in shown)
    out.append(sep)
    if len(shown) < len(rows):
        out.append(f"... {len(rows) - len(shown)} more row(s) not shown")
    return "\n".join(out)


def render_result(res: Result, sql: str = "", max_rows: int | None = None) -> str:
    """
    Turn a Result into shell output text.

    Args:
        res: Result from Session.process().
        sql: The statement that produced it (used to spot USE).
        max_rows: Row cap for tables.
    """
    if not res.success:
        return format_error(res.message)

    if classify(sql).kind is CommandKind.USE_DATABASE:
        return "Database changed"

    if res.has_columns:
        n = res.rows_affected
        if not res.has_rows:
            footer = "Empty set"
        else:
            footer = f"{n} row{'' if n == 1 else 's'} in set"
        footer += f" ({res.elapsed:.2f} sec)"
        if not res.has_rows:
            return footer
        return format_table(res.columns, res.rows, max_rows) + "\n" + footer

    if res.rows_affected:
        return f"{res.message}, {res.rows_affected} row(s) affected ({res.elapsed:.2f} sec)"
    return res.message


def cmd_sample(session: Session) -> None:
    """Dot-command: build the sample e-commerce database and switch to it."""
    try:
        load = load_sample_database(session)
    except PocketSQLError as e:
        print(format_error(str(e)))
        return
    print(f"Created database '{load.database}' ({load.executed} commands executed)")
    for sql, message in load.failures:
        print(f"[WARNING] Failed: {sql} -> {message}")
    print("Try: SHOW TABLES; or SELECT * FROM products;")


def cmd_export(session: Session, dest: str) -> None:
    """Dot-command: copy the active database file to `dest`."""
    if not session.is_open:
        print(format_error("No database is open"))
        return
    if session.export_to(dest):
        print(f"Exported '{session.current_database_name}' to {dest}")
    else:
        print(f"Export to {dest} failed")


def print_help() -> None:
    print("Dot commands:")
    print("  .help              show this help")
    print("  .sample            create the sample 'ecommerce' database")
    print("  .export <path>     copy the active database file to <path>")
    print()
    print("SQL statements end with ';'. Type 'help;' for the command reference. Example:")
    print("  CREATE DATABASE shop;")
    print("  CREATE TABLE users (id INT AUTO_INCREMENT PRIMARY KEY, email VARCHAR(255) UNIQUE NOT NULL);")
    print("  INSERT INTO users (email) VALUES ('a@b.com');")
    print("  SELECT * FROM users;")


def repl(settings: Settings) -> int:
    """
    Run the interactive shell.

    Args:
        settings: Session settings.

    Returns:
        Process exit code (0 on normal exit).
    """
    with Session.open(settings) as session:
        print(f"Welcome to PocketSQL (MySQL Mode, data_dir={settings.data_dir})")
        print("Type 'help;' for help, .help for shell commands. Commands end with ';'.")

        buf = ""
        while True:
            try:
                prompt = PROMPT if not buf else PROMPT_CONT
                line = input(prompt)
            except EOFError:
                print()
                return 0
            except KeyboardInterrupt:
                # Clear current buffer on Ctrl+C
                print()
                buf = ""
                continue

            line_stripped = line.strip()

            # Dot commands only apply if we're not in the middle of a multi-line SQL buffer.
            if not buf and line_stripped.startswith("."):
                parts = line_stripped.split(maxsplit=1)
                cmd = parts[0].lower()

                if cmd == ".help":
                    print_help()
                elif cmd == ".sample":
                    cmd_sample(session)
                elif cmd == ".export":
                    if len(parts) != 2:
                        print("Usage: .export <path>")
                    else:
                        cmd_export(session, parts[1])
                else:
                    print(f"Unknown command: {cmd}. Type .help")
                continue

            buf += line + "\n"
            bare = buf.count("\n") == 1 and classify(buf, settings.exit_token).kind in BARE_COMMANDS
            if not bare and not is_complete_statement(buf):
                continue

            for stmt in sqlparse.split(buf):
                if not stmt.strip():
                    continue
                res = session.process(stmt)
                print(render_result(res, stmt, settings.max_display_rows))
                print()
                if res.exit_requested:
                    return 0

            buf = ""


def main(argv: list[str]) -> int:
    """
    CLI entrypoint.

    Args:
        argv: sys.argv list.

    Returns:
        Exit code.
    """
    data_dir = Path(argv[1]) if len(argv) > 1 else None
    try:
        settings = Settings.from_env(data_dir=data_dir)
        configure_logging(settings.log_level)
    except ValueError as e:
        print(f"pocketsql: {e}", file=sys.stderr)
        return 2
    return repl(settings)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
