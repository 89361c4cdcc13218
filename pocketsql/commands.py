"""
pocketsql/commands.py

Command classification for raw user input.

Responsibilities:
- Map every input string to exactly one CommandKind (classification is total:
  anything unrecognised is an ACTION and SQLite decides whether it is valid).
- Extract the argument of meta-commands (database or table name).
- Normalize database names into file names inside the managed directory.

Notes:
- Meta-command patterns are tested in a fixed priority order; the first match
  wins.
- QUERY/ACTION is decided from the leading keyword only, skipping any
  leading comments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from .config import DB_SUFFIX, EXIT_TOKEN
from .errors import InvalidNameError


class CommandKind(Enum):
    """Categories of user input."""
    EMPTY = auto()

    # Meta-commands (handled by the router, never sent verbatim to SQLite)
    CREATE_DATABASE = auto()
    DROP_DATABASE = auto()
    USE_DATABASE = auto()
    SHOW_DATABASES = auto()
    SHOW_TABLES = auto()
    SHOW_COLUMNS = auto()
    HELP = auto()
    EXIT = auto()

    # Statements for the engine
    QUERY = auto()    # SELECT / PRAGMA / EXPLAIN
    ACTION = auto()   # everything else (DDL/DML)

    @property
    def is_meta(self) -> bool:
        return self not in (CommandKind.EMPTY, CommandKind.QUERY, CommandKind.ACTION)


QUERY_KEYWORDS = frozenset({"SELECT", "PRAGMA", "EXPLAIN"})

_S = re.IGNORECASE | re.DOTALL

# Priority order matters: SHOW COLUMNS must be seen before the QUERY/ACTION split.
META_PATTERNS: tuple[tuple[CommandKind, "re.Pattern[str]"], ...] = (
    (CommandKind.CREATE_DATABASE, re.compile(r"^CREATE\s+DATABASE\b(?:\s+IF\s+NOT\s+EXISTS\b)?(.*)$", _S)),
    (CommandKind.DROP_DATABASE, re.compile(r"^DROP\s+DATABASE\b(\s+IF\s+EXISTS\b)?(.*)$", _S)),
    (CommandKind.USE_DATABASE, re.compile(r"^USE\s+(.*)$", _S)),
    (CommandKind.SHOW_DATABASES, re.compile(r"^SHOW\s+DATABASES\s*;?$", _S)),
    (CommandKind.SHOW_TABLES, re.compile(r"^SHOW\s+TABLES\s*;?$", _S)),
    (CommandKind.SHOW_COLUMNS, re.compile(r"^(?:SHOW\s+COLUMNS\s+FROM|DESCRIBE|DESC)\s+(.*)$", _S)),
    (CommandKind.HELP, re.compile(r"^HELP\s*;?$", _S)),
    (CommandKind.EXIT, re.compile(r"^(?:EXIT|QUIT)\s*;?$", _S)),
)

_LEADING_WORD = re.compile(r"\s*([A-Za-z_]+)")
# Whitespace plus any run of "--", "#" and "/* */" comments.
_LEADING_COMMENTS = re.compile(r"(?:\s+|--[^\n]*|#[^\n]*|/\*.*?\*/)*", re.DOTALL)
_QUOTES = ("'", '"', "`")


@dataclass(frozen=True)
class Command:
    """
    A classified input.

    Attributes:
        kind: CommandKind.
        text: The trimmed input.
        argument: Raw (not yet normalized) argument of a meta-command, e.g. the
                  database name after USE. None for non-meta commands.
        if_exists: True for DROP DATABASE IF EXISTS.
    """
    kind: CommandKind
    text: str
    argument: str | None = None
    if_exists: bool = False


def leading_keyword(sql: str) -> str:
    """Return the first word of a statement in upper case, past any leading comments ("" if none)."""
    m = _LEADING_WORD.match(sql, _LEADING_COMMENTS.match(sql).end())
    return m.group(1).upper() if m else ""


def classify(raw: str, exit_token: str = EXIT_TOKEN) -> Command:
    """
    Classify a raw input string.

    Args:
        raw: Text as typed by the user.
        exit_token: Extra shorthand accepted as EXIT.

    Returns:
        Command with the matched kind and, for meta-commands, the argument.
    """
    text = raw.strip()
    if not text:
        return Command(CommandKind.EMPTY, text)

    for kind, pattern in META_PATTERNS:
        m = pattern.match(text)
        if not m:
            continue
        if kind is CommandKind.DROP_DATABASE:
            return Command(kind, text, argument=m.group(2).strip(), if_exists=m.group(1) is not None)
        argument = m.group(1).strip() if pattern.groups else None
        return Command(kind, text, argument=argument)

    if text.rstrip(";").strip().lower() == exit_token.lower():
        return Command(CommandKind.EXIT, text)

    if leading_keyword(text) in QUERY_KEYWORDS:
        return Command(CommandKind.QUERY, text)
    return Command(CommandKind.ACTION, text)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def normalize_db_name(raw: str | None, suffix: str = DB_SUFFIX) -> str:
    """
    Turn a user-supplied database name into a file name.

    Strips one trailing statement terminator and one matching pair of
    surrounding quotes, then appends `suffix` unless already present.

    Args:
        raw: Name as typed (may include ';' and quotes).
        suffix: File extension for database files.

    Returns:
        File name such as "shop.db".

    Raises:
        InvalidNameError: if the result is empty, suffix-only, or not a plain
                          file name.
    """
    name = (raw or "").strip()
    if name.endswith(";"):
        name = name[:-1].strip()
    name = _unquote(name).strip()

    if not name.lower().endswith(suffix.lower()):
        name += suffix

    stem = name[: -len(suffix)]
    if not stem.strip() or stem in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidNameError(raw or "")
    return name


def normalize_identifier(raw: str | None) -> str:
    """Strip terminators and one pair of quotes from a table name."""
    name = (raw or "").replace(";", "").strip()
    return _unquote(name).strip()
