"""
pocketsql/translator.py

MySQL -> SQLite dialect translation.

Responsibilities:
- Rewrite the MySQL vocabulary SQLite does not understand (AUTO_INCREMENT,
  ENUM, storage engine/charset table options, optimizer hints, locking,
  partitioning) into syntax SQLite accepts.
- Stay a pure text -> text function: no parsing, no state.

Design notes:
- Each rewrite is a Rule (pattern + replacement + optional guard) and RULES
  is applied strictly in order.
- Quoted spans ('...', "..." and `...`) are never rewritten: every rule's
  regex is compiled as an alternation with a literal branch tried first, and
  a literal match is put back unchanged.
- Keywords match case-insensitively; everything else keeps its case.
- Unsupported clauses are discarded rather than rejected: LOCK TABLES is
  commented out and PARTITION BY is dropped.
- Already-translated text matches none of the patterns, so translating twice
  gives the same output as translating once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Union

from .log import get_logger

logger = get_logger(__name__)

Replacement = Union[str, Callable[[re.Match], str]]

_I = re.IGNORECASE

_CREATE_TABLE = re.compile(r"\bCREATE\s+(?:TEMP(?:ORARY)?\s+)?TABLE\b", _I)
_LEADING_TRUNCATE = re.compile(r"^\s*TRUNCATE\b", _I)
_LEADING_LOCK = re.compile(r"^\s*(?:UN)?LOCK\s+TABLES\b", _I)

# String literals and quoted identifiers, with '' / \' style escapes.
LITERAL = r"""'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*"|`(?:[^`]|``)*`"""

_INT_TYPE = r"\b(?:TINY|SMALL|MEDIUM|BIG)?INT(?:EGER)?(?:\s*\(\s*\d+\s*\))?(?:\s+UNSIGNED)?"
_NOT_NULL = r"(?:\s+NOT\s+NULL)?"

HINTS = ("SQL_CALC_FOUND_ROWS", "SQL_NO_CACHE", "HIGH_PRIORITY", "LOW_PRIORITY", "DELAYED", "QUICK")


def _keep_verb(m: re.Match) -> str:
    return m.group("verb")


@dataclass(frozen=True)
class Rule:
    """
    One rewrite step.

    Attributes:
        name: Short identifier used in logs and tests.
        pattern: Compiled regex whose first alternative is the named group
                 "lit" (a quoted span); see _rule().
        replacement: Replacement text (inserted as is) or callable.
        guard: Optional precondition on the input statement; the rule is
               skipped when the guard does not match.
    """
    name: str
    pattern: "re.Pattern[str]"
    replacement: Replacement
    guard: "re.Pattern[str] | None" = None

    def _replace(self, m: re.Match) -> str:
        literal = m.groupdict().get("lit")
        if literal is not None:
            return literal
        if callable(self.replacement):
            return self.replacement(m)
        return self.replacement

    def apply(self, sql: str) -> str:
        if self.guard is not None and not self.guard.search(sql):
            return sql
        out = self.pattern.sub(self._replace, sql)
        if out != sql:
            logger.debug("rule %s rewrote statement", self.name)
        return out


def _rule(name: str, pattern: str, replacement: Replacement, guard=None, flags: int = _I) -> Rule:
    compiled = re.compile(rf"(?P<lit>{LITERAL})|(?:{pattern})", flags)
    return Rule(name=name, pattern=compiled, replacement=replacement, guard=guard)


def _strip(name: str, pattern: str, guard=None) -> Rule:
    return _rule(name, pattern, "", guard=guard)


RULES: tuple[Rule, ...] = (
    # 1. AUTO_INCREMENT
    _rule(
        "auto_increment_pk",
        _INT_TYPE + _NOT_NULL + r"\s+AUTO_INCREMENT" + _NOT_NULL + r"\s+PRIMARY\s+KEY\b",
        "INTEGER PRIMARY KEY AUTOINCREMENT",
    ),
    _rule(
        "pk_auto_increment",
        _INT_TYPE + _NOT_NULL + r"\s+PRIMARY\s+KEY" + _NOT_NULL + r"\s+AUTO_INCREMENT\b",
        "INTEGER PRIMARY KEY AUTOINCREMENT",
    ),
    # table-level AUTO_INCREMENT=<n> is left for the CREATE TABLE options below
    _rule("auto_increment", r"\bAUTO_INCREMENT\b(?!\s*=)", "AUTOINCREMENT"),
    # 2. ENUM('a', 'b') -> TEXT
    _rule("enum", r"""\bENUM\s*\((?:'(?:[^']|'')*'|"(?:[^"]|"")*"|[^)'"])*\)""", "TEXT"),
    # 3. storage engine
    _strip("engine", r"\bENGINE\s*=\s*\w+"),
    # 4. UNSIGNED
    _strip("unsigned", r"\bUNSIGNED\b"),
    # 5. TRUNCATE [TABLE] t -> DELETE FROM t
    _rule("truncate", r"^\s*TRUNCATE\s+(?:TABLE\s+)?", "DELETE FROM ", guard=_LEADING_TRUNCATE),
    # 6. NOW()
    _rule("now", r"\bNOW\s*\(\s*\)", "CURRENT_TIMESTAMP"),
    # 7. "#" comments (at line start or after whitespace)
    _rule("hash_comment", r"(?:(?<=\s)|^)\#", "--", flags=re.MULTILINE),
    # 8. INSERT [LOW_PRIORITY|DELAYED|HIGH_PRIORITY] IGNORE
    _rule(
        "insert_ignore",
        r"\bINSERT\s+(?:(?:LOW_PRIORITY|DELAYED|HIGH_PRIORITY)\s+)?IGNORE\b",
        "INSERT OR IGNORE",
    ),
    # 9. CREATE TABLE options
    _strip("charset", r"(?:\bDEFAULT\s+)?\b(?:CHARSET|CHARACTER\s+SET)\s*=\s*\w+", guard=_CREATE_TABLE),
    _strip("collate", r"(?:\bDEFAULT\s+)?\bCOLLATE\s*=\s*\w+", guard=_CREATE_TABLE),
    _strip("row_format", r"\bROW_FORMAT\s*=\s*\w+", guard=_CREATE_TABLE),
    _strip("comment", r"\bCOMMENT\s*=?\s*'(?:[^'\\]|\\.|'')*'", guard=_CREATE_TABLE),
    _strip("table_auto_increment", r"\bAUTO_INCREMENT\s*=\s*\d+", guard=_CREATE_TABLE),
    _strip("checksum", r"\bCHECKSUM\s*=\s*\d+", guard=_CREATE_TABLE),
    # 10. optimizer / priority hints, only in modifier position after the verb
    _rule(
        "hints",
        r"\b(?P<verb>SELECT|INSERT|REPLACE|UPDATE|DELETE)(?:\s+(?:" + "|".join(HINTS) + r")\b)+",
        _keep_verb,
    ),
    # 11. LOCK/UNLOCK TABLES become comments
    _rule("lock_tables", r"^", "-- ", guard=_LEADING_LOCK, flags=re.MULTILINE),
    # 12. PARTITION BY ... to end of statement
    _rule("partition", r"\s*\bPARTITION\s+BY\b.*", "", flags=_I | re.DOTALL),
)


def translate(sql: str, rules: Iterable[Rule] = RULES) -> str:
    """
    Rewrite a MySQL-flavoured statement into SQLite syntax.

    Args:
        sql: Statement text.
        rules: Rules to apply, in order (defaults to RULES).

    Returns:
        The rewritten statement.
    """
    for rule in rules:
        sql = rule.apply(sql)
    return sql


def is_noop(sql: str) -> bool:
    """True when a statement holds nothing but blank lines and "--" comments."""
    return all(not line.strip() or line.lstrip().startswith("--") for line in sql.splitlines())


# Queries run as typed apart from "#" comments, which SQLite cannot parse.
QUERY_RULES: tuple[Rule, ...] = tuple(r for r in RULES if r.name == "hash_comment")
