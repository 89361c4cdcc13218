"""
pocketsql/result.py

The uniform result envelope returned by Session.process().

Every command, whether a meta-command, a query or an action, produces one
Result. Both the tabular fields and the message are always populated
(possibly empty/zero) so a renderer can treat every outcome the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ERROR_PREFIX = "ERROR: "


@dataclass(frozen=True)
class Result:
    """
    Outcome of one submitted command.

    Attributes:
        success: Whether the command succeeded.
        message: Human-readable summary or error description. Failures carry
                 the "ERROR: " prefix followed by the original message.
        columns: Output column names in engine order (empty for plain messages).
        rows: Rows of text cells aligned with `columns`. SQL NULL is "NULL".
        rows_affected: Row count for tabular results, or the engine-reported
                       change count for actions.
        elapsed: Seconds spent inside the engine call (0.0 for meta-commands).
        exit_requested: Advisory flag asking the host to terminate.
    """
    success: bool
    message: str
    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    rows_affected: int = 0
    elapsed: float = 0.0
    exit_requested: bool = False

    @classmethod
    def ok(cls, message: str, rows_affected: int = 0) -> "Result":
        return cls(success=True, message=message, rows_affected=max(rows_affected, 0))

    @classmethod
    def fail(cls, message: str) -> "Result":
        if not message.startswith(ERROR_PREFIX):
            message = ERROR_PREFIX + message
        return cls(success=False, message=message)

    @classmethod
    def table(cls, message: str, columns: list[str], rows: list[list[str]]) -> "Result":
        """Build a successful tabular result; rows_affected tracks the row count."""
        return cls(
            success=True,
            message=message,
            columns=list(columns),
            rows=[list(r) for r in rows],
            rows_affected=len(rows),
        )

    @property
    def has_columns(self) -> bool:
        return bool(self.columns)

    @property
    def has_rows(self) -> bool:
        return bool(self.rows)
