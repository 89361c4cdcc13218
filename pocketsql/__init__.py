"""
PocketSQL: a MySQL-flavoured front end over SQLite database files.

    from pocketsql import Session

    with Session.open("./data") as s:
        s.process("CREATE DATABASE shop;")
        res = s.process("SELECT 1 AS x;")
"""

from .catalog import Catalog
from .commands import Command, CommandKind, classify, normalize_db_name
from .config import Settings
from .errors import CatalogError, InvalidNameError, NoDatabaseError, PocketSQLError
from .result import Result
from .session import Session
from .translator import RULES, Rule, translate

__all__ = [
    "Catalog",
    "CatalogError",
    "Command",
    "CommandKind",
    "InvalidNameError",
    "NoDatabaseError",
    "PocketSQLError",
    "RULES",
    "Result",
    "Rule",
    "Session",
    "Settings",
    "classify",
    "normalize_db_name",
    "translate",
]

__version__ = "0.1.0"
