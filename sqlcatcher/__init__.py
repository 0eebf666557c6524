"""Fake DB-API driver answering SQL from registered expectations."""

from .catalog import Exceptions, FakeResponse, MockBuilder, ResponseCatalog, catcher
from .connection import Connection, Cursor, Transaction, apilevel, connect, paramstyle, threadsafety
from .errors import (
    BadConnectionError,
    DatabaseError,
    DataError,
    Error,
    IntegrityError,
    InterfaceError,
    InternalError,
    NotSupportedError,
    OperationalError,
    ProgrammingError,
    StatementClosedError,
    UnimplementedCommandError,
    Warning,
)
from .faults import FaultPolicy
from .matchers import ArgsEqual, ArgsPredicate, Exact, Matcher, Regex, Substring
from .result import FakeResult
from .rows import RowCursor
from .statement import Statement

__all__ = [
    "ArgsEqual",
    "ArgsPredicate",
    "BadConnectionError",
    "Connection",
    "Cursor",
    "DataError",
    "DatabaseError",
    "Error",
    "Exact",
    "Exceptions",
    "FakeResponse",
    "FakeResult",
    "FaultPolicy",
    "IntegrityError",
    "InterfaceError",
    "InternalError",
    "Matcher",
    "MockBuilder",
    "NotSupportedError",
    "OperationalError",
    "ProgrammingError",
    "Regex",
    "ResponseCatalog",
    "RowCursor",
    "Statement",
    "StatementClosedError",
    "Substring",
    "Transaction",
    "UnimplementedCommandError",
    "Warning",
    "apilevel",
    "catcher",
    "connect",
    "paramstyle",
    "threadsafety",
]
