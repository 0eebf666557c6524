"""DB-API 2.0 surface of the fake driver.

``connect()`` returns a :class:`Connection` bound to a
:class:`~sqlcatcher.catalog.ResponseCatalog`.  Cursors route every statement
through a :class:`~sqlcatcher.statement.Statement`: data-changing commands
take the exec path and report ``rowcount``/``lastrowid``, everything else
takes the query path and exposes the canned rows through the usual fetch
methods.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from .catalog import ResponseCatalog, catcher
from .config import DEFAULT_PARAMSTYLE, get_settings
from .errors import InterfaceError, NotSupportedError, ProgrammingError
from .faults import FaultPolicy
from .rows import Row, RowCursor
from .statement import EXEC_COMMANDS, Statement

logger = logging.getLogger(__name__)

apilevel = "2.0"
threadsafety = 1
# Driver default; connect() reads SQLCATCHER_PARAMSTYLE for each connection.
paramstyle = DEFAULT_PARAMSTYLE


def returns_rows(statement: Statement) -> bool:
    """Whether a cursor should answer ``statement`` through the query path.

    Data-changing commands go through exec unless they carry a ``RETURNING``
    clause, in which case the registered rows are what the caller fetches.
    """

    if statement.command not in EXEC_COMMANDS:
        return True
    return " RETURNING " in f" {' '.join(statement.sql.upper().split())} "


class Transaction:
    """Open transaction on a fake connection.

    Holds only a weak reference to its connection; finishing the transaction
    clears the connection's current-transaction pointer before the fault
    policy is consulted.
    """

    def __init__(self, connection: "Connection") -> None:
        self._connection = weakref.ref(connection)
        self._faults = connection.faults

    @property
    def connection(self) -> Optional["Connection"]:
        return self._connection()

    def _detach(self) -> None:
        connection = self._connection()
        if connection is not None and connection.current_transaction is self:
            connection.current_transaction = None

    def commit(self) -> None:
        self._detach()
        self._faults.check("commit")

    def rollback(self) -> None:
        self._detach()
        self._faults.check("rollback")


class Connection:
    def __init__(
        self,
        catalog: ResponseCatalog | None = None,
        *,
        paramstyle: str | None = None,
        faults: FaultPolicy | None = None,
        autocommit: bool = False,
        **options: Any,
    ) -> None:
        self.catalog = catalog if catalog is not None else catcher
        self.paramstyle = paramstyle or get_settings().paramstyle
        self.faults = faults if faults is not None else FaultPolicy()
        self.autocommit = autocommit
        self.options = options
        self.current_transaction: Optional[Transaction] = None
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise InterfaceError("sqlcatcher: connection is closed")

    def prepare(self, sql: str) -> Statement:
        self._ensure_open()
        return Statement(self, sql, paramstyle=self.paramstyle)

    def begin(self) -> Transaction:
        self._ensure_open()
        if self.current_transaction is not None:
            raise ProgrammingError("sqlcatcher: a transaction is already in progress")
        self.current_transaction = Transaction(self)
        return self.current_transaction

    def commit(self) -> None:
        self._ensure_open()
        if self.current_transaction is not None:
            self.current_transaction.commit()

    def rollback(self) -> None:
        self._ensure_open()
        if self.current_transaction is not None:
            self.current_transaction.rollback()

    def cursor(self) -> "Cursor":
        self._ensure_open()
        return Cursor(self)

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "Cursor":
        """Create a cursor, execute ``sql`` on it and return it."""

        return self.cursor().execute(sql, params)

    def close(self) -> None:
        if self.closed:
            return
        self.current_transaction = None
        self.closed = True

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.closed:
            return False
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.close()
        return False


class Cursor:
    arraysize = 1

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        self.description: Optional[List[tuple]] = None
        self.rowcount = -1
        self.lastrowid: Optional[int] = None
        self._rows: Optional[RowCursor] = None
        self._statement: Optional[Statement] = None
        self.closed = False

    def _ensure_open(self) -> None:
        if self.closed:
            raise InterfaceError("sqlcatcher: cursor is closed")
        self.connection._ensure_open()

    def _discard_result(self) -> None:
        if self._rows is not None:
            self._rows.close()
        if self._statement is not None:
            self._statement.close()
        self._rows = None
        self._statement = None
        self.description = None
        self.rowcount = -1
        self.lastrowid = None

    def execute(self, operation: str, params: Sequence[Any] | None = None) -> "Cursor":
        self._ensure_open()
        if isinstance(params, Mapping):
            raise NotSupportedError("sqlcatcher: only positional parameters are supported")
        self._discard_result()

        connection = self.connection
        if not connection.autocommit and connection.current_transaction is None:
            connection.begin()

        statement = connection.prepare(operation)
        self._statement = statement
        args = tuple(params or ())
        if returns_rows(statement):
            rows = statement.query(args)
            self._rows = rows
            self.description = rows.description
            self.rowcount = rows.row_count
        else:
            result = statement.exec(args)
            self.rowcount = result.rows_affected
            self.lastrowid = result.last_insert_id
        return self

    def executemany(self, operation: str, seq_of_params: Sequence[Sequence[Any]]) -> "Cursor":
        total = 0
        for params in seq_of_params:
            self.execute(operation, params)
            total += max(self.rowcount, 0)
        self.rowcount = total
        return self

    def _result_rows(self) -> RowCursor:
        self._ensure_open()
        if self._rows is None:
            raise ProgrammingError("sqlcatcher: no results to fetch")
        return self._rows

    def fetchone(self) -> Optional[Row]:
        rows = self._result_rows()
        try:
            return rows.next()
        except StopIteration:
            return None

    def fetchmany(self, size: int | None = None) -> List[Row]:
        size = self.arraysize if size is None else size
        fetched: List[Row] = []
        while len(fetched) < size:
            row = self.fetchone()
            if row is None:
                break
            fetched.append(row)
        return fetched

    def fetchall(self) -> List[Row]:
        fetched: List[Row] = []
        while True:
            row = self.fetchone()
            if row is None:
                return fetched
            fetched.append(row)

    def nextset(self) -> Optional[bool]:
        rows = self._result_rows()
        if not rows.next_result_set():
            return None
        self.rowcount = rows.row_count
        return True

    def setinputsizes(self, sizes: Any) -> None:
        return None

    def setoutputsize(self, size: Any, column: Any = None) -> None:
        return None

    def close(self) -> None:
        if self.closed:
            return
        self._discard_result()
        self.closed = True

    def __iter__(self) -> Iterator[Row]:
        while True:
            row = self.fetchone()
            if row is None:
                return
            yield row

    def __enter__(self) -> "Cursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


def connect(
    catalog: ResponseCatalog | None = None,
    *,
    paramstyle: str | None = None,
    faults: FaultPolicy | None = None,
    autocommit: bool = False,
    **options: Any,
) -> Connection:
    """Open a fake connection answering from ``catalog``.

    Without a catalog the process-wide :data:`sqlcatcher.catalog.catcher` is
    used.  Extra keyword arguments (DSN parts, timeouts) are kept on
    ``Connection.options`` and otherwise ignored.
    """

    connection = Connection(
        catalog,
        paramstyle=paramstyle,
        faults=faults,
        autocommit=autocommit,
        **options,
    )
    logger.debug("Opened fake connection (paramstyle=%s)", connection.paramstyle)
    return connection


__all__ = [
    "Connection",
    "Cursor",
    "Transaction",
    "apilevel",
    "connect",
    "paramstyle",
    "returns_rows",
    "threadsafety",
]
