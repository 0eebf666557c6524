"""Prepared statements answering exec and query calls from the catalog."""

from __future__ import annotations

import random
import re
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .catalog import FakeResponse
from .errors import InterfaceError, StatementClosedError, UnimplementedCommandError
from .result import FakeResult
from .rows import RowCursor

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection

# The format style scans "%%" together with "%s" so a literal percent sign is
# never taken for a placeholder.  "%%" is kept as written in rendered text.
PLACEHOLDERS = {"qmark": re.compile(r"\?"), "format": re.compile(r"%%|%s")}

EXEC_COMMANDS = frozenset({"INSERT", "UPDATE", "DELETE", "MERGE"})

_ESCAPED_PERCENT = "%%"
_MAX_INSERT_ID = 2**63 - 1


def placeholder_for(paramstyle: str) -> re.Pattern[str]:
    try:
        return PLACEHOLDERS[paramstyle]
    except KeyError:
        raise InterfaceError(f"Unsupported paramstyle: {paramstyle}") from None


def command_of(sql: str) -> str:
    """Return the first keyword of ``sql`` upper-cased, or an empty string."""

    tokens = sql.lstrip(" \t\r\n(").split(None, 1)
    if not tokens:
        return ""
    return tokens[0].rstrip(";").upper()


def count_placeholders(sql: str, paramstyle: str = "qmark") -> int:
    pattern = placeholder_for(paramstyle)
    return sum(1 for match in pattern.finditer(sql) if match.group() != _ESCAPED_PERCENT)


def substitute_args(sql: str, args: Sequence[Any], paramstyle: str = "qmark") -> str:
    """Replace placeholders in order with ``str()`` of each argument.

    Text produced by a substituted value is never rescanned.  Placeholders
    without an argument stay as they are; surplus arguments are ignored.
    Escaped ``%%`` in the format style is left untouched.
    """

    pending = iter(args)
    missing = object()

    def _replace(match: re.Match[str]) -> str:
        if match.group() == _ESCAPED_PERCENT:
            return match.group()
        value = next(pending, missing)
        if value is missing:
            return match.group()
        return str(value)

    return placeholder_for(paramstyle).sub(_replace, sql)


def _new_insert_id() -> int:
    return random.randint(1, _MAX_INSERT_ID)


class Statement:
    """A single SQL template prepared on a fake connection.

    The template is never modified: the query path renders a per-call string
    with the bound arguments substituted before asking the catalog.  Statements
    can be chained through ``next`` when one call returns several result sets;
    closing a statement closes the whole chain.
    """

    def __init__(self, connection: "Connection", sql: str, *, paramstyle: str = "qmark") -> None:
        self.connection = connection
        self.sql = sql
        self.paramstyle = paramstyle
        self.command = command_of(sql)
        self.placeholders = count_placeholders(sql, paramstyle)
        self.next: Optional[Statement] = None
        self.closed = False

    def num_input(self) -> int:
        return self.placeholders

    def chain(self, statement: "Statement") -> "Statement":
        """Append ``statement`` to the end of the ``next`` chain."""

        tail = self
        while tail.next is not None:
            tail = tail.next
        tail.next = statement
        return statement

    def close(self) -> None:
        self.closed = True
        if self.next is not None:
            self.next.close()

    def render(self, args: Sequence[Any]) -> str:
        if not args:
            return self.sql
        return substitute_args(self.sql, args, self.paramstyle)

    def exec(self, args: Sequence[Any] = (), *, timeout: float | None = None) -> FakeResult:
        """Answer a statement that does not return rows.

        Matching uses the template as written; only the query path substitutes
        arguments into the text.
        """

        if self.closed:
            raise StatementClosedError()
        args = tuple(args)
        self.connection.faults.check("exec")

        response = self.connection.catalog.find_response(self.sql, args)
        if response.exceptions is not None:
            response.exceptions.check("exec")
        self._finish(response, self.sql, args)

        if self.command == "INSERT":
            last_insert_id = response.last_insert_id or _new_insert_id()
            return FakeResult(last_insert_id, 1)
        if self.command in EXEC_COMMANDS:
            return FakeResult(None, response.rows_affected)
        raise UnimplementedCommandError(self.command)

    def query(self, args: Sequence[Any] = (), *, timeout: float | None = None) -> RowCursor:
        """Answer a statement returning rows, whatever its command keyword."""

        if self.closed:
            raise StatementClosedError()
        args = tuple(args)
        self.connection.faults.check("query")

        sql = self.render(args)
        response = self.connection.catalog.find_response(sql, args)
        if response.exceptions is not None:
            response.exceptions.check("query")
        self._finish(response, sql, args)
        return RowCursor.from_records(response.response)

    def _finish(self, response: FakeResponse, sql: str, args: Sequence[Any]) -> None:
        if response.error is not None:
            raise response.error
        if response.callback is not None:
            response.callback(sql, args)

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


__all__ = [
    "EXEC_COMMANDS",
    "PLACEHOLDERS",
    "Statement",
    "command_of",
    "count_placeholders",
    "substitute_args",
]
