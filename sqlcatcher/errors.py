"""Exception hierarchy exposed by the fake driver.

The classes follow the DB-API 2.0 layout so that code written against a real
driver can catch the same names.  Three driver specific errors sit on top:
closed statements, exec commands the fake does not know how to answer, and
the simulated "bad connection" transport failure.
"""

from __future__ import annotations


class Warning(Exception):  # noqa: A001 - DB-API name
    """Important warnings such as data truncation."""


class Error(Exception):
    """Base class of every error raised by the driver."""


class InterfaceError(Error):
    """Errors related to the driver interface rather than the database."""


class DatabaseError(Error):
    """Errors related to the (fake) database."""


class DataError(DatabaseError):
    pass


class OperationalError(DatabaseError):
    pass


class IntegrityError(DatabaseError):
    pass


class InternalError(DatabaseError):
    pass


class ProgrammingError(DatabaseError):
    pass


class NotSupportedError(DatabaseError):
    pass


class StatementClosedError(InterfaceError):
    """Raised when a closed statement is executed or queried."""

    def __init__(self) -> None:
        super().__init__("sqlcatcher: statement has been closed")


class UnimplementedCommandError(NotSupportedError):
    """Raised when the exec path receives a command it cannot answer."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"unimplemented statement exec command type of {command!r}")


class BadConnectionError(OperationalError):
    """Simulated transport failure produced by a fault-injection hook.

    Callers are expected to apply their own reconnect policy; the driver
    never retries.
    """

    def __init__(self, message: str = "sqlcatcher: bad connection") -> None:
        super().__init__(message)


__all__ = [
    "BadConnectionError",
    "DataError",
    "DatabaseError",
    "Error",
    "IntegrityError",
    "InterfaceError",
    "InternalError",
    "NotSupportedError",
    "OperationalError",
    "ProgrammingError",
    "StatementClosedError",
    "UnimplementedCommandError",
    "Warning",
]
