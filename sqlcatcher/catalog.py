"""Registry of expected statements and the canned responses they produce.

Test setup registers :class:`FakeResponse` objects on a
:class:`ResponseCatalog`; every statement executed through a fake connection
asks the catalog for the first registered response accepting its SQL text and
arguments.  Unmatched statements degrade to an empty response so tests only
need to stub the statements whose results they care about.  Misses are
recorded on the catalog and logged so silent gaps can still be found.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import get_settings
from .errors import BadConnectionError
from .matchers import AllOf, ArgsEqual, ArgsPredicate, Exact, Matcher, Regex, as_matcher

logger = logging.getLogger(__name__)

Hook = Callable[[], bool]
Callback = Callable[[str, Sequence[Any]], None]


@dataclass
class Exceptions:
    """Per-response hooks simulating transient connection failures."""

    hook_exec_bad_connection: Optional[Hook] = None
    hook_query_bad_connection: Optional[Hook] = None

    def check(self, direction: str) -> None:
        """Raise a bad connection when the hook for ``direction`` fires."""

        hook = getattr(self, f"hook_{direction}_bad_connection")
        if hook is not None and hook():
            logger.debug("Simulating bad connection on %s", direction)
            raise BadConnectionError(f"sqlcatcher: bad connection during {direction}")


@dataclass
class FakeResponse:
    """A registered expectation together with the result it yields."""

    pattern: str | re.Pattern[str] | Matcher | None = None
    args: Optional[Sequence[Any]] = None
    args_predicate: Optional[Callable[[Sequence[Any]], bool]] = None
    response: List[Mapping[str, Any]] = field(default_factory=list)
    error: Optional[BaseException] = None
    callback: Optional[Callback] = None
    last_insert_id: int = 0
    rows_affected: int = 0
    exceptions: Optional[Exceptions] = None
    once: bool = False
    triggered: bool = False

    def matcher(self) -> AllOf:
        """Text matcher combined with any argument constraints."""

        matchers: List[Matcher] = [as_matcher(self.pattern)]
        if self.args is not None:
            matchers.append(ArgsEqual(tuple(self.args)))
        if self.args_predicate is not None:
            matchers.append(ArgsPredicate(self.args_predicate))
        return AllOf(tuple(matchers))

    def is_match(self, sql: str, args: Sequence[Any]) -> bool:
        if self.once and self.triggered:
            return False
        return self.matcher().matches(sql, args)


class ResponseCatalog:
    """Ordered, thread-safe collection of :class:`FakeResponse` objects.

    Registration order decides precedence: when several expectations accept a
    statement, the first registered one wins.
    """

    def __init__(self, *, log_queries: bool | None = None) -> None:
        self._lock = threading.RLock()
        self._responses: List[FakeResponse] = []
        self._misses: List[Tuple[str, Tuple[Any, ...]]] = []
        self._log_queries = log_queries

    @property
    def log_queries(self) -> bool:
        if self._log_queries is not None:
            return self._log_queries
        return get_settings().log_queries

    @log_queries.setter
    def log_queries(self, value: bool | None) -> None:
        self._log_queries = value

    @property
    def responses(self) -> List[FakeResponse]:
        with self._lock:
            return list(self._responses)

    @property
    def misses(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        """Statements (and their args) that matched no expectation."""

        with self._lock:
            return list(self._misses)

    @property
    def miss_count(self) -> int:
        with self._lock:
            return len(self._misses)

    def register(
        self,
        matcher: str | re.Pattern[str] | Matcher | None,
        response: FakeResponse | None = None,
    ) -> FakeResponse:
        """Append an expectation and return the registered response."""

        response = response if response is not None else FakeResponse()
        response.pattern = matcher
        with self._lock:
            self._responses.append(response)
        return response

    def attach(self, responses: Iterable[FakeResponse]) -> None:
        """Append already-built responses, keeping their own patterns."""

        with self._lock:
            self._responses.extend(responses)

    def new_mock(self) -> "MockBuilder":
        return MockBuilder(self)

    def reset(self) -> "ResponseCatalog":
        """Forget every expectation and the recorded misses."""

        with self._lock:
            self._responses = []
            self._misses = []
        return self

    def find_response(self, sql: str, args: Sequence[Any] | None = None) -> FakeResponse:
        """Return the first response accepting ``sql`` and ``args``.

        A fresh empty response is returned when nothing matches.
        """

        bound = tuple(args or ())
        if self.log_queries:
            logger.debug("Checking query %s with args %s", sql, bound)

        with self._lock:
            for response in self._responses:
                if response.is_match(sql, bound):
                    if response.once:
                        response.triggered = True
                    if self.log_queries:
                        logger.debug("Query %s matched pattern %r", sql, response.pattern)
                    return response
            self._misses.append((sql, bound))

        logger.info("No mock registered for query %s; returning empty response", sql)
        return FakeResponse()


class MockBuilder:
    """Fluent helper registering a single response on creation.

    Every ``with_*`` call updates the already registered response and returns
    the builder, so calls can be chained::

        catalog.new_mock().with_query("SELECT name FROM users").with_reply(rows)
    """

    def __init__(self, catalog: ResponseCatalog) -> None:
        self.response = FakeResponse()
        catalog.attach([self.response])

    def with_query(self, pattern: str) -> "MockBuilder":
        self.response.pattern = pattern
        return self

    def with_query_exact(self, sql: str) -> "MockBuilder":
        self.response.pattern = Exact(sql)
        return self

    def with_query_regex(self, pattern: str, flags: int = 0) -> "MockBuilder":
        self.response.pattern = Regex.compile(pattern, flags)
        return self

    def with_args(self, *args: Any) -> "MockBuilder":
        self.response.args = args
        return self

    def with_args_matching(self, predicate: Callable[[Sequence[Any]], bool]) -> "MockBuilder":
        self.response.args_predicate = predicate
        return self

    def with_reply(self, rows: Iterable[Mapping[str, Any]]) -> "MockBuilder":
        self.response.response = list(rows)
        return self

    def with_error(self, error: BaseException) -> "MockBuilder":
        self.response.error = error
        return self

    def with_rows_num(self, rows_affected: int) -> "MockBuilder":
        self.response.rows_affected = rows_affected
        return self

    def with_id(self, last_insert_id: int) -> "MockBuilder":
        self.response.last_insert_id = last_insert_id
        return self

    def with_callback(self, callback: Callback) -> "MockBuilder":
        self.response.callback = callback
        return self

    def with_exec_exception(self, hook: Hook | None = None) -> "MockBuilder":
        """Make exec calls fail with a bad connection while ``hook`` returns true."""

        exceptions = self._exceptions()
        exceptions.hook_exec_bad_connection = hook or (lambda: True)
        return self

    def with_query_exception(self, hook: Hook | None = None) -> "MockBuilder":
        exceptions = self._exceptions()
        exceptions.hook_query_bad_connection = hook or (lambda: True)
        return self

    def one_time(self) -> "MockBuilder":
        self.response.once = True
        return self

    def _exceptions(self) -> Exceptions:
        if self.response.exceptions is None:
            self.response.exceptions = Exceptions()
        return self.response.exceptions


catcher = ResponseCatalog()
"""Process-wide default catalog used by connections created without one."""


__all__ = [
    "Callback",
    "Exceptions",
    "FakeResponse",
    "Hook",
    "MockBuilder",
    "ResponseCatalog",
    "catcher",
]
