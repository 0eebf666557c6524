"""Matchers deciding whether an incoming statement satisfies an expectation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Matcher(Protocol):
    """Anything able to accept or reject a statement and its arguments."""

    def matches(self, sql: str, args: Sequence[Any]) -> bool:  # pragma: no cover - interface
        ...


@dataclass(frozen=True, slots=True)
class Substring:
    """Accept statements containing ``pattern``; an empty pattern accepts all."""

    pattern: str

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return self.pattern in sql


@dataclass(frozen=True, slots=True)
class Exact:
    pattern: str

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return sql == self.pattern


@dataclass(frozen=True, slots=True)
class Regex:
    """Accept statements where ``pattern`` is found anywhere (``re.search``)."""

    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str, flags: int = 0) -> "Regex":
        return cls(re.compile(pattern, flags))

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return self.pattern.search(sql) is not None


@dataclass(frozen=True, slots=True)
class ArgsEqual:
    """Accept only when the bound arguments equal ``expected`` in order."""

    expected: tuple[Any, ...]

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return tuple(args) == self.expected


@dataclass(frozen=True, slots=True)
class ArgsPredicate:
    predicate: Callable[[Sequence[Any]], bool]

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return bool(self.predicate(args))


@dataclass(frozen=True, slots=True)
class AllOf:
    """Accept when every inner matcher accepts."""

    matchers: tuple[Matcher, ...]

    def matches(self, sql: str, args: Sequence[Any]) -> bool:
        return all(matcher.matches(sql, args) for matcher in self.matchers)


def as_matcher(value: str | re.Pattern[str] | Matcher | None) -> Matcher:
    """Coerce a registration-time pattern into a :class:`Matcher`.

    Plain strings use substring semantics, compiled patterns use regex search,
    ``None`` accepts every statement.
    """

    if value is None:
        return Substring("")
    if isinstance(value, str):
        return Substring(value)
    if isinstance(value, re.Pattern):
        return Regex(value)
    if isinstance(value, Matcher):
        return value
    raise TypeError(f"Unsupported matcher type: {type(value).__name__}")


__all__ = [
    "AllOf",
    "ArgsEqual",
    "ArgsPredicate",
    "Exact",
    "Matcher",
    "Regex",
    "Substring",
    "as_matcher",
]
