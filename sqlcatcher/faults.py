"""Injectable fault policy used to simulate broken connections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .errors import BadConnectionError

Hook = Callable[[], bool]


@dataclass
class FaultPolicy:
    """Decision points consulted before exec, query, commit and rollback.

    Each hook is a zero-argument callable; when it returns true the operation
    fails with :class:`~sqlcatcher.errors.BadConnectionError`.
    """

    bad_exec: Optional[Hook] = None
    bad_query: Optional[Hook] = None
    bad_commit: Optional[Hook] = None
    bad_rollback: Optional[Hook] = None

    def check(self, point: str) -> None:
        hook = getattr(self, f"bad_{point}")
        if hook is not None and hook():
            raise BadConnectionError(f"sqlcatcher: bad connection during {point}")


__all__ = ["FaultPolicy", "Hook"]
