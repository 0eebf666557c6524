"""Result of a statement that does not return rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class FakeResult:
    """Outcome of an exec call.

    ``last_insert_id`` is ``None`` for statements that do not insert, the same
    way DB-API cursors leave ``lastrowid`` unset.
    """

    last_insert_id: Optional[int] = None
    rows_affected: int = 0


__all__ = ["FakeResult"]
