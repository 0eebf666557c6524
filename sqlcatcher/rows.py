"""Forward-only replay of canned rows."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .errors import InterfaceError

Row = Tuple[Any, ...]


def derive_columns(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Column names in the key order of the first record."""

    if not records:
        return []
    return list(records[0].keys())


def project_rows(records: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> List[Row]:
    # Keys missing from a record are filled with None; extra keys are dropped.
    index: Dict[str, int] = {name: position for position, name in enumerate(columns)}
    rows: List[Row] = []
    for record in records:
        values: List[Any] = [None] * len(columns)
        for name, position in index.items():
            values[position] = record.get(name)
        rows.append(tuple(values))
    return rows


class RowCursor:
    """Iterate over one or more stacked result sets of fake rows.

    The cursor starts before the first row of the first set.  ``next()``
    advances within the current set only; moving to the following set needs an
    explicit :meth:`next_result_set` call.  An error planted with
    :meth:`error_at` is raised when the cursor advances onto that row.
    """

    def __init__(
        self,
        result_sets: Sequence[Sequence[Row]] | None = None,
        columns: Sequence[str] | None = None,
    ) -> None:
        self._sets: List[List[Row]] = [list(rows) for rows in (result_sets or [[]])]
        self._columns: List[str] = list(columns or [])
        self._set_index = 0
        self._position = -1
        self._error: Optional[BaseException] = None
        self._error_position = -1
        self.closed = False

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "RowCursor":
        columns = derive_columns(records)
        return cls([project_rows(records, columns)], columns)

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def description(self) -> Optional[List[Tuple[Any, ...]]]:
        if not self._columns:
            return None
        return [(name, None, None, None, None, None, None) for name in self._columns]

    @property
    def position(self) -> int:
        return self._position

    @property
    def result_set(self) -> int:
        return self._set_index

    @property
    def row_count(self) -> int:
        """Number of rows in the current result set."""

        return len(self._sets[self._set_index])

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def error_position(self) -> int:
        return self._error_position

    def error_at(self, position: int, error: BaseException) -> "RowCursor":
        """Raise ``error`` when the cursor advances onto row ``position``."""

        self._error = error
        self._error_position = position
        return self

    def next(self) -> Row:
        if self.closed:
            raise InterfaceError("sqlcatcher: rows are closed")
        rows = self._sets[self._set_index]
        if self._position + 1 >= len(rows):
            self._position = len(rows)
            raise StopIteration
        self._position += 1
        if self._error is not None and self._position == self._error_position:
            raise self._error
        return rows[self._position]

    def has_next_result_set(self) -> bool:
        return self._set_index < len(self._sets) - 1

    def next_result_set(self) -> bool:
        """Move to the start of the following result set, if there is one."""

        if not self.has_next_result_set():
            return False
        self._set_index += 1
        self._position = -1
        return True

    def close(self) -> None:
        self.closed = True

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        if self.closed:
            raise StopIteration
        return self.next()


__all__ = ["Row", "RowCursor", "derive_columns", "project_rows"]
