"""
Result shapes returned by ``Session``.

``DataTable`` and ``DataSet`` are materialized copies of result sets and
stay usable after the connection is gone.  ``RowReader`` is a
forward-only view over a live cursor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union


def column_names(description: Optional[Sequence[Sequence[Any]]]) -> Tuple[str, ...]:
    if not description:
        return ()
    return tuple(col[0] for col in description)


@dataclass
class DataTable:
    """One result set copied into memory."""

    name: str = "Table"
    columns: Tuple[str, ...] = ()
    rows: List[Tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        return iter(self.rows)

    def records(self) -> List[Dict[str, Any]]:
        """Rows as dicts keyed by column name."""
        return [dict(zip(self.columns, row)) for row in self.rows]

    @classmethod
    def from_cursor(cls, cursor: Any, name: str = "Table") -> "DataTable":
        """Copy the first result set that has columns."""
        skip_row_counts(cursor)
        columns = column_names(cursor.description)
        rows = [tuple(row) for row in cursor.fetchall()] if columns else []
        return cls(name=name, columns=columns, rows=rows)


@dataclass
class DataSet:
    """Several result sets, named ``Table``, ``Table1``, ``Table2``..."""

    tables: List[DataTable] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator[DataTable]:
        return iter(self.tables)

    def __getitem__(self, key: Union[int, str]) -> DataTable:
        if isinstance(key, int):
            return self.tables[key]
        for table in self.tables:
            if table.name.lower() == key.lower():
                return table
        raise KeyError(key)

    @staticmethod
    def table_name(index: int) -> str:
        return "Table" if index == 0 else f"Table{index}"

    @classmethod
    def from_cursor(cls, cursor: Any) -> "DataSet":
        """Copy every row-returning result set of ``cursor``.

        Result sets without a description (row counts of DML statements)
        are skipped.
        """
        tables: List[DataTable] = []
        while True:
            if cursor.description:
                tables.append(DataTable.from_cursor(cursor, cls.table_name(len(tables))))
            if not _next_result(cursor):
                break
        return cls(tables=tables)


def skip_row_counts(cursor: Any) -> bool:
    """Advance past results without columns; False if no row set is left."""
    while not cursor.description:
        if not _next_result(cursor):
            return False
    return True


def _next_result(cursor: Any) -> bool:
    nextset = getattr(cursor, "nextset", None)
    if nextset is None:
        return False
    return bool(nextset())


class RowReader:
    """Forward-only reader over an executed cursor.

    Iterate it, or call ``read()`` until it returns ``None``.  ``close()``
    closes the cursor and runs ``on_close`` once; use the reader as a
    context manager so that happens on every exit path.
    """

    def __init__(self, cursor: Any, on_close: Optional[Callable[[], None]] = None) -> None:
        self._cursor = cursor
        self._on_close = on_close
        self._closed = False

    def __enter__(self) -> "RowReader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        while True:
            row = self.read()
            if row is None:
                return
            yield row

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def columns(self) -> Tuple[str, ...]:
        self._check_open()
        return column_names(self._cursor.description)

    def read(self) -> Optional[Tuple[Any, ...]]:
        """Return the next row, or ``None`` when the result set is exhausted."""
        self._check_open()
        if not self._cursor.description:
            return None
        row = self._cursor.fetchone()
        return tuple(row) if row is not None else None

    def records(self) -> Iterator[Dict[str, Any]]:
        columns = self.columns
        for row in self:
            yield dict(zip(columns, row))

    def next_result(self) -> bool:
        """Advance to the next result set; ``False`` when there is none."""
        self._check_open()
        return _next_result(self._cursor)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._cursor.close()
        finally:
            if self._on_close is not None:
                self._on_close()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Reader is closed")
