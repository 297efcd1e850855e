"""Tests for result containers and the row reader."""

from __future__ import annotations

import pytest

from dbfactory.results import DataSet, DataTable, RowReader


class ListCursor:
    """Cursor over fixed rows, without ``nextset``."""

    def __init__(self, columns, rows) -> None:
        self.description = [(name, None) for name in columns] if columns else None
        self._rows = list(rows)
        self.closed = False

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


def test_table_from_cursor() -> None:
    table = DataTable.from_cursor(ListCursor(["id", "name"], [[1, "a"], [2, "b"]]))

    assert table.name == "Table"
    assert table.columns == ("id", "name")
    assert table.rows == [(1, "a"), (2, "b")]
    assert list(table) == [(1, "a"), (2, "b")]


def test_table_from_statement_without_rows() -> None:
    table = DataTable.from_cursor(ListCursor(None, []))

    assert table.columns == ()
    assert len(table) == 0


def test_dataset_without_nextset_has_single_table() -> None:
    dataset = DataSet.from_cursor(ListCursor(["n"], [[1]]))

    assert len(dataset) == 1
    assert dataset["Table"].rows == [(1,)]


def test_dataset_lookup_errors() -> None:
    dataset = DataSet([DataTable("Table")])

    with pytest.raises(KeyError):
        dataset["Table1"]
    with pytest.raises(IndexError):
        dataset[1]


def test_table_names_follow_fill_convention() -> None:
    assert [DataSet.table_name(i) for i in range(3)] == ["Table", "Table1", "Table2"]


def test_reader_close_runs_hook_once() -> None:
    calls = []
    cursor = ListCursor(["n"], [[1]])
    reader = RowReader(cursor, on_close=lambda: calls.append(1))

    reader.close()
    reader.close()

    assert cursor.closed
    assert calls == [1]


def test_reader_rejects_use_after_close() -> None:
    reader = RowReader(ListCursor(["n"], [[1]]))
    reader.close()

    with pytest.raises(RuntimeError):
        reader.read()


def test_reader_next_result_without_support() -> None:
    with RowReader(ListCursor(["n"], [])) as reader:
        assert reader.read() is None
        assert reader.next_result() is False


def test_reader_over_statement_without_rows() -> None:
    with RowReader(ListCursor(None, [])) as reader:
        assert reader.columns == ()
        assert list(reader) == []
