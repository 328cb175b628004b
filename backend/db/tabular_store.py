"""Sheet-as-database access layer.

Each table is one sheet. Row 1 holds the column names; every other row is a
record exposed as a ``dict[str, str]`` keyed by those names. Lookups go through
the header by name, so columns may be reordered between deployments.

Every call is a full round-trip and every lookup is a linear scan: this is
meant for a few thousand rows per sheet at most.
"""

import logging
from typing import Any, Callable, Iterable, Mapping

from db.errors import ColumnNotFound, DuplicateColumn, StoreError, TableNotFound
from db.grid_backend import GridBackend

logger = logging.getLogger(__name__)

Row = dict[str, str]

# sheet row 1 is the header, so the first data row lives at index 2
FIRST_DATA_ROW = 2


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _check_unique(table: str, header: list[str]) -> None:
    seen: set[str] = set()
    for name in header:
        if not name:
            continue
        if name in seen:
            raise DuplicateColumn(table, name)
        seen.add(name)


def _to_row(header: list[str], cells: list[Any]) -> Row:
    # blank header cells are gaps, not columns
    return {
        name: _cell(cells[i]) if i < len(cells) else ""
        for i, name in enumerate(header)
        if name
    }


class TabularStore:
    def __init__(self, backend: GridBackend):
        self.backend = backend

    def _read(self, table: str) -> tuple[list[str], list[list[Any]]]:
        grid = self.backend.get_grid(table)
        if not grid:
            return [], []
        header = [_cell(c) for c in grid[0]]
        _check_unique(table, header)
        return header, grid[1:]

    def header(self, table: str) -> list[str]:
        header, _ = self._read(table)
        return header

    def get_all(self, table: str) -> list[Row]:
        header, data = self._read(table)
        if not data:
            return []
        return [_to_row(header, cells) for cells in data]

    def _scan(self, table: str, column: str, value: str) -> tuple[list[str], int | None, list[Any] | None]:
        header, data = self._read(table)
        if not header:
            return header, None, None
        if column not in header:
            raise ColumnNotFound(table, column)

        col_index = header.index(column)
        for offset, cells in enumerate(data):
            cell = _cell(cells[col_index]) if col_index < len(cells) else ""
            if cell == value:
                return header, FIRST_DATA_ROW + offset, cells
        return header, None, None

    def find_by_column(self, table: str, column: str, value: str) -> Row | None:
        header, _, cells = self._scan(table, column, value)
        return _to_row(header, cells) if cells is not None else None

    def find_row_index(self, table: str, column: str, value: str) -> int | None:
        """1-based sheet row of the first row whose ``column`` equals ``value``."""
        _, index, _ = self._scan(table, column, value)
        return index

    def append(self, table: str, values: Iterable[Any]) -> None:
        self.backend.append_row(table, [_cell(v) for v in values])

    def append_mapping(self, table: str, mapping: Mapping[str, Any]) -> list[str]:
        """Append ``mapping`` laid out in the sheet's current column order."""
        header = self.header(table)
        if not header:
            raise StoreError(f"Sheet '{table}' has no header row")

        values = [_cell(mapping.get(name)) for name in header]
        dropped = set(mapping) - set(header)
        if dropped:
            logger.debug("Columns %s not in %s header, skipped", sorted(dropped), table)
        self.backend.append_row(table, values)
        return values

    def update_row(self, table: str, row_index: int, values: Iterable[Any]) -> None:
        if row_index < FIRST_DATA_ROW:
            raise ValueError(f"row_index must be >= {FIRST_DATA_ROW}, got {row_index}")
        self.backend.update_row(table, row_index, [_cell(v) for v in values])

    def update_where(
        self,
        table: str,
        column: str,
        value: str,
        changes: Mapping[str, Any],
    ) -> Row | None:
        """Merge ``changes`` into the first matching row and write it back.

        The row index is resolved right before the write; a concurrent insert
        or delete between the scan and the write can still shift rows.
        """
        header, index, cells = self._scan(table, column, value)
        if index is None or cells is None:
            return None
        return self._write_merged(table, header, index, cells, changes)

    def update_first(
        self,
        table: str,
        predicate: Callable[[Row], bool],
        changes: Mapping[str, Any],
    ) -> Row | None:
        """Like update_where, for the first row satisfying ``predicate``."""
        header, data = self._read(table)
        for offset, cells in enumerate(data):
            row = _to_row(header, cells)
            if predicate(row):
                return self._write_merged(table, header, FIRST_DATA_ROW + offset, cells, changes)
        return None

    def _write_merged(
        self,
        table: str,
        header: list[str],
        index: int,
        cells: list[Any],
        changes: Mapping[str, Any],
    ) -> Row:
        updated = _to_row(header, cells)
        for name, new_value in changes.items():
            if name in updated:
                updated[name] = _cell(new_value)
            else:
                logger.warning("Column '%s' not in %s header, change ignored", name, table)

        values = [
            updated[name] if name else (_cell(cells[i]) if i < len(cells) else "")
            for i, name in enumerate(header)
        ]
        self.backend.update_row(table, index, values)
        return updated

    def delete_row(self, table: str, row_index: int) -> None:
        if row_index < FIRST_DATA_ROW:
            raise ValueError(f"row_index must be >= {FIRST_DATA_ROW}, got {row_index}")
        self.backend.delete_row(table, row_index)

    def delete_where(self, table: str, column: str, value: str) -> bool:
        index = self.find_row_index(table, column, value)
        if index is None:
            return False
        self.backend.delete_row(table, index)
        return True

    def table_exists(self, table: str) -> bool:
        try:
            self.backend.grid_metadata(table)
            return True
        except Exception:
            logger.debug("table_exists(%s) lookup failed", table, exc_info=True)
            return False

    def ensure_header(self, table: str, columns: list[str]) -> bool:
        """Create the sheet and write ``columns`` as its header if it is empty.

        Returns True when a header was written.
        """
        _check_unique(table, list(columns))
        try:
            grid = self.backend.get_grid(table)
        except TableNotFound:
            self.backend.create_table(table)
            grid = []

        if grid:
            return False
        self.backend.append_row(table, list(columns))
        logger.info("Provisioned header for sheet '%s'", table)
        return True

    def list_tables(self) -> list[str]:
        return self.backend.list_tables()


def ensure_tables(store: TabularStore, schemas: Mapping[str, list[str]]) -> list[str]:
    """Provision every sheet in ``schemas``; returns the names that got a header."""
    created = []
    for table, columns in schemas.items():
        try:
            if store.ensure_header(table, columns):
                created.append(table)
        except StoreError:
            logger.exception("Could not provision sheet '%s'", table)
            raise
    return created
