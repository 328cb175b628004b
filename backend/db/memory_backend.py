import threading
from typing import Any

from db.errors import TableNotFound


class InMemoryGridBackend:
    """Process-local grid backend for local development and tests.

    Mirrors what the Sheets API hands back: trailing blank cells are trimmed
    on read and missing sheets raise TableNotFound.
    """

    def __init__(self, tables: dict[str, list[list[Any]]] | None = None):
        self._lock = threading.Lock()
        self._tables: dict[str, list[list[str]]] = {}
        self._next_sheet_id = 0
        self._sheet_ids: dict[str, int] = {}
        for name, rows in (tables or {}).items():
            self.create_table(name)
            self._tables[name] = [list(r) for r in rows]

    def _grid(self, table: str) -> list[list[str]]:
        if table not in self._tables:
            raise TableNotFound(table)
        return self._tables[table]

    def get_grid(self, table: str) -> list[list[Any]]:
        with self._lock:
            rows = self._grid(table)
            out = []
            for row in rows:
                trimmed = list(row)
                while trimmed and trimmed[-1] in ("", None):
                    trimmed.pop()
                out.append(trimmed)
            # the API drops trailing empty rows as well
            while out and not out[-1]:
                out.pop()
            return out

    def append_row(self, table: str, values: list[str]) -> None:
        with self._lock:
            rows = self._grid(table)
            while rows and not any(c not in ("", None) for c in rows[-1]):
                rows.pop()
            rows.append(list(values))

    def update_row(self, table: str, row_index: int, values: list[str]) -> None:
        with self._lock:
            rows = self._grid(table)
            while len(rows) < row_index:
                rows.append([])
            current = rows[row_index - 1]
            merged = list(values) + current[len(values):]
            rows[row_index - 1] = merged

    def delete_row(self, table: str, row_index: int) -> None:
        with self._lock:
            rows = self._grid(table)
            if 0 < row_index <= len(rows):
                del rows[row_index - 1]

    def grid_metadata(self, table: str) -> dict[str, Any]:
        with self._lock:
            rows = self._grid(table)
            return {
                "sheetId": self._sheet_ids[table],
                "title": table,
                "rowCount": len(rows),
                "columnCount": max((len(r) for r in rows), default=0),
            }

    def create_table(self, table: str) -> None:
        with self._lock:
            if table in self._tables:
                return
            self._tables[table] = []
            self._sheet_ids[table] = self._next_sheet_id
            self._next_sheet_id += 1

    def list_tables(self) -> list[str]:
        with self._lock:
            return list(self._tables.keys())
