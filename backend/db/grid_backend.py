from typing import Any, Protocol


class GridBackend(Protocol):
    """Raw grid access used by TabularStore.

    Row indexes are 1-based sheet rows (the header is row 1). Implementations
    raise StoreUnavailable (or TableNotFound) instead of transport errors.
    """

    def get_grid(self, table: str) -> list[list[Any]]:
        ...

    def append_row(self, table: str, values: list[str]) -> None:
        ...

    def update_row(self, table: str, row_index: int, values: list[str]) -> None:
        ...

    def delete_row(self, table: str, row_index: int) -> None:
        ...

    def grid_metadata(self, table: str) -> dict[str, Any]:
        ...

    def create_table(self, table: str) -> None:
        ...

    def list_tables(self) -> list[str]:
        ...
