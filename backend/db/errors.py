class DealflowError(Exception):
    """Base class for every error raised by the deal registration backend."""


class StoreError(DealflowError):
    pass


class StoreUnavailable(StoreError):
    """The backing spreadsheet could not be reached (network, auth, timeout)."""


class TableNotFound(StoreUnavailable):
    def __init__(self, table: str):
        super().__init__(f"Sheet '{table}' not found")
        self.table = table


class ColumnNotFound(StoreError):
    def __init__(self, table: str, column: str):
        super().__init__(f"Column '{column}' not found in sheet '{table}'")
        self.table = table
        self.column = column


class DuplicateColumn(StoreError):
    def __init__(self, table: str, column: str):
        super().__init__(f"Column '{column}' appears more than once in sheet '{table}'")
        self.table = table
        self.column = column
