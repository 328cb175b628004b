import json

import httplib2
import pytest
from googleapiclient.errors import HttpError

from db.errors import StoreUnavailable, TableNotFound
from db.google_sheets import GoogleSheetsBackend, quote_sheet_name
from db.tabular_store import TabularStore


def _http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


class _Request:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def execute(self, num_retries=0):
        if self._error is not None:
            raise self._error
        return self._result


class _Values:
    def __init__(self, service):
        self._service = service

    def get(self, **kwargs):
        self._service.calls.append(("values.get", kwargs))
        return self._service.next_request("values.get", {"values": self._service.grid})

    def append(self, **kwargs):
        self._service.calls.append(("values.append", kwargs))
        return self._service.next_request("values.append", {})

    def update(self, **kwargs):
        self._service.calls.append(("values.update", kwargs))
        return self._service.next_request("values.update", {})


class _Spreadsheets:
    def __init__(self, service):
        self._service = service

    def values(self):
        return _Values(self._service)

    def get(self, **kwargs):
        self._service.calls.append(("get", kwargs))
        return self._service.next_request("get", self._service.meta)

    def batchUpdate(self, **kwargs):
        self._service.calls.append(("batchUpdate", kwargs))
        return self._service.next_request("batchUpdate", {})


class FakeSheetsService:
    """Stands in for the discovery-built ``sheets`` v4 client."""

    def __init__(self, grid=None, sheets=None):
        self.grid = grid or []
        self.meta = {
            "properties": {"title": "Deals DB"},
            "sheets": [
                {"properties": {"sheetId": sid, "title": title, "gridProperties": {"rowCount": 100, "columnCount": 26}}}
                for sid, title in (sheets or [(0, "Deals")])
            ],
        }
        self.calls = []
        self.errors = {}

    def next_request(self, name, result):
        return _Request(result=result, error=self.errors.get(name))

    def spreadsheets(self):
        return _Spreadsheets(self)


def _backend(service) -> GoogleSheetsBackend:
    return GoogleSheetsBackend(spreadsheet_id="sheet-123", service=service)


def test_quote_sheet_name_doubles_embedded_quotes() -> None:
    assert quote_sheet_name("Deals") == "'Deals'"
    assert quote_sheet_name("Bob's Deals") == "'Bob''s Deals'"


def test_connect_checks_spreadsheet_metadata() -> None:
    service = FakeSheetsService()

    backend = _backend(service).connect()

    assert backend.spreadsheet_id == "sheet-123"
    assert service.calls[0][0] == "get"


def test_connect_without_credentials_is_unavailable(tmp_path) -> None:
    backend = GoogleSheetsBackend(
        spreadsheet_id="sheet-123",
        service_account_path=str(tmp_path / "missing.json"),
    )

    with pytest.raises(StoreUnavailable):
        backend.connect()


def test_get_grid_reads_whole_sheet() -> None:
    service = FakeSheetsService(grid=[["id", "status"], ["1", "submitted"]])

    grid = _backend(service).get_grid("Deals")

    assert grid == [["id", "status"], ["1", "submitted"]]
    assert service.calls[-1] == ("values.get", {"spreadsheetId": "sheet-123", "range": "'Deals'"})


def test_unknown_range_maps_to_table_not_found() -> None:
    service = FakeSheetsService()
    service.errors["values.get"] = _http_error(400, "Unable to parse range: 'Missing'")

    with pytest.raises(TableNotFound):
        _backend(service).get_grid("Missing")


def test_other_http_errors_map_to_store_unavailable() -> None:
    service = FakeSheetsService()
    service.errors["values.get"] = _http_error(403, "The caller does not have permission")

    with pytest.raises(StoreUnavailable) as exc_info:
        _backend(service).get_grid("Deals")

    assert not isinstance(exc_info.value, TableNotFound)


def test_transport_errors_map_to_store_unavailable() -> None:
    service = FakeSheetsService()
    service.errors["values.append"] = TimeoutError("timed out")

    with pytest.raises(StoreUnavailable):
        _backend(service).append_row("Deals", ["1"])


def test_append_and_update_write_raw_values() -> None:
    service = FakeSheetsService()
    backend = _backend(service)

    backend.append_row("Deals", ["1", "=SUM(A1)"])
    backend.update_row("Deals", 3, ["1", "approved"])

    append_kwargs = service.calls[0][1]
    assert append_kwargs["range"] == "'Deals'!A:A"
    assert append_kwargs["valueInputOption"] == "RAW"
    assert append_kwargs["insertDataOption"] == "INSERT_ROWS"
    assert append_kwargs["body"] == {"values": [["1", "=SUM(A1)"]]}

    update_kwargs = service.calls[1][1]
    assert update_kwargs["range"] == "'Deals'!3:3"
    assert update_kwargs["valueInputOption"] == "RAW"


def test_delete_row_uses_sheet_id_and_zero_based_range() -> None:
    service = FakeSheetsService(sheets=[(0, "Users"), (42, "Deals")])

    _backend(service).delete_row("Deals", 5)

    name, kwargs = service.calls[-1]
    assert name == "batchUpdate"
    dimension = kwargs["body"]["requests"][0]["deleteDimension"]["range"]
    assert dimension == {"sheetId": 42, "dimension": "ROWS", "startIndex": 4, "endIndex": 5}


def test_grid_metadata_and_list_tables() -> None:
    service = FakeSheetsService(sheets=[(0, "Users"), (7, "Deals")])
    backend = _backend(service)

    meta = backend.grid_metadata("Deals")

    assert meta == {"sheetId": 7, "title": "Deals", "rowCount": 100, "columnCount": 26}
    assert backend.list_tables() == ["Users", "Deals"]
    with pytest.raises(TableNotFound):
        backend.grid_metadata("Nope")


def test_table_exists_false_when_sheets_unreachable() -> None:
    service = FakeSheetsService()
    service.errors["get"] = _http_error(500, "Backend Error")

    assert TabularStore(_backend(service)).table_exists("Deals") is False


def test_create_table_sends_add_sheet() -> None:
    service = FakeSheetsService()

    _backend(service).create_table("Audit_Log")

    name, kwargs = service.calls[-1]
    assert name == "batchUpdate"
    assert kwargs["body"] == {"requests": [{"addSheet": {"properties": {"title": "Audit_Log"}}}]}
