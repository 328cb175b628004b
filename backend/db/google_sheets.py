"""Google Sheets grid backend (service-account based).

All network calls for the tabular store live here. Every Sheets API failure is
translated into StoreUnavailable (or TableNotFound for an unknown sheet) so
callers never see googleapiclient / httplib2 exception types.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from db.errors import StoreUnavailable, TableNotFound

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]

# OSError covers socket timeouts raised by httplib2
_TRANSPORT_ERRORS = (GoogleAuthError, httplib2.HttpLib2Error, OSError)


def quote_sheet_name(table: str) -> str:
    """A1 notation sheet reference: 'My Sheet' with embedded quotes doubled."""
    return "'" + table.replace("'", "''") + "'"


def _is_unknown_range(exc: HttpError) -> bool:
    status = getattr(getattr(exc, "resp", None), "status", None)
    return int(status or 0) == 400 and "Unable to parse range" in str(exc)


class GoogleSheetsBackend:
    def __init__(
        self,
        *,
        spreadsheet_id: str,
        credentials_info: dict[str, Any] | None = None,
        service_account_path: str | None = None,
        timeout_seconds: int = 10,
        service: Any = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._credentials_info = credentials_info
        self._service_account_path = (
            os.path.expanduser(service_account_path) if service_account_path else None
        )
        self._timeout_seconds = timeout_seconds
        self._service = service

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    def _credentials(self):
        if self._credentials_info:
            return service_account.Credentials.from_service_account_info(
                self._credentials_info, scopes=SCOPES
            )
        if not self._service_account_path or not os.path.exists(self._service_account_path):
            raise StoreUnavailable(
                f"Service account file not found: {self._service_account_path}"
            )
        with open(self._service_account_path, "r", encoding="utf-8") as fh:
            info = json.load(fh)
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

    def connect(self) -> "GoogleSheetsBackend":
        """Build the Sheets client once and check the spreadsheet is reachable."""
        if self._service is None:
            try:
                creds = self._credentials()
                http = AuthorizedHttp(creds, http=httplib2.Http(timeout=self._timeout_seconds))
                self._service = build("sheets", "v4", http=http, cache_discovery=False)
            except (ValueError, *_TRANSPORT_ERRORS) as exc:
                raise StoreUnavailable(f"Google Sheets authentication failed: {exc}") from exc

        meta = self._spreadsheet_meta()
        logger.info(
            "Connected to spreadsheet %s (%d sheets)",
            self._spreadsheet_id,
            len(meta.get("sheets", [])),
        )
        return self

    def _execute(self, request, *, table: str | None = None) -> dict[str, Any]:
        if self._service is None:
            raise StoreUnavailable("Google Sheets backend is not connected")
        try:
            return request.execute(num_retries=2) or {}
        except HttpError as exc:
            if table is not None and _is_unknown_range(exc):
                raise TableNotFound(table) from exc
            logger.error("Sheets API error: %s", exc)
            raise StoreUnavailable(str(exc)) from exc
        except _TRANSPORT_ERRORS as exc:
            logger.error("Sheets transport error: %s", exc)
            raise StoreUnavailable(str(exc)) from exc

    def _spreadsheet_meta(self) -> dict[str, Any]:
        return self._execute(
            self._service.spreadsheets().get(
                spreadsheetId=self._spreadsheet_id,
                fields="properties(title),sheets(properties(sheetId,title,gridProperties))",
            )
        )

    def _sheet_properties(self, table: str) -> dict[str, Any]:
        for sheet in self._spreadsheet_meta().get("sheets", []):
            props = sheet.get("properties", {})
            if props.get("title") == table:
                return props
        raise TableNotFound(table)

    def get_grid(self, table: str) -> list[list[Any]]:
        resp = self._execute(
            self._service.spreadsheets()
            .values()
            .get(spreadsheetId=self._spreadsheet_id, range=quote_sheet_name(table)),
            table=table,
        )
        rows = resp.get("values", [])
        return rows if isinstance(rows, list) else []

    def append_row(self, table: str, values: list[str]) -> None:
        self._execute(
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=f"{quote_sheet_name(table)}!A:A",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(values)]},
            ),
            table=table,
        )
        logger.debug("Row appended to %s", table)

    def update_row(self, table: str, row_index: int, values: list[str]) -> None:
        self._execute(
            self._service.spreadsheets()
            .values()
            .update(
                spreadsheetId=self._spreadsheet_id,
                range=f"{quote_sheet_name(table)}!{row_index}:{row_index}",
                valueInputOption="RAW",
                body={"values": [list(values)]},
            ),
            table=table,
        )
        logger.debug("Row %d updated in %s", row_index, table)

    def delete_row(self, table: str, row_index: int) -> None:
        sheet_id = self._sheet_properties(table)["sheetId"]
        body = {
            "requests": [
                {
                    "deleteDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": row_index - 1,
                            "endIndex": row_index,
                        }
                    }
                }
            ]
        }
        self._execute(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self._spreadsheet_id, body=body
            )
        )
        logger.debug("Row %d deleted from %s", row_index, table)

    def grid_metadata(self, table: str) -> dict[str, Any]:
        props = self._sheet_properties(table)
        grid = props.get("gridProperties", {})
        return {
            "sheetId": props.get("sheetId"),
            "title": props.get("title"),
            "rowCount": grid.get("rowCount", 0),
            "columnCount": grid.get("columnCount", 0),
        }

    def create_table(self, table: str) -> None:
        body = {"requests": [{"addSheet": {"properties": {"title": table}}}]}
        self._execute(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self._spreadsheet_id, body=body
            )
        )
        logger.info("Sheet '%s' created", table)

    def list_tables(self) -> list[str]:
        return [
            s["properties"]["title"]
            for s in self._spreadsheet_meta().get("sheets", [])
        ]
