"""Persistence gateway over the user's spreadsheet account.

Responsibilities
----------------
- Get-or-create one spreadsheet per entity kind, writing headers on creation.
- Read data rows, append rows, overwrite cells of a row, delete a row.
- Convert every upstream failure into ``PersistenceError``.

Row numbers are 1-based sheet rows; row 1 holds the headers so the first data
row is row 2. Each call is a single best-effort request: no retries, no
transactions, no version check before writes (last write wins).

``ensure_container`` is not atomic. If the spreadsheet is created but writing
the headers fails the container exists without headers; the next call finds
it by title and the caller's reads will treat the first data row as headers.
"""

from __future__ import annotations

import logging
import string
from typing import Any, Dict, List, Optional, Protocol, Sequence

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from requests import RequestException

from budgetsheet.core.errors import PersistenceError
from budgetsheet.db.schema import LAYOUTS, EntityKind, spreadsheet_title

logger = logging.getLogger("budgetsheet.gateway")

HEADER_ROW = 1
FIRST_DATA_ROW = 2
_UPSTREAM_ERRORS = (gspread.exceptions.GSpreadException, RequestException, GoogleAuthError)


class Gateway(Protocol):
    def ensure_container(self, kind: EntityKind) -> str: ...

    def list(self, kind: EntityKind) -> List[List[str]]: ...

    def append(self, kind: EntityKind, row: Sequence[Any]) -> None: ...

    def update_cells(
        self, kind: EntityKind, row_number: int, first_column: str, values: Sequence[Any]
    ) -> None: ...

    def delete_row(self, kind: EntityKind, row_number: int) -> None: ...


def _column_range(first_column: str, width: int, row_number: int) -> str:
    start = string.ascii_uppercase.index(first_column.upper())
    last = string.ascii_uppercase[start + width - 1]
    return f"{first_column.upper()}{row_number}:{last}{row_number}"


def _check_row_number(row_number: int) -> None:
    if row_number < FIRST_DATA_ROW:
        raise ValueError("row_number must address a data row (>= 2)")


class SheetsGateway:
    """Gateway backed by Google Sheets through gspread.

    Authorised with the caller's OAuth access token; the drive.file scope means
    only spreadsheets this application created are visible.
    """

    def __init__(
        self,
        access_token: str,
        prefix: str = "MMMS",
        timeout: float = 10.0,
        client: Optional[gspread.Client] = None,
    ):
        self.prefix = prefix
        if client is None:
            client = gspread.authorize(Credentials(token=access_token))
            client.http_client.set_timeout(timeout)
        self._client = client
        self._worksheets: Dict[EntityKind, gspread.Worksheet] = {}

    # ------------------------------------------------------------------
    # Container helpers
    def _create(self, kind: EntityKind) -> gspread.Worksheet:
        layout = LAYOUTS[kind]
        title = spreadsheet_title(kind, self.prefix)
        logger.info("creating spreadsheet", extra={"spreadsheet": title, "kind": kind.value})
        spreadsheet = self._client.create(title)
        ws = spreadsheet.sheet1
        ws.update_title(layout.worksheet)
        ws.update(range_name="A1", values=[list(layout.headers)])
        return ws

    def _worksheet(self, kind: EntityKind) -> gspread.Worksheet:
        ws = self._worksheets.get(kind)
        if ws is not None:
            return ws
        layout = LAYOUTS[kind]
        title = spreadsheet_title(kind, self.prefix)
        try:
            try:
                spreadsheet = self._client.open(title)
                ws = spreadsheet.worksheet(layout.worksheet)
            except gspread.SpreadsheetNotFound:
                ws = self._create(kind)
        except _UPSTREAM_ERRORS as e:
            logger.exception("failed to resolve spreadsheet %s", title)
            raise PersistenceError(f"cannot open {title}: {e}") from e
        self._worksheets[kind] = ws
        return ws

    # ------------------------------------------------------------------
    # Gateway API
    def ensure_container(self, kind: EntityKind) -> str:
        return self._worksheet(kind).spreadsheet_id

    def list(self, kind: EntityKind) -> List[List[str]]:
        ws = self._worksheet(kind)
        try:
            values = ws.get_all_values()
        except _UPSTREAM_ERRORS as e:
            logger.exception("read failed for %s", kind.value)
            raise PersistenceError(f"read failed for {kind.value}: {e}") from e
        return [list(r) for r in values[HEADER_ROW:]]

    def append(self, kind: EntityKind, row: Sequence[Any]) -> None:
        ws = self._worksheet(kind)
        try:
            ws.append_row(list(row), value_input_option="RAW")
        except _UPSTREAM_ERRORS as e:
            logger.exception("append failed for %s", kind.value)
            raise PersistenceError(f"append failed for {kind.value}: {e}") from e

    def update_cells(
        self, kind: EntityKind, row_number: int, first_column: str, values: Sequence[Any]
    ) -> None:
        _check_row_number(row_number)
        ws = self._worksheet(kind)
        cell_range = _column_range(first_column, len(values), row_number)
        try:
            ws.update(range_name=cell_range, values=[list(values)], raw=True)
        except _UPSTREAM_ERRORS as e:
            logger.exception("update failed for %s %s", kind.value, cell_range)
            raise PersistenceError(f"update failed for {kind.value}: {e}") from e

    def delete_row(self, kind: EntityKind, row_number: int) -> None:
        _check_row_number(row_number)
        ws = self._worksheet(kind)
        try:
            ws.delete_rows(row_number)
        except _UPSTREAM_ERRORS as e:
            logger.exception("delete failed for %s row %s", kind.value, row_number)
            raise PersistenceError(f"delete failed for {kind.value}: {e}") from e


class MemoryGateway:
    """In-process gateway with the same row semantics as SheetsGateway.

    Used for local development (storage_backend=memory) and tests.
    """

    def __init__(self, prefix: str = "MMMS"):
        self.prefix = prefix
        self._sheets: Dict[EntityKind, List[List[str]]] = {}

    def ensure_container(self, kind: EntityKind) -> str:
        if kind not in self._sheets:
            self._sheets[kind] = [list(LAYOUTS[kind].headers)]
        return f"memory:{spreadsheet_title(kind, self.prefix)}"

    def list(self, kind: EntityKind) -> List[List[str]]:
        self.ensure_container(kind)
        return [list(r) for r in self._sheets[kind][HEADER_ROW:]]

    def append(self, kind: EntityKind, row: Sequence[Any]) -> None:
        self.ensure_container(kind)
        self._sheets[kind].append(["" if v is None else str(v) for v in row])

    def _row(self, kind: EntityKind, row_number: int) -> List[str]:
        _check_row_number(row_number)
        self.ensure_container(kind)
        rows = self._sheets[kind]
        if row_number > len(rows):
            raise PersistenceError(f"row {row_number} out of range for {kind.value}")
        return rows[row_number - 1]

    def update_cells(
        self, kind: EntityKind, row_number: int, first_column: str, values: Sequence[Any]
    ) -> None:
        row = self._row(kind, row_number)
        start = string.ascii_uppercase.index(first_column.upper())
        needed = start + len(values)
        if len(row) < needed:
            row.extend([""] * (needed - len(row)))
        for offset, value in enumerate(values):
            row[start + offset] = "" if value is None else str(value)

    def delete_row(self, kind: EntityKind, row_number: int) -> None:
        self._row(kind, row_number)
        del self._sheets[kind][row_number - 1]
