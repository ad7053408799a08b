"""Records Client - CRUD access to the clinical records API."""

import re
from typing import Any, Dict, List, Optional, Union

import requests
from loguru import logger

from clinrec.core.constants import API_BASE_URL, REQUEST_TIMEOUT
from clinrec.core.exceptions import ApiError
from clinrec.core.types import (
    ClinicalRecord,
    RecordInput,
    RecordQuery,
    RecordsPage,
    RecordsStats,
    SortOrder,
)

PATIENT_ID_PATTERN = re.compile(r"^P(\d+)$")

RecordData = Union[RecordInput, Dict[str, Any]]


class RecordsClient:
    """Thin wrapper over the records REST endpoints."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    def close(self):
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def fetch_records(self, query: Optional[RecordQuery] = None) -> RecordsPage:
        """List records with search, filters, sorting and pagination."""
        params = (query or RecordQuery()).to_params()
        data = self._request("GET", "/records", "Failed to fetch records", params=params)
        page = RecordsPage.from_dict(data)
        logger.debug(
            f"[RecordsClient] Fetched {len(page.data)} records "
            f"(page {page.pagination.page}/{page.pagination.total_pages}, params={params})"
        )
        return page

    def create_record(self, data: RecordData) -> ClinicalRecord:
        payload = self._payload(data, include_unset=True)
        result = self._request("POST", "/records", "Failed to create record", json=payload)
        record = ClinicalRecord.from_dict(result)
        logger.info(f"[RecordsClient] Created record {record.id} ({record.patient_id})")
        return record

    def update_record(self, record_id: int, data: RecordData) -> ClinicalRecord:
        """Partial update: only fields that are set are sent."""
        payload = self._payload(data, include_unset=False)
        result = self._request("PUT", f"/records/{record_id}", "Failed to update record", json=payload)
        logger.info(f"[RecordsClient] Updated record {record_id}")
        return ClinicalRecord.from_dict(result)

    def delete_record(self, record_id: int) -> None:
        self._request("DELETE", f"/records/{record_id}", "Failed to delete record")
        logger.info(f"[RecordsClient] Deleted record {record_id}")

    def fetch_stats(self) -> RecordsStats:
        data = self._request("GET", "/records/stats", "Failed to fetch stats")
        return RecordsStats.from_dict(data)

    def next_patient_id(self) -> Optional[str]:
        """
        Suggest the next patient id.

        Looks at the highest patient id on the server; ids of the form P<digits>
        are incremented and zero padded to three digits. An empty registry
        starts at P001. Returns None when the highest id has some other form,
        so the caller keeps whatever it suggested before.
        """
        page = self.fetch_records(RecordQuery(sort_by="patientId", sort_order=SortOrder.DESC, limit=1))
        if not page.data:
            return "P001"

        match = PATIENT_ID_PATTERN.match(page.data[0].patient_id)
        if not match:
            logger.warning(f"[RecordsClient] Unrecognised patient id format: {page.data[0].patient_id}")
            return None
        return f"P{int(match.group(1)) + 1:03d}"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def fetch_departments(self) -> List[str]:
        """Departments known to the backend, de-duplicated and sorted."""
        data = self._request("GET", "/departments", "Failed to fetch departments")
        return sorted({d for d in data if d and len(d) >= 2})

    def fetch_statuses(self) -> List[str]:
        return list(self._request("GET", "/statuses", "Failed to fetch statuses"))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _payload(data: RecordData, include_unset: bool) -> Dict[str, Any]:
        if isinstance(data, RecordInput):
            return data.to_payload(include_unset=include_unset)
        return dict(data)

    def _request(self, method: str, path: str, default_error: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"[RecordsClient] {method} {url} failed: {e}")
            raise ApiError(f"{default_error}: {e}") from e

        if not response.ok:
            message = self._error_message(response, default_error)
            logger.warning(f"[RecordsClient] {method} {url} -> HTTP {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{default_error}: invalid JSON response", status_code=response.status_code) from e

    @staticmethod
    def _error_message(response: requests.Response, default_error: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default_error
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return default_error
