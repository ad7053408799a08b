"""Core types for clinical records."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RecordStatus(Enum):
    """Lifecycle status of a clinical record."""

    ACTIVE = "Active"
    DISCHARGED = "Discharged"
    PENDING = "Pending"
    CANCELLED = "Cancelled"

    def __str__(self):
        return self.value


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def __str__(self):
        return self.value


@dataclass
class ClinicalRecord:
    """A single clinical record as returned by the backend."""

    id: int
    patient_id: str
    patient_name: str
    date_of_birth: str
    diagnosis: str
    admission_date: str
    discharge_date: Optional[str]
    status: str
    department: str
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClinicalRecord":
        return cls(
            id=int(data["id"]),
            patient_id=data.get("patientId", ""),
            patient_name=data.get("patientName", ""),
            date_of_birth=data.get("dateOfBirth", ""),
            diagnosis=data.get("diagnosis", ""),
            admission_date=data.get("admissionDate", ""),
            discharge_date=data.get("dischargeDate"),
            status=data.get("status", ""),
            department=data.get("department", ""),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )


@dataclass
class RecordInput:
    """
    Writable fields of a clinical record.

    Used for both create (all fields) and update (only the fields that are set).
    """

    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    diagnosis: Optional[str] = None
    admission_date: Optional[str] = None
    discharge_date: Optional[str] = None
    status: Optional[str] = None
    department: Optional[str] = None

    _WIRE_NAMES = {
        "patient_id": "patientId",
        "patient_name": "patientName",
        "date_of_birth": "dateOfBirth",
        "diagnosis": "diagnosis",
        "admission_date": "admissionDate",
        "discharge_date": "dischargeDate",
        "status": "status",
        "department": "department",
    }

    def to_payload(self, include_unset: bool = False) -> Dict[str, Any]:
        """Convert to the camelCase JSON body the backend expects."""
        payload = {}
        for attr, wire_name in self._WIRE_NAMES.items():
            value = getattr(self, attr)
            if value is None and not include_unset:
                continue
            payload[wire_name] = str(value) if isinstance(value, Enum) else value
        return payload


@dataclass
class PaginationInfo:
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaginationInfo":
        return cls(
            page=int(data.get("page", 1)),
            limit=int(data.get("limit", 10)),
            total=int(data.get("total", 0)),
            total_pages=int(data.get("totalPages", 0)),
            has_next=bool(data.get("hasNext", False)),
            has_prev=bool(data.get("hasPrev", False)),
        )


@dataclass
class RecordFilters:
    search: str = ""
    status: str = "All"
    department: str = "All"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RecordFilters":
        data = data or {}
        return cls(
            search=data.get("search", "") or "",
            status=data.get("status", "All") or "All",
            department=data.get("department", "All") or "All",
        )


@dataclass
class RecordsPage:
    """One page of records plus the pagination and filters the backend applied."""

    data: List[ClinicalRecord] = field(default_factory=list)
    pagination: PaginationInfo = field(default_factory=PaginationInfo)
    filters: RecordFilters = field(default_factory=RecordFilters)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordsPage":
        return cls(
            data=[ClinicalRecord.from_dict(item) for item in data.get("data", [])],
            pagination=PaginationInfo.from_dict(data.get("pagination") or {}),
            filters=RecordFilters.from_dict(data.get("filters")),
        )


@dataclass
class RecordsStats:
    """Aggregate counts shown on the dashboard."""

    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    by_department: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordsStats":
        return cls(
            total=int(data.get("total", 0)),
            by_status={k: int(v) for k, v in (data.get("byStatus") or {}).items()},
            by_department={k: int(v) for k, v in (data.get("byDepartment") or {}).items()},
        )

    def department_share(self, department: str) -> float:
        """Fraction of all records that belong to a department (0.0 when empty)."""
        if self.total == 0:
            return 0.0
        return self.by_department.get(department, 0) / self.total


@dataclass
class RecordQuery:
    """Search, filter, sort and pagination parameters for listing records."""

    search: str = ""
    status: str = "All"
    department: str = "All"
    page: Optional[int] = None
    limit: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[SortOrder] = None

    def to_params(self) -> Dict[str, str]:
        """Build query params, omitting empty values and the "All" filter."""
        params = {}
        if self.search:
            params["search"] = self.search
        if self.status and self.status != "All":
            params["status"] = self.status
        if self.department and self.department != "All":
            params["department"] = self.department
        if self.page:
            params["page"] = str(self.page)
        if self.limit:
            params["limit"] = str(self.limit)
        if self.sort_by:
            params["sortBy"] = self.sort_by
        if self.sort_order:
            params["sortOrder"] = str(self.sort_order)
        return params
