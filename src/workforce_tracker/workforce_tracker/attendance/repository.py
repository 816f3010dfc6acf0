from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, emp_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Chronological (oldest first); either bound may be open."""

        raise NotImplementedError

    def create_in_time(
        self,
        *,
        emp_id: int,
        attendance_date: date,
        in_time: time,
        status: AttendanceStatus,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        photo_ref: Optional[str] = None,
    ) -> int:
        """Insert today's row. A second row for (emp_id, attendance_date) raises ConflictError."""

        raise NotImplementedError

    def update_out_time(
        self,
        *,
        attendance_id: int,
        out_time: time,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        photo_ref: Optional[str] = None,
    ) -> bool:
        """Fill out-fields only while out_time is still empty; False otherwise."""

        raise NotImplementedError

    def reject(self, *, attendance_id: int, remarks: Optional[str]) -> bool:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
