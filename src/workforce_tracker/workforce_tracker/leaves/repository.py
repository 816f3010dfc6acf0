from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveApplication, LeaveDetails, LeaveReportRow


class LeaveRepository(Protocol):
    def create(self, *, emp_id: int, details: LeaveDetails) -> int:
        """Insert a PENDING application."""

        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def update_pending(self, leave_id: int, details: LeaveDetails) -> bool:
        """Replace details only while the row is still PENDING."""

        raise NotImplementedError

    def delete(self, leave_id: int, *, only_pending: bool) -> bool:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approved_by: int,
        approved_on: datetime,
    ) -> bool:
        """PENDING -> status; False when the row is gone or already decided."""

        raise NotImplementedError

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveApplication]:
        """Applications overlapping [start_date, end_date], oldest first."""

        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[LeaveReportRow]:
        raise NotImplementedError
