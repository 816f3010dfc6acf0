from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Activity, ActivityChanges, ActivityReportRow


class ActivityRepository(Protocol):
    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def create(
        self,
        *,
        emp_id: int,
        customer_name: str,
        remarks: str,
        activity_datetime: datetime,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, activity_id: int, changes: ActivityChanges) -> bool:
        raise NotImplementedError

    def delete(self, activity_id: int) -> bool:
        raise NotImplementedError

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Activity]:
        """Chronological; bounds compare against the calendar date of activity_datetime."""

        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[ActivityReportRow]:
        raise NotImplementedError
