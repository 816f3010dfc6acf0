from __future__ import annotations

import logging
from calendar import monthrange
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.access import require_active_employee, require_admin, require_employee, require_existing_employee
from ..common.datetime_utils import now_local, validate_range
from ..common.validators import optional_text
from ..core.actor import Actor
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per-day check-in/check-out ledger.

    NO_RECORD -> (in) -> IN_PROGRESS -> (out) -> COMPLETE, with the admin
    side-transition to REJECTED at any point. Rows are never removed here.
    """

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeRepository):
        self._attendance = attendance
        self._employees = employees

    def record_in_time(
        self,
        actor: Actor,
        *,
        in_time: Optional[time] = None,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        photo_ref: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        if self._attendance.get_for_employee_and_date(emp_id, today):
            raise ConflictError("In-time already recorded for today")

        attendance_id = self._attendance.create_in_time(
            emp_id=emp_id,
            attendance_date=today,
            in_time=in_time or now.time().replace(microsecond=0),
            status=AttendanceStatus.APPROVED,
            location=optional_text(location),
            latitude=latitude,
            longitude=longitude,
            photo_ref=photo_ref,
        )
        logger.info("Employee %s checked in (attendance_id=%s)", emp_id, attendance_id)
        return self._reload(attendance_id)

    def record_out_time(
        self,
        actor: Actor,
        *,
        out_time: Optional[time] = None,
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        photo_ref: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        record = self._attendance.get_for_employee_and_date(emp_id, today)
        if not record:
            raise NotFoundError("No in-time recorded for today")
        if record.out_time is not None:
            raise ConflictError("Out-time already recorded for today")

        out_time = out_time or now.time().replace(microsecond=0)
        if record.in_time is not None and out_time < record.in_time:
            raise ValidationError("Out-time cannot be earlier than in-time")

        updated = self._attendance.update_out_time(
            attendance_id=record.attendance_id,
            out_time=out_time,
            location=optional_text(location),
            latitude=latitude,
            longitude=longitude,
            photo_ref=photo_ref,
        )
        if not updated:
            # Another request filled the out-time between our read and write.
            raise ConflictError("Out-time already recorded for today")

        logger.info("Employee %s checked out (attendance_id=%s)", emp_id, record.attendance_id)
        return self._reload(record.attendance_id)

    def get_daily(self, actor: Actor, *, now: Optional[datetime] = None) -> list[AttendanceRecord]:
        today = (now or now_local()).date()
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)

        record = self._attendance.get_for_employee_and_date(emp_id, today)
        return [record] if record else []

    def get_range(
        self,
        actor: Actor,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        validate_range(start, end)
        emp_id = require_employee(actor).emp_id
        require_active_employee(self._employees, emp_id)
        return self._attendance.list_for_employee(emp_id, start_date=start, end_date=end)

    def check_in_status(self, actor: Actor, *, now: Optional[datetime] = None) -> bool:
        return any(r.is_checked_in for r in self.get_daily(actor, now=now))

    def check_out_status(self, actor: Actor, *, now: Optional[datetime] = None) -> bool:
        return any(r.is_checked_out for r in self.get_daily(actor, now=now))

    # Admin
    def reject_attendance(self, actor: Actor, *, attendance_id: int, remarks: Optional[str] = None) -> AttendanceRecord:
        admin = require_admin(actor)
        if not self._attendance.reject(attendance_id=int(attendance_id), remarks=optional_text(remarks)):
            raise NotFoundError("Attendance not found")
        logger.info("Attendance %s rejected by admin %s", attendance_id, admin.admin_id)
        return self._reload(int(attendance_id))

    def daily_for_all(self, actor: Actor, *, day: Optional[date] = None) -> Sequence[AttendanceReportRow]:
        require_admin(actor)
        day = day or now_local().date()
        return self._attendance.get_report_rows(start_date=day, end_date=day)

    def monthly_for_all(self, actor: Actor, *, month: Optional[int], year: Optional[int]) -> Sequence[AttendanceReportRow]:
        require_admin(actor)
        start, end = month_bounds(month, year)
        return self._attendance.get_report_rows(start_date=start, end_date=end)

    def range_for_all(
        self,
        actor: Actor,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        require_admin(actor)
        validate_range(start, end)
        return self._attendance.get_report_rows(start_date=start, end_date=end, emp_id=emp_id)

    def employee_report(
        self,
        actor: Actor,
        emp_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        require_admin(actor)
        validate_range(start, end)
        require_existing_employee(self._employees, emp_id)
        return self._attendance.list_for_employee(int(emp_id), start_date=start, end_date=end)

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance not found")
        return record


def month_bounds(month: Optional[int], year: Optional[int]) -> tuple[date, date]:
    """First and last day of a month; both parts are required."""
    if month is None or year is None:
        raise ValidationError("Month and year are required")
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not 1 <= int(year) <= 9999:
        raise ValidationError("Year is not valid")
    last_day = monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)
