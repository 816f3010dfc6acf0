from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..activities.repository import ActivityRepository
from ..attendance.model import AttendanceRecord, AttendanceReportRow
from ..attendance.repository import AttendanceRepository
from ..common.access import require_admin
from ..common.datetime_utils import now_local, validate_range
from ..core.actor import Actor
from ..core.enums import AttendanceStatus
from ..leaves.service import LeaveService

ATTENDANCE_FIELDS = [
    "attendance_date",
    "emp_id",
    "full_name",
    "in_time",
    "in_location",
    "out_time",
    "out_location",
    "worked_hours",
    "status",
    "remarks",
]

ACTIVITY_FIELDS = ["activity_datetime", "emp_id", "full_name", "customer_name", "remarks", "location"]

LEAVE_FIELDS = [
    "leave_id",
    "emp_id",
    "full_name",
    "leave_type",
    "start_date",
    "end_date",
    "days",
    "reason",
    "status",
    "approved_by",
    "approved_on",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict] = field(default_factory=list)
    filters: dict = field(default_factory=dict)


def worked_minutes(record: AttendanceRecord) -> int:
    """(out - in) in whole minutes, not below 0; 0 while the day is still open."""
    if not record.in_time or not record.out_time:
        return 0
    day = record.attendance_date
    minutes = int((datetime.combine(day, record.out_time) - datetime.combine(day, record.in_time)).total_seconds() // 60)
    return max(minutes, 0)


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _iso_or_dash(value: Optional[date]) -> str:
    return value.isoformat() if value else "-"


class ReportService:
    """Read-only projections for the admin exports; adds no state."""

    def __init__(self, attendance: AttendanceRepository, activities: ActivityRepository, leaves: LeaveService):
        self._attendance = attendance
        self._activities = activities
        self._leaves = leaves

    def attendance_report(
        self,
        actor: Actor,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> ReportData:
        require_admin(actor)
        validate_range(start, end)
        query_rows = self._attendance.get_report_rows(start_date=start, end_date=end, emp_id=emp_id)

        filters = {"start_date": _iso_or_dash(start), "end_date": _iso_or_dash(end)}
        if emp_id is not None:
            filters["emp_id"] = str(emp_id)
        return self._build_attendance(query_rows, filters)

    def daily_attendance_report(self, actor: Actor, *, day: Optional[date] = None) -> ReportData:
        day = day or now_local().date()
        report = self.attendance_report(actor, start=day, end=day)
        return ReportData(rows=report.rows, summary=report.summary, filters={"date": day.isoformat()})

    def activity_report(self, actor: Actor, *, day: Optional[date] = None) -> ReportData:
        require_admin(actor)
        rows = self._activities.get_report_rows(start_date=day, end_date=day)
        return ReportData(
            rows=[
                {
                    "activity_datetime": r.activity.activity_datetime.strftime("%Y-%m-%d %H:%M"),
                    "emp_id": r.activity.emp_id,
                    "full_name": r.full_name,
                    "customer_name": r.activity.customer_name,
                    "remarks": r.activity.remarks,
                    "location": r.activity.location or "",
                }
                for r in rows
            ],
            filters={"date": _iso_or_dash(day)},
        )

    def leave_report(
        self,
        actor: Actor,
        *,
        status: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ReportData:
        export = self._leaves.download_leave_applications(actor, status=status, start=start, end=end)
        rows = []
        for r in export.rows:
            row = r.to_dict()
            rows.append({k: ("" if row.get(k) is None else row.get(k)) for k in LEAVE_FIELDS})
        return ReportData(rows=rows, filters=export.filters)

    def _build_attendance(self, query_rows: list[AttendanceReportRow], filters: dict) -> ReportData:
        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            rec = r.record
            minutes = worked_minutes(rec)

            out_rows.append(
                {
                    "attendance_date": rec.attendance_date.strftime("%Y-%m-%d"),
                    "emp_id": rec.emp_id,
                    "full_name": r.full_name,
                    "in_time": rec.in_time.strftime("%H:%M") if rec.in_time else "-",
                    "in_location": rec.in_location or "",
                    "out_time": rec.out_time.strftime("%H:%M") if rec.out_time else "-",
                    "out_location": rec.out_location or "",
                    "worked_hours": _hhmm(minutes),
                    "status": rec.status.value,
                    "remarks": rec.remarks or "",
                }
            )

            s = summary_map.get(rec.emp_id)
            if not s:
                s = {
                    "emp_id": rec.emp_id,
                    "full_name": r.full_name,
                    "days_present": 0,
                    "days_completed": 0,
                    "days_rejected": 0,
                    "total_minutes": 0,
                }
                summary_map[rec.emp_id] = s

            if rec.status == AttendanceStatus.REJECTED:
                s["days_rejected"] += 1
                continue
            s["days_present"] += 1
            if rec.is_checked_out:
                s["days_completed"] += 1
            s["total_minutes"] += minutes

        summary = []
        for s in summary_map.values():
            total_minutes = int(s.pop("total_minutes"))
            s["total_hours"] = _hhmm(total_minutes)
            summary.append(s)

        summary.sort(key=lambda x: (-x["days_present"], x["emp_id"]))
        return ReportData(rows=out_rows, summary=summary, filters=filters)
