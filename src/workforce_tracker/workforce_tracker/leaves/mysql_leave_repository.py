from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveApplication, LeaveDetails, LeaveReportRow
from .repository import LeaveRepository

_COLUMNS = """
    l.leave_id, l.emp_id, l.start_date, l.end_date, l.leave_type, l.reason,
    l.leave_attachment, l.status, l.approved_by, l.approved_on, l.created_at
"""


def _row_to_leave(r: dict) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["leave_id"]),
        emp_id=int(r["emp_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_type=r["leave_type"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        leave_attachment=r.get("leave_attachment"),
        approved_by=r.get("approved_by"),
        approved_on=r.get("approved_on"),
        created_at=r.get("created_at"),
    )


def _filters(
    *,
    status: Optional[LeaveStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    emp_id: Optional[int] = None,
) -> tuple[str, tuple]:
    clauses: list[str] = []
    params: list[object] = []
    if emp_id is not None:
        clauses.append("l.emp_id=%s")
        params.append(int(emp_id))
    if status is not None:
        clauses.append("l.status=%s")
        params.append(status.value)
    # Overlap with the requested window.
    if start_date is not None:
        clauses.append("l.end_date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("l.start_date <= %s")
        params.append(end_date)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, tuple(params)


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, emp_id: int, details: LeaveDetails) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(
                    emp_id, start_date, end_date, leave_type, reason, leave_attachment, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(emp_id),
                    details.start_date,
                    details.end_date,
                    details.leave_type,
                    details.reason,
                    details.leave_attachment,
                    LeaveStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_applications l WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def update_pending(self, leave_id: int, details: LeaveDetails) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_applications
                SET start_date=%s, end_date=%s, leave_type=%s, reason=%s, leave_attachment=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    details.start_date,
                    details.end_date,
                    details.leave_type,
                    details.reason,
                    details.leave_attachment,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            if cur.rowcount > 0:
                return True
            # Identical values report rowcount 0; the row still counts as updated if it is pending.
            cur.execute(
                "SELECT 1 AS found FROM leave_applications WHERE leave_id=%s AND status=%s",
                (int(leave_id), LeaveStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def delete(self, leave_id: int, *, only_pending: bool) -> bool:
        sql = "DELETE FROM leave_applications WHERE leave_id=%s"
        params: tuple = (int(leave_id),)
        if only_pending:
            sql += " AND status=%s"
            params = (int(leave_id), LeaveStatus.PENDING.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approved_by: int,
        approved_on: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_applications
                SET status=%s, approved_by=%s, approved_on=%s
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, int(approved_by), approved_on, int(leave_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveApplication]:
        where, params = _filters(start_date=start_date, end_date=end_date, emp_id=emp_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_applications l {where} ORDER BY l.start_date ASC, l.leave_id ASC",
                params,
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[LeaveReportRow]:
        where, params = _filters(status=status, start_date=start_date, end_date=end_date, emp_id=emp_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name
                FROM leave_applications l
                JOIN employees e ON e.emp_id = l.emp_id
                {where}
                ORDER BY l.start_date ASC, l.leave_id ASC
                """,
                params,
            )
            return [LeaveReportRow(leave=_row_to_leave(r), full_name=r["full_name"]) for r in fetchall(cur)]
