from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_time,
    optional_float,
)
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    ar.attendance_id, ar.emp_id, ar.attendance_date,
    ar.in_time, ar.in_location, ar.in_latitude, ar.in_longitude, ar.in_picture,
    ar.out_time, ar.out_location, ar.out_latitude, ar.out_longitude, ar.out_picture,
    ar.status, ar.remarks
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        emp_id=int(r["emp_id"]),
        attendance_date=r["attendance_date"],
        in_time=normalize_mysql_time(r.get("in_time")),
        out_time=normalize_mysql_time(r.get("out_time")),
        status=AttendanceStatus(r["status"]),
        in_location=r.get("in_location"),
        in_latitude=optional_float(r.get("in_latitude")),
        in_longitude=optional_float(r.get("in_longitude")),
        in_picture=r.get("in_picture"),
        out_location=r.get("out_location"),
        out_latitude=optional_float(r.get("out_latitude")),
        out_longitude=optional_float(r.get("out_longitude")),
        out_picture=r.get("out_picture"),
        remarks=r.get("remarks"),
    )


def _date_clauses(
    column: str,
    start_date: Optional[date],
    end_date: Optional[date],
) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start_date is not None:
        clauses.append(f"{column} >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append(f"{column} <= %s")
        params.append(end_date)
    return clauses, params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance ar WHERE ar.attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, emp_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance ar WHERE ar.emp_id=%s AND ar.attendance_date=%s",
                (int(emp_id), attendance_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses, params = _date_clauses("ar.attendance_date", start_date, end_date)
        clauses.insert(0, "ar.emp_id=%s")
        params.insert(0, int(emp_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance ar
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.attendance_date ASC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance(
                        emp_id, attendance_date, in_time, in_location, in_latitude, in_longitude, in_picture, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(emp_id), attendance_date, in_time, location, latitude, longitude, photo_ref, status.value),
                )
            except mysql.connector.IntegrityError as exc:
                # uq_attendance_emp_date is the authoritative one-per-day guard.
                if is_duplicate_key(exc):
                    raise ConflictError("In-time already recorded for today") from exc
                raise
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET out_time=%s, out_location=%s, out_latitude=%s, out_longitude=%s, out_picture=%s
                WHERE attendance_id=%s AND out_time IS NULL
                """,
                (out_time, location, latitude, longitude, photo_ref, int(attendance_id)),
            )
            return cur.rowcount > 0

    def reject(self, *, attendance_id: int, remarks: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET status=%s, remarks=%s WHERE attendance_id=%s",
                (AttendanceStatus.REJECTED.value, remarks, int(attendance_id)),
            )
            # rowcount is 0 when the row already holds identical values; re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM attendance WHERE attendance_id=%s", (int(attendance_id),))
            return fetchone(cur) is not None

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses, params = _date_clauses("ar.attendance_date", start_date, end_date)
        if emp_id is not None:
            clauses.append("ar.emp_id=%s")
            params.append(int(emp_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name
                FROM attendance ar
                JOIN employees e ON e.emp_id = ar.emp_id
                {where}
                ORDER BY ar.attendance_date ASC, ar.emp_id ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(record=_row_to_record(r), full_name=r["full_name"])
                for r in fetchall(cur)
            ]
