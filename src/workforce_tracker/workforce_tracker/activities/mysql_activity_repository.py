from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from .model import Activity, ActivityChanges, ActivityReportRow
from .repository import ActivityRepository

_COLUMNS = """
    a.activity_id, a.emp_id, a.customer_name, a.remarks, a.activity_datetime,
    a.location, a.latitude, a.longitude
"""


def _row_to_activity(r: dict) -> Activity:
    return Activity(
        activity_id=int(r["activity_id"]),
        emp_id=int(r["emp_id"]),
        customer_name=r["customer_name"],
        remarks=r.get("remarks") or "",
        activity_datetime=r["activity_datetime"],
        location=r.get("location"),
        latitude=optional_float(r.get("latitude")),
        longitude=optional_float(r.get("longitude")),
    )


def _filters(
    start_date: Optional[date],
    end_date: Optional[date],
    emp_id: Optional[int],
) -> tuple[str, tuple]:
    clauses: list[str] = []
    params: list[object] = []
    if emp_id is not None:
        clauses.append("a.emp_id=%s")
        params.append(int(emp_id))
    if start_date is not None:
        clauses.append("DATE(a.activity_datetime) >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("DATE(a.activity_datetime) <= %s")
        params.append(end_date)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, tuple(params)


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM activities a WHERE a.activity_id=%s", (int(activity_id),))
            r = fetchone(cur)
            return _row_to_activity(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(emp_id, customer_name, remarks, activity_datetime, location, latitude, longitude)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(emp_id), customer_name, remarks, activity_datetime, location, latitude, longitude),
            )
            return int(cur.lastrowid)

    def update(self, activity_id: int, changes: ActivityChanges) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column in ("customer_name", "remarks", "location", "latitude", "longitude"):
            value = getattr(changes, column)
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)
        if not sets:
            return False

        params.append(int(activity_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE activities SET {', '.join(sets)} WHERE activity_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, activity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM activities WHERE activity_id=%s", (int(activity_id),))
            return cur.rowcount > 0

    def list_for_employee(
        self,
        emp_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Activity]:
        where, params = _filters(start_date, end_date, emp_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM activities a {where} ORDER BY a.activity_datetime ASC",
                params,
            )
            return [_row_to_activity(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        emp_id: Optional[int] = None,
    ) -> Sequence[ActivityReportRow]:
        where, params = _filters(start_date, end_date, emp_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name
                FROM activities a
                JOIN employees e ON e.emp_id = a.emp_id
                {where}
                ORDER BY a.activity_datetime ASC, a.emp_id ASC
                """,
                params,
            )
            return [
                ActivityReportRow(activity=_row_to_activity(r), full_name=r["full_name"])
                for r in fetchall(cur)
            ]
