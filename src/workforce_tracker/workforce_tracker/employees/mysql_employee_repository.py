from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Employee, EmployeeChanges
from .repository import EmployeeRepository

_COLUMNS = """
    emp_id, full_name, username, password, phone_no, email_id, aadhaar_no,
    profile_picture, is_active, created_at, updated_at
"""


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        emp_id=int(row["emp_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password"],
        phone_no=row.get("phone_no"),
        email_id=row.get("email_id"),
        aadhaar_no=row.get("aadhaar_no"),
        profile_picture=row.get("profile_picture"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, emp_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE emp_id=%s", (int(emp_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_username(self, username: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE username=%s", (username,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_email(self, email_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE email_id=%s ORDER BY emp_id LIMIT 1", (email_id,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def create_employee(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        phone_no: Optional[str] = None,
        email_id: Optional[str] = None,
        aadhaar_no: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO employees(
                        full_name, username, password, phone_no, email_id, aadhaar_no, profile_picture, is_active
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (full_name, username, password_hash, phone_no, email_id, aadhaar_no, profile_picture),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise ConflictError("Username already exists") from exc
                raise
            return int(cur.lastrowid)

    def update_employee(self, emp_id: int, changes: EmployeeChanges) -> bool:
        column_map = {
            "full_name": "full_name",
            "username": "username",
            "phone_no": "phone_no",
            "email_id": "email_id",
            "aadhaar_no": "aadhaar_no",
            "profile_picture": "profile_picture",
            "is_active": "is_active",
            "password_hash": "password",
        }
        sets: list[str] = []
        params: list[object] = []
        for field_name, column in column_map.items():
            value = getattr(changes, field_name)
            if value is None:
                continue
            sets.append(f"{column}=%s")
            params.append(int(value) if isinstance(value, bool) else value)

        if not sets:
            return False

        params.append(int(emp_id))
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    f"UPDATE employees SET {', '.join(sets)}, updated_at=NOW() WHERE emp_id=%s",
                    tuple(params),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise ConflictError("Username already exists") from exc
                raise
            return cur.rowcount > 0

    def update_password(self, emp_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET password=%s, updated_at=NOW() WHERE emp_id=%s",
                (password_hash, int(emp_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, emp_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE emp_id=%s", (int(emp_id),))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY emp_id DESC")
            return [_row_to_employee(r) for r in fetchall(cur)]
