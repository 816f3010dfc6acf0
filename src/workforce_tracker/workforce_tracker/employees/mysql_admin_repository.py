from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Admin
from .repository import AdminRepository


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, username, password FROM admins WHERE id=%s", (int(admin_id),))
            row = fetchone(cur)
            if not row:
                return None
            return Admin(admin_id=int(row["id"]), username=row["username"], password_hash=row["password"])

    def get_by_username(self, username: str) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, username, password FROM admins WHERE username=%s", (username,))
            row = fetchone(cur)
            if not row:
                return None
            return Admin(admin_id=int(row["id"]), username=row["username"], password_hash=row["password"])

    def update_password(self, admin_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admins SET password=%s WHERE id=%s", (password_hash, int(admin_id)))
            return cur.rowcount > 0
