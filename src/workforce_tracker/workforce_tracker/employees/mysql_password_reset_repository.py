from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import PasswordResetToken
from .repository import PasswordResetRepository


class MySQLPasswordResetRepository(PasswordResetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, role: Role, otp: str, expires_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO password_reset_tokens (user_id, role, otp, expires_at) VALUES (%s, %s, %s, %s)",
                (int(user_id), role.value, otp, expires_at),
            )
            return int(cur.lastrowid)

    def find_valid(self, *, otp: str, role: Role, now: datetime) -> Optional[PasswordResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, role, otp, expires_at, created_at
                FROM password_reset_tokens
                WHERE otp=%s AND role=%s AND expires_at > %s
                ORDER BY id DESC
                LIMIT 1
                """,
                (otp, role.value, now),
            )
            row = fetchone(cur)
            if not row:
                return None
            return PasswordResetToken(
                token_id=int(row["id"]),
                user_id=int(row["user_id"]),
                role=Role(row["role"]),
                otp=row["otp"],
                expires_at=row["expires_at"],
                created_at=row.get("created_at"),
            )

    def delete(self, token_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM password_reset_tokens WHERE id=%s", (int(token_id),))
            return cur.rowcount > 0
