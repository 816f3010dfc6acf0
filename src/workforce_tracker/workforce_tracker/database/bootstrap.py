from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "workforce_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = {"host": target.host, "port": target.port, "user": target.user, "password": target.password}
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(use_pure=True, **kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names workforce_db; the configured database wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ";" outside quoted strings; "--" comment lines are dropped.
    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    text = "\n".join(lines)

    start = 0
    quote: str | None = None
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = text[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = text[start:].strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: str | Path) -> int:
    target = _as_target(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = 0
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s (%d statements) to %s", Path(path).name, count, target.database)
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset) the demo admin and field employee accounts."""
    target = _as_target(db_config)

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT id FROM admins WHERE username=%s", ("admin",))
        if cur.fetchone():
            cur.execute(
                "UPDATE admins SET password=%s WHERE username=%s",
                (generate_password_hash("admin123"), "admin"),
            )
        else:
            cur.execute(
                "INSERT INTO admins (username, password) VALUES (%s, %s)",
                ("admin", generate_password_hash("admin123")),
            )

        def upsert_employee(full_name: str, username: str, password: str, phone_no: str) -> None:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT emp_id FROM employees WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE employees
                    SET full_name=%s, password=%s, phone_no=%s, is_active=1, updated_at=NOW()
                    WHERE username=%s
                    """,
                    (full_name, password_hash, phone_no, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO employees (full_name, username, password, phone_no, is_active)
                    VALUES (%s, %s, %s, %s, 1)
                    """,
                    (full_name, username, password_hash, phone_no),
                )

        upsert_employee("Nguyễn Văn A", "field.demo", "staff123", "0900000001")
        upsert_employee("Trần Thị B", "sales.demo", "staff123", "0900000002")

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
