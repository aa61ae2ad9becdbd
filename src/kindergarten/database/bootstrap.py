"""Schema/seed bootstrap for a fresh MySQL database.

The schema ships inside the package (`schema.sql`); it is applied once, when
the `users` table does not exist yet.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.constants import DEFAULT_PARENT_RELATIONSHIP
from ..core.enums import Role
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent / "seed.sql"

# (username, password, role)
DEMO_USERS = (
    ("admin", "admin123", Role.PRINCIPAL),
    ("teacher1", "teacher123", Role.TEACHER),
    ("parent1", "parent123", Role.PARENT),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The database name comes from settings, not from the SQL file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' while leaving quoted semicolons alone."""

    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\" and quote:
            buf.append(ch)
            escape = True
            continue

        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    sql = _strip_line_comments(sql)

    conn = _connect(target)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def is_database_initialized(db_config: dict) -> bool:
    """True once the `users` table exists in the configured database."""

    try:
        tables = list_tables(db_config)
    except mysql.connector.errors.ProgrammingError:
        # Unknown database.
        return False
    return "users" in {str(t).lower() for t in tables}


def initialize_database(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> bool:
    """Apply the schema on first run. Returns True when it was applied."""

    if is_database_initialized(db_config):
        logger.info("Database already initialized, skipping schema")
        return False
    apply_schema(db_config, schema_path=schema_path)
    return True


def ensure_demo_users(db_config: dict, *, school_id: int = 1) -> None:
    """Upsert demo accounts and wire teacher1 -> class 1, parent1 -> student 1."""

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(username: str, password: str, role: Role) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET password_hash=%s, role=%s, school_id=%s WHERE id=%s",
                    (password_hash, role.value, school_id, existing["id"]),
                )
                return int(existing["id"])
            cur.execute(
                "INSERT INTO users (username, password_hash, role, school_id) VALUES (%s, %s, %s, %s)",
                (username, password_hash, role.value, school_id),
            )
            return int(cur.lastrowid)

        ids = {username: upsert_user(username, password, role) for username, password, role in DEMO_USERS}

        cur.execute("UPDATE classes SET teacher_id=%s WHERE id=1 AND teacher_id IS NULL", (ids["teacher1"],))

        cur.execute("SELECT id FROM students WHERE id=1")
        if cur.fetchone():
            cur.execute(
                "SELECT id FROM parents WHERE user_id=%s AND student_id=1",
                (ids["parent1"],),
            )
            if not cur.fetchone():
                cur.execute(
                    """
                    INSERT INTO parents (user_id, name, student_id, relationship)
                    VALUES (%s, %s, 1, %s)
                    """,
                    (ids["parent1"], "parent1", DEFAULT_PARENT_RELATIONSHIP),
                )

        conn.commit()
        logger.info("Demo users ready: %s", ", ".join(ids))
    finally:
        conn.close()
