from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.id, a.student_id, a.date, a.status, a.check_in_time, a.late_arrival_time,
           a.excuse_reason, a.created_at, s.name AS student_name
    FROM attendance a
    JOIN students s ON s.id = a.student_id
"""


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(row["id"] or 0),
        student_id=int(row["student_id"]),
        attendance_date=row["date"],
        status=AttendanceStatus(row["status"] or AttendanceStatus.ABSENT.value),
        check_in_time=normalize_mysql_time(row.get("check_in_time")),
        late_arrival_time=normalize_mysql_time(row.get("late_arrival_time")),
        excuse_reason=row.get("excuse_reason"),
        created_at=row.get("created_at"),
        student_name=row.get("student_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[time],
        late_arrival_time: Optional[time],
        excuse_reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, date, status, check_in_time, late_arrival_time, excuse_reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    id=LAST_INSERT_ID(id),
                    status=VALUES(status),
                    check_in_time=VALUES(check_in_time),
                    late_arrival_time=VALUES(late_arrival_time),
                    excuse_reason=VALUES(excuse_reason)
                """,
                (student_id, attendance_date, status.value, check_in_time, late_arrival_time, excuse_reason),
            )
            return int(cur.lastrowid)

    def update_by_id(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        check_in_time: Optional[time],
        late_arrival_time: Optional[time],
        excuse_reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, check_in_time=%s, late_arrival_time=%s, excuse_reason=%s
                WHERE id=%s
                """,
                (status.value, check_in_time, late_arrival_time, excuse_reason, attendance_id),
            )
            return cur.rowcount > 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.id=%s", (attendance_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.student_id=%s AND a.date=%s", (student_id, attendance_date))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.date=%s ORDER BY s.name", (attendance_date,))
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_class_and_date(self, class_id: int, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id, s.id AS student_id, a.status, a.check_in_time,
                       a.late_arrival_time, a.excuse_reason, a.created_at, s.name AS student_name
                FROM students s
                LEFT JOIN attendance a ON a.student_id = s.id AND a.date = %s
                WHERE s.class_id=%s
                ORDER BY s.name
                """,
                (attendance_date, class_id),
            )
            rows = fetchall(cur)
            return [_to_record({**r, "date": attendance_date}) for r in rows]

    def list_history(self, student_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.student_id=%s AND a.date BETWEEN %s AND %s ORDER BY a.date DESC",
                (student_id, start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE id=%s", (attendance_id,))
            return cur.rowcount > 0
