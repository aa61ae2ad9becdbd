from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_decimal
from .model import PhysicalDevelopmentRecord
from .repository import PhysicalDevelopmentRepository

# Previous measurement per student via window function (MySQL 8+).
_SELECT = """
    SELECT * FROM (
        SELECT r.id, r.student_id, r.height_cm, r.weight_kg, r.measurement_date, r.recorded_by,
               r.notes, r.created_at, s.name AS student_name, s.dob AS student_dob, s.class_id,
               u.username AS recorded_by_name,
               LAG(r.height_cm) OVER w AS prev_height_cm,
               LAG(r.weight_kg) OVER w AS prev_weight_kg
        FROM physical_development_records r
        JOIN students s ON s.id = r.student_id
        LEFT JOIN users u ON u.id = r.recorded_by
        WINDOW w AS (PARTITION BY r.student_id ORDER BY r.measurement_date, r.id)
    ) pds
"""


def _to_record(row: Dict[str, Any]) -> PhysicalDevelopmentRecord:
    return PhysicalDevelopmentRecord(
        id=int(row["id"]),
        student_id=int(row["student_id"]),
        height_cm=optional_decimal(row["height_cm"]),
        weight_kg=optional_decimal(row["weight_kg"]),
        measurement_date=row["measurement_date"],
        recorded_by=row.get("recorded_by"),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
        student_name=row.get("student_name"),
        student_dob=row.get("student_dob"),
        recorded_by_name=row.get("recorded_by_name"),
        prev_height_cm=optional_decimal(row.get("prev_height_cm")),
        prev_weight_kg=optional_decimal(row.get("prev_weight_kg")),
    )


class MySQLPhysicalDevelopmentRepository(PhysicalDevelopmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_record(
        self,
        *,
        student_id: int,
        height_cm: Decimal,
        weight_kg: Decimal,
        measurement_date: date,
        recorded_by: Optional[int],
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO physical_development_records
                    (student_id, height_cm, weight_kg, measurement_date, recorded_by, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (student_id, height_cm, weight_kg, measurement_date, recorded_by, notes),
            )
            return int(cur.lastrowid)

    def update_record(
        self,
        *,
        record_id: int,
        height_cm: Decimal,
        weight_kg: Decimal,
        measurement_date: date,
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE physical_development_records
                SET height_cm=%s, weight_kg=%s, measurement_date=%s, notes=%s
                WHERE id=%s
                """,
                (height_cm, weight_kg, measurement_date, notes, record_id),
            )
            return cur.rowcount > 0

    def get_by_id(self, record_id: int) -> Optional[PhysicalDevelopmentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE pds.id=%s", (record_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def delete_by_id(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM physical_development_records WHERE id=%s", (record_id,))
            return cur.rowcount > 0

    def list_for_student(self, student_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE pds.student_id=%s ORDER BY pds.measurement_date DESC, pds.id DESC",
                (student_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_class(self, class_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE pds.class_id=%s ORDER BY pds.student_name, pds.measurement_date DESC",
                (class_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student_between(
        self, student_id: int, start_date: date, end_date: date
    ) -> Sequence[PhysicalDevelopmentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE pds.student_id=%s AND pds.measurement_date BETWEEN %s AND %s
                ORDER BY pds.measurement_date DESC
                """,
                (student_id, start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]
