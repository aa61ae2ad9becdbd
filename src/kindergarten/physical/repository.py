from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import PhysicalDevelopmentRecord


class PhysicalDevelopmentRepository(Protocol):
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
        raise NotImplementedError

    def update_record(
        self,
        *,
        record_id: int,
        height_cm: Decimal,
        weight_kg: Decimal,
        measurement_date: date,
        notes: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[PhysicalDevelopmentRecord]:
        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        """Newest measurement first."""

        raise NotImplementedError

    def list_for_class(self, class_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        raise NotImplementedError

    def list_for_student_between(
        self, student_id: int, start_date: date, end_date: date
    ) -> Sequence[PhysicalDevelopmentRecord]:
        raise NotImplementedError
