from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

_TWO_PLACES = Decimal("0.01")


def calculate_bmi(height_cm: Optional[Decimal], weight_kg: Optional[Decimal]) -> Optional[Decimal]:
    """BMI = kg / m^2, rounded to 2 decimals."""

    if not height_cm or not weight_kg or height_cm <= 0:
        return None
    height_m = Decimal(height_cm) / 100
    return (Decimal(weight_kg) / (height_m * height_m)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PhysicalDevelopmentRecord:
    """Một lần đo chiều cao / cân nặng của học sinh.

    `prev_*` là số đo của lần đo liền trước (nếu có).
    """

    id: int
    student_id: int
    height_cm: Decimal
    weight_kg: Decimal
    measurement_date: date
    recorded_by: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    student_name: Optional[str] = None
    student_dob: Optional[date] = None
    recorded_by_name: Optional[str] = None
    prev_height_cm: Optional[Decimal] = None
    prev_weight_kg: Optional[Decimal] = None

    @property
    def bmi(self) -> Optional[Decimal]:
        return calculate_bmi(self.height_cm, self.weight_kg)

    @property
    def prev_bmi(self) -> Optional[Decimal]:
        return calculate_bmi(self.prev_height_cm, self.prev_weight_kg)

    @property
    def height_change(self) -> Decimal:
        if self.prev_height_cm is None:
            return Decimal("0")
        return self.height_cm - self.prev_height_cm

    @property
    def weight_change(self) -> Decimal:
        if self.prev_weight_kg is None:
            return Decimal("0")
        return self.weight_kg - self.prev_weight_kg

    @property
    def age_months(self) -> Optional[int]:
        if self.student_dob is None:
            return None
        months = (self.measurement_date.year - self.student_dob.year) * 12
        months += self.measurement_date.month - self.student_dob.month
        if self.measurement_date.day < self.student_dob.day:
            months -= 1
        return max(0, months)

    @property
    def age_display(self) -> Optional[str]:
        months = self.age_months
        if months is None:
            return None
        return f"{months // 12} tuổi {months % 12} tháng"
