from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.validators import require_positive_id, require_present
from ..core.constants import (
    DEFAULT_MEASUREMENT_INTERVAL_DAYS,
    MAX_HEIGHT_CM,
    MAX_WEIGHT_KG,
    MIN_HEIGHT_CM,
    MIN_WEIGHT_KG,
)
from ..core.exceptions import NotFoundError, ValidationError
from .model import PhysicalDevelopmentRecord
from .repository import PhysicalDevelopmentRepository

logger = logging.getLogger(__name__)


def _to_decimal(value, field_name: str) -> Decimal:
    if value is None:
        raise ValidationError(f"{field_name} là bắt buộc")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name} phải là số")
    if not number.is_finite():
        raise ValidationError(f"{field_name} phải là số")
    return number


def validate_measurements(height_cm, weight_kg) -> tuple[Decimal, Decimal]:
    height = _to_decimal(height_cm, "Chiều cao")
    weight = _to_decimal(weight_kg, "Cân nặng")
    if height <= 0 or weight <= 0:
        raise ValidationError("Chiều cao và cân nặng phải là số dương")
    if not MIN_HEIGHT_CM <= height <= MAX_HEIGHT_CM:
        raise ValidationError(f"Chiều cao phải từ {MIN_HEIGHT_CM}cm đến {MAX_HEIGHT_CM}cm")
    if not MIN_WEIGHT_KG <= weight <= MAX_WEIGHT_KG:
        raise ValidationError(f"Cân nặng phải từ {MIN_WEIGHT_KG}kg đến {MAX_WEIGHT_KG}kg")
    return height, weight


def get_bmi_category(bmi: Optional[Decimal]) -> str:
    # Thresholds for preschool children (3-6 years).
    if bmi is None:
        return "Không xác định"
    if bmi < 14:
        return "Thiếu cân"
    if bmi < 17:
        return "Bình thường"
    if bmi < 19:
        return "Thừa cân"
    return "Béo phì"


def get_growth_trend(records: Sequence[PhysicalDevelopmentRecord]) -> str:
    """Compare the two most recent measurements."""

    if len(records) < 2:
        return "Chưa đủ dữ liệu để phân tích xu hướng"

    ordered = sorted(records, key=lambda r: (r.measurement_date, r.id), reverse=True)
    latest, previous = ordered[0], ordered[1]
    height_change = latest.height_cm - previous.height_cm
    weight_change = latest.weight_kg - previous.weight_kg

    if height_change > 2:
        height_part = "Tăng chiều cao nhanh"
    elif height_change > Decimal("0.5"):
        height_part = "Tăng chiều cao bình thường"
    elif height_change > 0:
        height_part = "Tăng chiều cao chậm"
    else:
        height_part = "Không tăng chiều cao"

    if weight_change > 1:
        weight_part = "tăng cân nhanh"
    elif weight_change > Decimal("0.2"):
        weight_part = "tăng cân bình thường"
    elif weight_change > 0:
        weight_part = "tăng cân chậm"
    elif weight_change < Decimal("-0.5"):
        weight_part = "giảm cân"
    else:
        weight_part = "cân nặng ổn định"

    return f"{height_part}, {weight_part}"


class PhysicalDevelopmentService:
    def __init__(
        self,
        records: PhysicalDevelopmentRepository,
        *,
        today: Callable[[], date] = today_local,
    ):
        self._records = records
        self._today = today

    def record_physical_data(
        self,
        *,
        student_id: int,
        height_cm,
        weight_kg,
        measurement_date: Optional[date],
        recorded_by: Optional[int],
        notes: Optional[str] = None,
    ) -> int:
        student_id = require_positive_id(student_id, "Mã học sinh")
        height, weight = validate_measurements(height_cm, weight_kg)
        measurement_date = require_present(measurement_date, "Ngày đo")
        if measurement_date > self._today():
            raise ValidationError("Ngày đo không được ở tương lai")

        record_id = self._records.create_record(
            student_id=student_id,
            height_cm=height,
            weight_kg=weight,
            measurement_date=measurement_date,
            recorded_by=recorded_by,
            notes=(notes or "").strip() or None,
        )
        logger.info("Recorded measurement %s for student %s", record_id, student_id)
        return record_id

    def update_physical_record(
        self,
        *,
        record_id: int,
        height_cm,
        weight_kg,
        measurement_date: Optional[date],
        notes: Optional[str] = None,
    ) -> None:
        record_id = require_positive_id(record_id, "Mã bản ghi")
        height, weight = validate_measurements(height_cm, weight_kg)
        measurement_date = require_present(measurement_date, "Ngày đo")
        if not self._records.update_record(
            record_id=record_id,
            height_cm=height,
            weight_kg=weight,
            measurement_date=measurement_date,
            notes=(notes or "").strip() or None,
        ):
            raise NotFoundError(f"Không tìm thấy bản ghi với ID: {record_id}")

    def delete_physical_record(self, record_id: int) -> None:
        if not self._records.delete_by_id(record_id):
            raise NotFoundError(f"Không tìm thấy bản ghi với ID: {record_id}")

    def get_physical_record(self, record_id: int) -> Optional[PhysicalDevelopmentRecord]:
        return self._records.get_by_id(record_id)

    def get_student_physical_history(self, student_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        return self._records.list_for_student(student_id)

    def get_latest_physical_data(self, student_id: int) -> Optional[PhysicalDevelopmentRecord]:
        history = self._records.list_for_student(student_id)
        return history[0] if history else None

    def get_class_physical_data(self, class_id: int) -> Sequence[PhysicalDevelopmentRecord]:
        return self._records.list_for_class(class_id)

    def get_physical_data_by_date_range(
        self, student_id: int, start_date: date, end_date: date
    ) -> Sequence[PhysicalDevelopmentRecord]:
        if start_date > end_date:
            raise ValidationError("Ngày bắt đầu không được sau ngày kết thúc")
        return self._records.list_for_student_between(student_id, start_date, end_date)

    get_bmi_category = staticmethod(get_bmi_category)
    get_growth_trend = staticmethod(get_growth_trend)

    def is_measurement_due(self, student_id: int, interval_days: int = DEFAULT_MEASUREMENT_INTERVAL_DAYS) -> bool:
        latest = self.get_latest_physical_data(student_id)
        if latest is None:
            return True
        return latest.measurement_date + timedelta(days=interval_days) <= self._today()
