from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Thực thể miền (domain): Lớp học.

    `current_enrollment` được tính khi truy vấn (đếm học sinh trong lớp).
    """

    id: int
    name: str
    school_id: int
    grade_level: str
    capacity: int
    teacher_id: Optional[int] = None
    created_at: Optional[datetime] = None
    teacher_name: Optional[str] = None
    school_name: Optional[str] = None
    current_enrollment: int = 0

    @property
    def available_spots(self) -> int:
        return max(0, self.capacity - self.current_enrollment)

    @property
    def is_full(self) -> bool:
        return self.current_enrollment >= self.capacity

    @property
    def capacity_utilization(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return self.current_enrollment * 100.0 / self.capacity

    @property
    def has_teacher(self) -> bool:
        return self.teacher_id is not None


@dataclass(frozen=True)
class TeacherOption:
    """Read-model: giáo viên và lớp đang phụ trách (nếu có)."""

    id: int
    username: str
    class_id: Optional[int] = None
    class_name: Optional[str] = None


@dataclass(frozen=True)
class ClassStatistics:
    total_classes: int
    classes_with_teachers: int
    total_capacity: int
    total_enrollment: int

    @property
    def classes_without_teachers(self) -> int:
        return self.total_classes - self.classes_with_teachers

    @property
    def available_spots(self) -> int:
        return self.total_capacity - self.total_enrollment

    @property
    def utilization_rate(self) -> float:
        if self.total_capacity <= 0:
            return 0.0
        return self.total_enrollment * 100.0 / self.total_capacity

    @property
    def teacher_assignment_rate(self) -> float:
        if self.total_classes <= 0:
            return 0.0
        return self.classes_with_teachers * 100.0 / self.total_classes
