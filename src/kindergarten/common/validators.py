from __future__ import annotations

from typing import Any, Optional, TypeVar

from ..core.exceptions import ValidationError

T = TypeVar("T")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} không được để trống")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} tối thiểu {min_len} ký tự")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} tối đa {max_len} ký tự")
    return value


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} không hợp lệ")
    if ident <= 0:
        raise ValidationError(f"{field_name} không hợp lệ")
    return ident


def require_present(value: Optional[T], field_name: str) -> T:
    if value is None:
        raise ValidationError(f"{field_name} là bắt buộc")
    return value
