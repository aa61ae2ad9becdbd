from __future__ import annotations

import base64
import binascii
from datetime import date
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import ValidationError
from .datetime_utils import parse_optional_date


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Dữ liệu gửi lên phải là JSON object")
    return payload


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} phải là số nguyên")


def date_arg(name: str, field_name: str, *, default: Optional[date] = None) -> Optional[date]:
    return parse_optional_date(request.args.get(name), field_name) or default


def decode_base64(value: Optional[str], field_name: str) -> Optional[bytes]:
    if not value:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f"{field_name} không phải base64 hợp lệ")
