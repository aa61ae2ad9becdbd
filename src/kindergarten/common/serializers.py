from __future__ import annotations

import base64
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable


def to_json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json_value(v) for v in value]
    return value


def to_dict(obj: Any, *, extra: Iterable[str] = ()) -> dict:
    """Dataclass -> JSON-friendly dict.

    `extra` names derived properties (e.g. `available_spots`) to include.
    """

    out = {f.name: to_json_value(getattr(obj, f.name)) for f in fields(obj)}
    for name in extra:
        out[name] = to_json_value(getattr(obj, name))
    return out


def to_list(items: Iterable[Any], *, extra: Iterable[str] = ()) -> list[dict]:
    extra = tuple(extra)
    return [to_dict(i, extra=extra) for i in items]
