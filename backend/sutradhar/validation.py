"""
Payload validation for seller and buyer writes.

Clients send JSON; services turn it into a clean patch before touching a
model. Column metadata drives type checks, a per-model policy decides what
a client may set at all, and the enforce_rules_* helpers hold the few
business limits the schema cannot express.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import Boolean, Integer, Float, String, Text, DateTime, JSON

from sutradhar.time_utils import parse_iso_datetime


# ₹99,999,999.99
MAX_PRICE = 99_999_999.99

# JSON columns that hold a plain list of strings (photo URLs, tags)
STRING_LIST_COLUMNS = frozenset({"photos", "tags", "brief_photos"})


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level conflict, e.g. a second shop for the same seller."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    writable_fields is the allowlist; anything else in a payload is rejected.
    required_on_create only applies when partial=False.
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{key} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith("-") else text
        if not digits.isdigit():
            raise ValidationError(f"{key} must be a whole number")
        return int(text)
    raise ValidationError(f"{key} must be a whole number")


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float, str)):
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError):
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    # NaN and inf slip past every range check
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be true or false")


def _as_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(f"{key} must be an ISO-8601 datetime")


def _as_text(key: str, value: Any) -> str:
    return str(value).strip()


def _as_json(key: str, value: Any) -> Any:
    if key not in STRING_LIST_COLUMNS:
        return value
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{key} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


# First matching column type wins
_COERCERS: tuple[tuple[type, Callable[[str, Any], Any]], ...] = (
    (Integer, _as_int),
    (Float, _as_float),
    (Boolean, _as_bool),
    (DateTime, _as_datetime),
    ((String, Text), _as_text),
    (JSON, _as_json),
)


def _coerce_value(col, value: Any):
    for coltype, coerce in _COERCERS:
        if isinstance(col.type, coltype):
            return coerce(col.key, value)
    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Return a cleaned patch holding only allowed, type-checked fields.

    partial=False is create: required fields must be present.
    partial=True is update: only the keys sent are checked.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - set(payload))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}

    for key, raw in payload.items():
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        col = columns.get(key)
        if col is None:
            raise ValidationError(f"Unknown field: {key}")

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
            continue

        value = _coerce_value(col, raw)

        if isinstance(value, str):
            if value == "" and not col.nullable:
                raise ValidationError(f"{key} cannot be blank")
            length = getattr(col.type, "length", None)
            if length and len(value) > length:
                raise ValidationError(f"{key} exceeds max length {length}")

        patch[key] = value

    return patch


def enforce_rules_product(patch: dict) -> None:
    price = patch.get("price")
    if price is not None:
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"price cannot exceed ₹{MAX_PRICE:,.2f}")

    stock = patch.get("stock")
    if stock is not None and stock < 0:
        raise ValidationError("stock must be >= 0")


def enforce_rules_custom_request(patch: dict) -> None:
    budget = patch.get("budget")
    if budget is not None and budget < 0:
        raise ValidationError("budget must be >= 0")

    timeline = patch.get("timeline_days")
    if timeline is not None and timeline <= 0:
        raise ValidationError("timeline_days must be > 0")
