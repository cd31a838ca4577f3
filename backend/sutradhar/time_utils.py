"""
Timestamps are stored as naive UTC. Helpers here convert at the edges:
ISO strings coming in, "...Z" strings going out.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def utcnow() -> datetime:
    return _naive_utc(datetime.now(timezone.utc))


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    "2026-11-01T00:00", "2026-11-01T00:00Z" or "+05:30" offsets.

    Blank input gives None; strings without an offset are taken as UTC.
    Raises ValueError for anything else.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return _naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    aware = dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)
    return aware.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def is_past(dt: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Unset means never."""
    if dt is None:
        return False
    return _naive_utc(dt) <= (now or utcnow())
