"""Aging metrics computation (pure functions)."""

from __future__ import annotations

import math
from datetime import datetime

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value


def age_days(created: datetime | None, now: datetime | None = None) -> int | None:
    """Whole days elapsed since ``created`` (floored), or None when unknown."""
    if created is None:
        return None
    now = _aware(now) if now is not None else utc_now()
    delta = now - _aware(created)
    return math.floor(delta.total_seconds() / 86400.0)


def is_older_than(created: datetime | None, days: int, now: datetime | None = None) -> bool:
    age = age_days(created, now)
    return age is not None and age > days


def average_age(ages) -> float:
    known = [a for a in ages if a is not None]
    if not known:
        return 0.0
    return round(sum(known) / len(known), 1)
