"""Helpers for interpreting a bookstore's weekly opening hours."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Optional

from .models import WEEKDAYS, ProcessedBookstore, StoreStatus

logger = logging.getLogger(__name__)

CLOSED = "Closed"
OPEN_24_HOURS_RE = re.compile(r"open\s+24\s+hours", re.IGNORECASE)
RANGE_SPLIT_RE = re.compile(r"\s*[–—-]\s*")
TIME_RE = re.compile(r"(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<period>[AaPp]\.?[Mm]\.?)?")


def is_open_weekends(store: ProcessedBookstore) -> bool:
    """Return True when Saturday or Sunday has hours other than ``Closed``."""

    for day in ("saturday", "sunday"):
        hours = store.hours.get(day)
        if hours and hours != CLOSED:
            return True
    return False


def formatted_hours(hours: Optional[str]) -> str:
    if not hours or hours.strip().lower() == "closed":
        return CLOSED
    return hours


def parse_time_to_minutes(text: str) -> int:
    """Convert ``"9:30 AM"``, ``"9 PM"`` or ``"18:00"`` to minutes since midnight."""

    match = TIME_RE.fullmatch(text.strip())
    if not match:
        raise ValueError(f"Unrecognized time: {text!r}")
    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    period = (match.group("period") or "").replace(".", "").upper()

    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    if hour > 24 or minute > 59:
        raise ValueError(f"Time out of range: {text!r}")
    return hour * 60 + minute


def is_store_open(store: ProcessedBookstore, now: Optional[datetime] = None) -> bool:
    """Return whether the store is open at ``now`` (defaults to the local time)."""

    if store.status is not StoreStatus.OPERATIONAL:
        return False

    now = now or datetime.now()
    today = store.hours.get(WEEKDAYS[now.weekday()])
    if not today or today.strip().lower() == "closed":
        return False
    if OPEN_24_HOURS_RE.search(today):
        return True

    parts = RANGE_SPLIT_RE.split(today.strip(), maxsplit=1)
    if len(parts) != 2:
        logger.debug("Unrecognized hours for %s: %r", store.name, today)
        return False
    try:
        opens = parse_time_to_minutes(parts[0])
        closes = parse_time_to_minutes(parts[1])
    except ValueError:
        logger.debug("Failed to parse hours for %s: %r", store.name, today, exc_info=True)
        return False

    current = now.hour * 60 + now.minute
    if closes < opens:
        # closes after midnight
        return current >= opens or current <= closes
    return opens <= current <= closes
