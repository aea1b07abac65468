"""
Relative date/time vocabulary resolved against a reference instant.

Everything here is pure: the same ``now`` always yields the same dates, and
nothing in this module talks to the model. The extraction prompt embeds the
resolved values so the model does not have to do calendar arithmetic itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

PART_OF_DAY_TIMES = {
    "morning": "09:00",
    "noon": "12:00",
    "lunch": "12:00",
    "afternoon": "14:00",
    "evening": "18:00",
    "night": "21:00",
    "tonight": "21:00",
}

_WEEKDAY_RE = (
    r"(monday|mon|tuesday|tue|tues|wednesday|wed|thursday|thu|thur|thurs|"
    r"friday|fri|saturday|sat|sunday|sun)"
)
_THIS_WEEKDAY = re.compile(r"^(?:this\s+)?" + _WEEKDAY_RE + r"$")
_NEXT_WEEKDAY = re.compile(r"^next\s+(?:week\s+)?" + _WEEKDAY_RE + r"$")

_TIME_12H = re.compile(r"^(\d{1,2})(?::([0-5]\d))?\s*(am|pm|a\.m\.|p\.m\.)$")
_TIME_24H = re.compile(r"^([01]?\d|2[0-3])(?::|h)([0-5]\d)(?::[0-5]\d)?$")


@dataclass(frozen=True)
class TemporalContext:
    now: datetime
    today: date
    tomorrow: date
    day_after_tomorrow: date
    this_friday: date
    next_monday: date

    @property
    def weekday_name(self) -> str:
        return WEEKDAY_NAMES[self.today.weekday()]

    @property
    def current_time(self) -> str:
        return self.now.strftime("%H:%M")


def resolve(now: datetime) -> TemporalContext:
    today = now.date()
    return TemporalContext(
        now=now,
        today=today,
        tomorrow=today + timedelta(days=1),
        day_after_tomorrow=today + timedelta(days=2),
        this_friday=upcoming_weekday(today, 4, include_today=True),
        next_monday=upcoming_weekday(today, 0, include_today=False),
    )


def upcoming_weekday(d: date, target_weekday: int, include_today: bool) -> date:
    days_ahead = (target_weekday - d.weekday()) % 7
    if days_ahead == 0 and not include_today:
        days_ahead = 7
    return d + timedelta(days=days_ahead)


def _weekday_to_int(day: str) -> int:
    mapping = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}
    return mapping[day[:3].lower()]


def resolve_relative_date(phrase: str, now: datetime) -> Optional[date]:
    """Map a relative date phrase ("tomorrow", "next monday", ...) to a date."""
    p = " ".join((phrase or "").lower().split())
    today = now.date()

    if p == "today":
        return today
    if p == "tomorrow":
        return today + timedelta(days=1)
    if p in {"day after tomorrow", "the day after tomorrow"}:
        return today + timedelta(days=2)

    m = _NEXT_WEEKDAY.match(p)
    if m:
        return upcoming_weekday(today, _weekday_to_int(m.group(1)), include_today=False)

    m = _THIS_WEEKDAY.match(p)
    if m:
        return upcoming_weekday(today, _weekday_to_int(m.group(1)), include_today=True)

    return None


def part_of_day_time(word: str) -> Optional[str]:
    return PART_OF_DAY_TIMES.get((word or "").strip().lower())


def normalize_clock_time(text: Optional[str]) -> Optional[str]:
    """
    Normalise "3pm", "3:30 PM", "15:00", "9:05:00" or a part-of-day word to HH:MM.

    Returns None when the text is not a recognisable time of day.
    """
    if text is None:
        return None
    t = text.strip().lower()
    if not t:
        return None

    named = part_of_day_time(t)
    if named:
        return named

    m = _TIME_12H.match(t)
    if m:
        h = int(m.group(1))
        minute = int(m.group(2)) if m.group(2) else 0
        if not 1 <= h <= 12:
            return None
        pm = m.group(3).startswith("p")
        if pm and h != 12:
            h += 12
        if not pm and h == 12:
            h = 0
        return f"{h:02d}:{minute:02d}"

    m = _TIME_24H.match(t)
    if m:
        return f"{int(m.group(1)):02d}:{int(m.group(2)):02d}"

    return None


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def day_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Half-open [start, end) interval of the calendar day containing ``now``."""
    start = start_of_day(now)
    return start, start + timedelta(days=1)


def week_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Half-open [start, end) interval of the ISO week (Monday start) containing ``now``."""
    start = start_of_day(now) - timedelta(days=now.weekday())
    return start, start + timedelta(days=7)


def align_to(dt: datetime, reference: datetime) -> datetime:
    """
    Express ``dt`` in the same timezone convention as ``reference``.

    Naive timestamps are taken to be wall-clock time in the reference's zone;
    aware timestamps are converted into it. Against a naive reference, aware
    timestamps are converted to UTC and made naive.
    """
    ref_tz = reference.tzinfo
    if ref_tz is None:
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ref_tz)
    return dt.astimezone(ref_tz)

