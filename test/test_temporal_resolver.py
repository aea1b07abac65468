from datetime import date, datetime, timedelta, timezone

from temporal.resolver import (
    align_to,
    day_bounds,
    normalize_clock_time,
    resolve,
    resolve_relative_date,
    week_bounds,
)


def test_resolve_on_wednesday(wednesday):
    ctx = resolve(wednesday)
    assert ctx.today == date(2026, 10, 21)
    assert ctx.weekday_name == "Wednesday"
    assert ctx.tomorrow == date(2026, 10, 22)
    assert ctx.day_after_tomorrow == date(2026, 10, 23)
    assert ctx.this_friday == date(2026, 10, 23)
    assert ctx.next_monday == date(2026, 10, 26)
    assert ctx.current_time == "10:00"


def test_this_friday_on_a_friday_is_today():
    ctx = resolve(datetime(2026, 10, 23, 18, 30))
    assert ctx.this_friday == date(2026, 10, 23)


def test_next_monday_on_a_monday_is_a_week_later():
    ctx = resolve(datetime(2026, 10, 19, 9, 0))
    assert ctx.next_monday == date(2026, 10, 26)


def test_this_friday_on_saturday_rolls_forward():
    ctx = resolve(datetime(2026, 10, 24, 9, 0))
    assert ctx.this_friday == date(2026, 10, 30)


def test_resolve_relative_date_phrases(wednesday):
    assert resolve_relative_date("today", wednesday) == date(2026, 10, 21)
    assert resolve_relative_date("Tomorrow", wednesday) == date(2026, 10, 22)
    assert resolve_relative_date("the day after tomorrow", wednesday) == date(2026, 10, 23)
    assert resolve_relative_date("this friday", wednesday) == date(2026, 10, 23)
    assert resolve_relative_date("next monday", wednesday) == date(2026, 10, 26)
    assert resolve_relative_date("wednesday", wednesday) == date(2026, 10, 21)
    assert resolve_relative_date("next wed", wednesday) == date(2026, 10, 28)
    assert resolve_relative_date("sometime soon", wednesday) is None
    assert resolve_relative_date("", wednesday) is None


def test_normalize_clock_time():
    assert normalize_clock_time("3pm") == "15:00"
    assert normalize_clock_time("3:30 PM") == "15:30"
    assert normalize_clock_time("12am") == "00:00"
    assert normalize_clock_time("12pm") == "12:00"
    assert normalize_clock_time("15:00") == "15:00"
    assert normalize_clock_time("9:05:00") == "09:05"
    assert normalize_clock_time("evening") == "18:00"
    assert normalize_clock_time("Lunch") == "12:00"
    assert normalize_clock_time("tonight") == "21:00"


def test_normalize_clock_time_rejects_garbage():
    assert normalize_clock_time(None) is None
    assert normalize_clock_time("") is None
    assert normalize_clock_time("13pm") is None
    assert normalize_clock_time("25:00") is None
    assert normalize_clock_time("soonish") is None


def test_day_and_week_bounds_are_half_open(wednesday):
    start, end = day_bounds(wednesday)
    assert start == datetime(2026, 10, 21)
    assert end - start == timedelta(days=1)

    start, end = week_bounds(wednesday)
    assert start == datetime(2026, 10, 19)
    assert end == datetime(2026, 10, 26)


def test_align_to_naive_and_aware():
    aware_ref = datetime(2026, 10, 21, 12, 0, tzinfo=timezone(timedelta(hours=9)))
    naive = datetime(2026, 10, 21, 8, 0)
    assert align_to(naive, aware_ref) == datetime(2026, 10, 21, 8, 0, tzinfo=aware_ref.tzinfo)

    utc = datetime(2026, 10, 21, 0, 0, tzinfo=timezone.utc)
    assert align_to(utc, aware_ref).hour == 9

    assert align_to(utc, datetime(2026, 10, 21)) == datetime(2026, 10, 21, 0, 0)
    assert align_to(naive, datetime(2026, 10, 21)) is naive


def test_resolver_is_deterministic(wednesday):
    assert resolve(wednesday) == resolve(wednesday)
