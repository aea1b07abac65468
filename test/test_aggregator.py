from datetime import datetime, timedelta, timezone

import pytest

from aggregation.task_aggregator import TaskAggregator, best_bucket, Bucket
from todo_ai.errors import InvalidPeriod

NOW = datetime(2026, 10, 21, 15, 0)  # Wednesday afternoon


def _aggregate(tasks, period="week", now=NOW):
    return TaskAggregator().aggregate(tasks, period, now)


def test_completion_rate(task_factory):
    tasks = [
        task_factory(f"t{i}", completed=i < 5, due_at=datetime(2026, 10, 20, 10, 0))
        for i in range(8)
    ]
    stats = _aggregate(tasks)
    assert stats.total == 8
    assert stats.completed == 5
    assert stats.completion_rate == 62.5


def test_empty_period_has_zero_rates():
    stats = _aggregate([])
    assert stats.is_empty
    assert stats.completion_rate == 0
    assert stats.deadline_compliance_rate == 0
    assert stats.most_productive_weekday is None
    assert stats.easiest_category is None


def test_membership_uses_due_date_then_created_at(task_factory):
    tasks = [
        # due this week, created last week
        task_factory("due here", due_at=datetime(2026, 10, 23, 9, 0), created_at=datetime(2026, 10, 10)),
        # no due date, created this week
        task_factory("created here", created_at=datetime(2026, 10, 20, 8, 0)),
        # due next week
        task_factory("later", due_at=datetime(2026, 10, 27, 9, 0)),
        # no timestamps at all
        task_factory("nothing", created_at=None),
    ]
    stats = _aggregate(tasks)
    assert [t.title for t in stats.tasks] == ["due here", "created here"]


def test_week_boundary_is_monday_start(task_factory):
    sunday_night = task_factory("sun", due_at=datetime(2026, 10, 18, 23, 59))
    monday_start = task_factory("mon", due_at=datetime(2026, 10, 19, 0, 0))
    next_monday = task_factory("next", due_at=datetime(2026, 10, 26, 0, 0))
    stats = _aggregate([sunday_night, monday_start, next_monday])
    assert [t.title for t in stats.tasks] == ["mon"]
    assert stats.previous_total == 1


def test_day_period_and_previous_day(task_factory):
    tasks = [
        task_factory("today done", completed=True, due_at=datetime(2026, 10, 21, 9, 0)),
        task_factory("today open", due_at=datetime(2026, 10, 21, 20, 0)),
        task_factory("yesterday", completed=True, due_at=datetime(2026, 10, 20, 9, 0)),
    ]
    stats = _aggregate(tasks, period="today")
    assert stats.period == "day"
    assert stats.total == 2
    assert stats.completion_rate == 50.0
    assert stats.previous_completion_rate == 100.0
    assert stats.completion_rate_change == -50.0


def test_deadline_compliance(task_factory):
    tasks = [
        task_factory("done past", completed=True, due_at=datetime(2026, 10, 20, 9, 0)),
        task_factory("done future", completed=True, due_at=datetime(2026, 10, 24, 9, 0)),
        task_factory("open past", due_at=datetime(2026, 10, 19, 9, 0)),
        task_factory("no due", completed=True, created_at=datetime(2026, 10, 20)),
    ]
    stats = _aggregate(tasks)
    assert stats.with_due_date == 3
    assert stats.on_time == 1
    assert stats.deadline_compliance_rate == pytest.approx(100 / 3)


def test_overdue_days_round_up(task_factory):
    tasks = [
        task_factory("one hour late", category="work", due_at=NOW - timedelta(hours=1)),
        task_factory("two days late", priority="high", due_at=NOW - timedelta(days=1, hours=2)),
        task_factory("not yet", due_at=NOW + timedelta(hours=1)),
    ]
    stats = _aggregate(tasks)
    days = {o.title: o.days_overdue for o in stats.overdue}
    assert days == {"one hour late": 1, "two days late": 2}
    assert stats.postponed_by_category == {"work": 1, "other": 1}
    assert stats.postponed_by_priority == {"medium": 1, "high": 1}
    # tie on both: first declared wins
    assert stats.most_postponed_category == "work"
    assert stats.most_postponed_priority == "high"


def test_time_slots(task_factory):
    tasks = [
        task_factory("early", due_at=datetime(2026, 10, 20, 7, 0)),
        task_factory("morning", completed=True, due_at=datetime(2026, 10, 20, 9, 0)),
        task_factory("noon", due_at=datetime(2026, 10, 20, 12, 0)),
        task_factory("evening", completed=True, due_at=datetime(2026, 10, 20, 20, 59)),
        task_factory("night", due_at=datetime(2026, 10, 20, 23, 30)),
    ]
    stats = _aggregate(tasks)
    totals = {label.split()[0]: b.total for label, b in stats.by_time_slot.items()}
    assert totals == {"morning": 1, "afternoon": 1, "evening": 1, "night": 1}
    # morning and evening both at 100%
    assert stats.most_productive_time_slot.startswith("morning")


def test_weekday_buckets_use_created_at(task_factory):
    tasks = [
        task_factory("a", completed=True, created_at=datetime(2026, 10, 20, 8, 0)),  # Tuesday
        task_factory("b", created_at=datetime(2026, 10, 19, 8, 0)),  # Monday
        task_factory("c", completed=True, created_at=datetime(2026, 10, 19, 9, 0)),  # Monday
    ]
    stats = _aggregate(tasks)
    assert stats.by_weekday["Monday"].total == 2
    assert stats.by_weekday["Tuesday"].rate == 100.0
    assert stats.most_productive_weekday == "Tuesday"


def test_tie_break_is_declaration_order(task_factory):
    tasks = [
        task_factory("l", priority="low", category="learning", completed=True,
                     created_at=datetime(2026, 10, 21, 8, 0)),
        task_factory("h", priority="high", category="work", completed=True,
                     created_at=datetime(2026, 10, 20, 8, 0)),
    ]
    stats = _aggregate(tasks)
    assert stats.easiest_priority == "high"
    assert stats.easiest_category == "work"
    assert stats.most_productive_weekday == "Tuesday"
    assert best_bucket({"x": Bucket(1, 1), "y": Bucket(2, 2)}) == "x"


def test_aware_timestamps_are_compared_in_callers_zone(task_factory):
    seoul = timezone(timedelta(hours=9))
    now = datetime(2026, 10, 21, 8, 0, tzinfo=seoul)
    # 2026-10-20 22:00 UTC is 07:00 on the 21st in Seoul
    task = task_factory("early bird", due_at=datetime(2026, 10, 20, 22, 0, tzinfo=timezone.utc))
    stats = TaskAggregator().aggregate([task], "day", now)
    assert stats.total == 1
    assert stats.overdue[0].days_overdue == 1


def test_aggregation_does_not_mutate_and_is_repeatable(task_factory):
    tasks = [task_factory("x", due_at=datetime(2026, 10, 20, 10, 0))]
    before = [t.model_copy() for t in tasks]
    first = _aggregate(tasks)
    second = _aggregate(tasks)
    assert tasks == before
    assert first == second


def test_unknown_period():
    with pytest.raises(InvalidPeriod):
        _aggregate([], period="month")
