"""
Period statistics over one owner's task snapshot.

Pure and read-only: the same (tasks, period, now) always produces the same
statistics and no task is modified. Bucket "winners" (most productive weekday,
easiest category, ...) break ties by declaration order, i.e. the first bucket
listed wins (Monday before Tuesday, morning before afternoon, high before low,
work before other).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from temporal.resolver import WEEKDAY_NAMES, align_to, day_bounds, week_bounds
from todo_ai.errors import InvalidPeriod
from todo_ai.models import CATEGORIES, PRIORITIES, Task

PERIOD_ALIASES = {"day": "day", "today": "day", "week": "week"}

# (label, first hour, end hour exclusive)
TIME_SLOTS: Tuple[Tuple[str, int, int], ...] = (
    ("morning (09:00-12:00)", 9, 12),
    ("afternoon (12:00-18:00)", 12, 18),
    ("evening (18:00-21:00)", 18, 21),
    ("night (21:00-24:00)", 21, 24),
)


def rate(completed: int, total: int) -> float:
    return (completed / total) * 100 if total > 0 else 0.0


@dataclass
class Bucket:
    total: int = 0
    completed: int = 0

    @property
    def rate(self) -> float:
        return rate(self.completed, self.total)

    def add(self, done: bool) -> None:
        self.total += 1
        if done:
            self.completed += 1


@dataclass(frozen=True)
class OverdueTask:
    title: str
    category: str
    priority: str
    due_at: datetime
    days_overdue: int


@dataclass
class PeriodStatistics:
    period: str
    now: datetime
    start: datetime
    end: datetime

    total: int = 0
    completed: int = 0
    completion_rate: float = 0.0

    previous_total: int = 0
    previous_completed: int = 0
    previous_completion_rate: float = 0.0

    by_priority: Dict[str, Bucket] = field(default_factory=dict)
    by_category: Dict[str, Bucket] = field(default_factory=dict)

    with_due_date: int = 0
    on_time: int = 0
    deadline_compliance_rate: float = 0.0

    overdue: List[OverdueTask] = field(default_factory=list)
    postponed_by_category: Dict[str, int] = field(default_factory=dict)
    postponed_by_priority: Dict[str, int] = field(default_factory=dict)

    by_weekday: Dict[str, Bucket] = field(default_factory=dict)
    by_time_slot: Dict[str, Bucket] = field(default_factory=dict)

    most_productive_weekday: Optional[str] = None
    most_productive_time_slot: Optional[str] = None
    easiest_category: Optional[str] = None
    easiest_priority: Optional[str] = None
    most_postponed_category: Optional[str] = None
    most_postponed_priority: Optional[str] = None

    tasks: List[Task] = field(default_factory=list)

    @property
    def completion_rate_change(self) -> float:
        return self.completion_rate - self.previous_completion_rate

    @property
    def is_empty(self) -> bool:
        return self.total == 0


def normalize_period(period: str) -> str:
    try:
        return PERIOD_ALIASES[period.strip().lower()]
    except (KeyError, AttributeError):
        raise InvalidPeriod(f"Unsupported period: {period!r}") from None


def period_bounds(period: str, now: datetime) -> Tuple[datetime, datetime]:
    return day_bounds(now) if normalize_period(period) == "day" else week_bounds(now)


def previous_period_bounds(period: str, now: datetime) -> Tuple[datetime, datetime]:
    step = timedelta(days=1) if normalize_period(period) == "day" else timedelta(days=7)
    return period_bounds(period, now - step)


def anchor_instant(task: Task, now: datetime) -> Optional[datetime]:
    """Due instant if set, otherwise creation instant, in the caller's timezone."""
    anchor = task.due_at or task.created_at
    return align_to(anchor, now) if anchor is not None else None


def in_period(tasks: Iterable[Task], start: datetime, end: datetime, now: datetime) -> List[Task]:
    out: List[Task] = []
    for t in tasks:
        anchor = anchor_instant(t, now)
        if anchor is not None and start <= anchor < end:
            out.append(t)
    return out


def time_slot_for(hour: int) -> Optional[str]:
    for label, first, end in TIME_SLOTS:
        if first <= hour < end:
            return label
    return None


def best_bucket(buckets: Dict[str, Bucket]) -> Optional[str]:
    """Highest completion rate among non-empty buckets; first declared wins ties."""
    best: Optional[str] = None
    best_rate = -1.0
    for name, b in buckets.items():
        if b.total > 0 and b.rate > best_rate:
            best, best_rate = name, b.rate
    return best


def most_frequent(counts: Dict[str, int], order: Sequence[str]) -> Optional[str]:
    best: Optional[str] = None
    best_count = 0
    for name in order:
        if counts.get(name, 0) > best_count:
            best, best_count = name, counts[name]
    return best


class TaskAggregator:

    def aggregate(self, tasks: Sequence[Task], period: str, now: datetime) -> PeriodStatistics:
        period = normalize_period(period)
        start, end = period_bounds(period, now)
        prev_start, prev_end = previous_period_bounds(period, now)

        current = in_period(tasks, start, end, now)
        previous = in_period(tasks, prev_start, prev_end, now)

        stats = PeriodStatistics(period=period, now=now, start=start, end=end, tasks=current)

        stats.total = len(current)
        stats.completed = sum(1 for t in current if t.completed)
        stats.completion_rate = rate(stats.completed, stats.total)

        stats.previous_total = len(previous)
        stats.previous_completed = sum(1 for t in previous if t.completed)
        stats.previous_completion_rate = rate(stats.previous_completed, stats.previous_total)

        stats.by_priority = {p: Bucket() for p in PRIORITIES}
        stats.by_category = {c: Bucket() for c in CATEGORIES}
        stats.by_weekday = {d: Bucket() for d in WEEKDAY_NAMES}
        stats.by_time_slot = {label: Bucket() for label, _, _ in TIME_SLOTS}

        for t in current:
            stats.by_priority[t.priority].add(t.completed)
            stats.by_category[t.category].add(t.completed)

            if t.created_at is not None:
                weekday = WEEKDAY_NAMES[align_to(t.created_at, now).weekday()]
                stats.by_weekday[weekday].add(t.completed)

            if t.due_at is None:
                continue

            due = align_to(t.due_at, now)
            slot = time_slot_for(due.hour)
            if slot is not None:
                stats.by_time_slot[slot].add(t.completed)

            stats.with_due_date += 1
            if t.completed and due <= now:
                stats.on_time += 1
            if not t.completed and due < now:
                stats.overdue.append(
                    OverdueTask(
                        title=t.title,
                        category=t.category,
                        priority=t.priority,
                        due_at=due,
                        days_overdue=math.ceil((now - due) / timedelta(days=1)),
                    )
                )

        stats.deadline_compliance_rate = rate(stats.on_time, stats.with_due_date)

        for o in stats.overdue:
            stats.postponed_by_category[o.category] = stats.postponed_by_category.get(o.category, 0) + 1
            stats.postponed_by_priority[o.priority] = stats.postponed_by_priority.get(o.priority, 0) + 1

        stats.most_productive_weekday = best_bucket(stats.by_weekday)
        stats.most_productive_time_slot = best_bucket(stats.by_time_slot)
        stats.easiest_category = best_bucket(stats.by_category)
        stats.easiest_priority = best_bucket(stats.by_priority)
        stats.most_postponed_category = most_frequent(stats.postponed_by_category, CATEGORIES)
        stats.most_postponed_priority = most_frequent(stats.postponed_by_priority, PRIORITIES)

        return stats
