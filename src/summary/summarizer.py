from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Sequence

from aggregation.task_aggregator import Bucket, PeriodStatistics, TaskAggregator
from llm.llm_client import LLMClient, call_with_deadline
from llm.schemas import SummaryPayload
from storage.task_repository import TaskRepository
from temporal.resolver import align_to
from todo_ai.models import Summary, Task

logger = logging.getLogger(__name__)

URGENT_WINDOW = timedelta(days=1)

EMPTY_PERIOD_MESSAGES = {
    "day": "No tasks scheduled for today.",
    "week": "No tasks scheduled for this week.",
}

SUMMARY_SYSTEM_PROMPT = (
    "You are an assistant that analyses a user's todo habits and writes short, "
    "encouraging, practical summaries. Reply with one JSON object and nothing else."
)


def urgent_tasks(tasks: Sequence[Task], now: datetime) -> List[Task]:
    """Incomplete tasks that are high priority or due within one day (overdue included)."""
    out: List[Task] = []
    for t in tasks:
        if t.completed:
            continue
        if t.priority == "high":
            out.append(t)
        elif t.due_at is not None and align_to(t.due_at, now) - now <= URGENT_WINDOW:
            out.append(t)
    return out


def empty_summary(period: str) -> Summary:
    return Summary(summary=EMPTY_PERIOD_MESSAGES[period])


def _pct(b: Bucket) -> str:
    return f"{b.completed}/{b.total} completed ({b.rate:.1f}%)"


def _bucket_lines(buckets: Dict[str, Bucket]) -> str:
    return "\n".join(f"- {name}: {_pct(b)}" for name, b in buckets.items())


def _task_rows(stats: PeriodStatistics) -> List[dict]:
    return [
        {
            "title": t.title,
            "description": t.description or "",
            "priority": t.priority,
            "category": t.category,
            "completed": t.completed,
            "due_date": align_to(t.due_at, stats.now).isoformat() if t.due_at else None,
        }
        for t in stats.tasks
    ]


def build_summary_prompt(stats: PeriodStatistics, urgent: Sequence[Task]) -> str:
    is_day = stats.period == "day"
    period_label = "today" if is_day else "this week"
    previous_label = "yesterday" if is_day else "last week"

    change = stats.completion_rate_change
    trend = "(improved)" if change > 0 else "(declined)" if change < 0 else "(unchanged)"

    postponed = ""
    if stats.overdue:
        postponed = (
            f"  - by category: {json.dumps(stats.postponed_by_category)}\n"
            f"  - by priority: {json.dumps(stats.postponed_by_priority)}\n"
        )
    overdue_lines = "\n".join(
        f"  - {o.title} ({o.category}, {o.priority}): {o.days_overdue} day(s) overdue"
        for o in stats.overdue
    )

    urgent_titles = [t.title for t in urgent]
    urgent_list = "\n".join(f"{i}. {title}" for i, title in enumerate(urgent_titles, 1)) or "none"

    focus = (
        "- summary: focus on today's remaining work and what to do first.\n"
        "- recommendations: concrete ways to use the rest of today well."
        if is_day
        else
        "- summary: focus on this week's patterns.\n"
        "- recommendations: suggestions for planning next week."
    )

    return f"""Analyse the user's todos and give a precise, practical assessment.

Current date: {stats.now.strftime('%B %d, %Y')}
Period analysed: {period_label}
Compared with: {previous_label}

=== Todos ===
{json.dumps(_task_rows(stats), indent=2, ensure_ascii=False)}

=== Key statistics ===

Completion:
- {period_label}: {stats.completed} of {stats.total} completed ({stats.completion_rate:.1f}%)
- {previous_label}: {stats.previous_completed} of {stats.previous_total} completed ({stats.previous_completion_rate:.1f}%)
- change: {change:+.1f} percentage points {trend}

By priority:
{_bucket_lines(stats.by_priority)}

By category:
{_bucket_lines(stats.by_category)}

Deadlines:
- deadline compliance: {stats.deadline_compliance_rate:.1f}% ({stats.on_time}/{stats.with_due_date})
- overdue todos: {len(stats.overdue)}
{overdue_lines}
{postponed}
By time of day (due time):
{_bucket_lines(stats.by_time_slot)}
- most productive time slot: {stats.most_productive_time_slot or 'not enough data'}

By weekday (created):
{_bucket_lines(stats.by_weekday)}
- most productive weekday: {stats.most_productive_weekday or 'not enough data'}

Patterns:
- easiest category to complete: {stats.easiest_category or 'not enough data'}
- easiest priority to complete: {stats.easiest_priority or 'not enough data'}
- most postponed category: {stats.most_postponed_category or 'none'}
- most postponed priority: {stats.most_postponed_priority or 'none'}

Urgent todos: {len(urgent_titles)}
{urgent_list}
Urgent tasks (ground truth): {json.dumps(urgent_titles, ensure_ascii=False)}

=== What to write ===
{focus}
- summary: 1-2 sentences including the completion rate and the change against {previous_label}.
- urgentTasks: titles only, taken from the urgent todos above; do not invent new ones.
- insights: 1-2 sentences each on completion patterns, deadline handling, productive weekdays and time slots, and workload distribution.
- recommendations: specific, immediately actionable tips on time management, priority adjustment, rescheduling into productive slots, and spreading the workload.
- Mention concrete numbers. Be encouraging, point out what is going well.

=== Output format ===
Reply with exactly this JSON shape and no other keys:
{{"summary": "...", "urgentTasks": ["..."], "insights": ["..."], "recommendations": ["..."]}}
"""


class Summarizer:

    def __init__(
        self,
        repository: TaskRepository,
        llm_client: LLMClient,
        aggregator: TaskAggregator | None = None,
        deadline_s: float | None = None,
    ):
        self.repository = repository
        self.llm = llm_client
        self.aggregator = aggregator or TaskAggregator()
        self.deadline_s = deadline_s

    async def statistics(self, owner_id: str, period: str, now: datetime) -> PeriodStatistics:
        tasks = await self.repository.list_tasks(owner_id)
        return self.aggregator.aggregate(tasks, period, now)

    async def summarize(self, owner_id: str, period: str, now: datetime) -> Summary:
        stats = await self.statistics(owner_id, period, now)

        if stats.is_empty:
            logger.info(f"No tasks for owner={owner_id} period={stats.period}; skipping model call")
            return empty_summary(stats.period)

        urgent = urgent_tasks(stats.tasks, now)
        prompt = build_summary_prompt(stats, urgent)

        payload = await call_with_deadline(
            self.llm.generate_json,
            system=SUMMARY_SYSTEM_PROMPT,
            user=prompt,
            schema=SummaryPayload,
            deadline_s=self.deadline_s,
        )
        logger.info(
            f"Summary generated for owner={owner_id} period={stats.period} "
            f"tasks={stats.total} urgent={len(urgent)}"
        )
        return payload.to_summary()
