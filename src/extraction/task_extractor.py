from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from classification.task_classifier import TaskClassifier
from extraction.postprocess import postprocess
from extraction.sanitizer import sanitize_input
from llm.llm_client import LLMClient
from llm.schemas import ParsedTodo
from temporal.resolver import PART_OF_DAY_TIMES, TemporalContext, resolve
from todo_ai.models import ExtractionResult

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You convert a single natural-language todo into structured JSON. "
    "Reply with one JSON object and nothing else."
)


def _fmt(d) -> str:
    return f"{d.strftime('%A, %B %d, %Y')} ({d.isoformat()})"


def build_extraction_prompt(text: str, ctx: TemporalContext, rules: str) -> str:
    part_of_day = "\n".join(
        f'   - "{word}" -> "{hhmm}"' for word, hhmm in PART_OF_DAY_TIMES.items()
    )
    return f"""Convert the following natural-language input into todo data.

Current date/time:
- Today: {_fmt(ctx.today)}
- Current time: {ctx.current_time}
- Tomorrow: {_fmt(ctx.tomorrow)}
- Day after tomorrow: {_fmt(ctx.day_after_tomorrow)}
- This Friday: {_fmt(ctx.this_friday)}
- Next Monday: {_fmt(ctx.next_monday)}

Input: "{text}"

=== Rules ===

1. title: the core of the task, short and concrete (max 100 characters).

2. due_date (YYYY-MM-DD or null):
   - "today" -> {ctx.today.isoformat()}
   - "tomorrow" -> {ctx.tomorrow.isoformat()}
   - "day after tomorrow" -> {ctx.day_after_tomorrow.isoformat()}
   - "this Friday" -> {ctx.this_friday.isoformat()} (nearest Friday, today if today is Friday)
   - "next Monday" -> {ctx.next_monday.isoformat()}
   - other weekdays are computed the same way from today's date
   - no date mentioned -> null

3. due_time (HH:MM, 24-hour, or null):
{part_of_day}
   - explicit times such as "3pm" or "15:00" are converted to 24-hour HH:MM
   - no time mentioned -> null

4. priority ("high" | "medium" | "low") and 5. category ("work" | "personal" | "learning" | "other"):
{rules}

6. description: the original input text.

=== Example ===
Input: "tomorrow at 3pm prepare for an important team meeting"
Output:
{{"title": "Prepare for team meeting", "due_date": "{ctx.tomorrow.isoformat()}", "due_time": "15:00", "priority": "high", "category": "work", "description": "tomorrow at 3pm prepare for an important team meeting"}}

Reply with a JSON object with exactly these keys: title, due_date, due_time, priority, category, description.
"""


class TaskExtractor:

    def __init__(self, llm_client: LLMClient, classifier: Optional[TaskClassifier] = None):
        self.llm = llm_client
        self.classifier = classifier or TaskClassifier()

    def extract(self, text: str, now: datetime) -> ExtractionResult:
        cleaned = sanitize_input(text)
        ctx = resolve(now)
        prompt = build_extraction_prompt(cleaned, ctx, self.classifier.describe_rules())

        raw = self.llm.generate_json(
            system=EXTRACTION_SYSTEM_PROMPT, user=prompt, schema=ParsedTodo
        )
        result = postprocess(raw, cleaned, now)

        overrides = {
            field: value
            for field, value in self.classifier.overrides(cleaned).items()
            if getattr(result, field) != value
        }
        if overrides:
            logger.info(f"Keyword rules override model output: {overrides}")
            result = result.model_copy(update=overrides)

        logger.info(
            f"Extracted todo: priority={result.priority} category={result.category} "
            f"due={result.due_date} {result.due_time}"
        )
        return result
