from __future__ import annotations
import json
import re
from llm.providers.base import LLMProvider

_INPUT_LINE = re.compile(r'^Input: "(.*)"$', re.MULTILINE)
_URGENT_LINE = re.compile(r"^Urgent tasks \(ground truth\): (\[.*\])$", re.MULTILINE)


class MockProvider(LLMProvider):
    """Offline provider for local runs (LLM_PROVIDER=mock)."""

    def generate(self, *, system: str, user: str) -> str:
        """
        Returns dummy JSON responses based on the prompt content.
        """
        # Extraction request: echo the input back as a minimal todo
        m = _INPUT_LINE.search(user)
        if m:
            text = m.group(1)
            return json.dumps({
                "title": text[:60],
                "description": text,
                "priority": None,
                "category": None,
                "due_date": None,
                "due_time": None,
            })

        # Summary request: repeat the precomputed urgent list
        m = _URGENT_LINE.search(user)
        if m:
            urgent = json.loads(m.group(1))
            return json.dumps({
                "summary": "Here is an overview of your tasks for this period.",
                "urgentTasks": urgent,
                "insights": ["Summaries are generated by the offline mock provider."],
                "recommendations": ["Configure LLM_PROVIDER to get real recommendations."],
            })

        # Default fallback
        return "{}"
