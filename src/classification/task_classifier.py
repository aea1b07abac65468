from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

# Ordered: the first matching rule wins.
PRIORITY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("high", ("urgent", "important", "quickly", "must")),
    ("low", ("relaxed", "slowly", "someday")),
)

CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("work", ("meeting", "report", "project")),
    ("personal", ("shopping", "friend", "family", "exercise", "hospital", "health", "yoga")),
    ("learning", ("study", "book", "lecture")),
)

DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class KeywordMatch:
    value: str
    matched: Tuple[str, ...]  # every class whose keywords occur in the text

    @property
    def unambiguous(self) -> bool:
        return len(self.matched) == 1


def _match(text: str, rules, default: str) -> KeywordMatch:
    lowered = text.lower()
    matched: List[str] = [
        label for label, words in rules if any(w in lowered for w in words)
    ]
    return KeywordMatch(value=matched[0] if matched else default, matched=tuple(matched))


class TaskClassifier:
    """Deterministic priority/category rules, shared by the prompt and the cross-check."""

    def priority(self, text: str) -> KeywordMatch:
        return _match(text, PRIORITY_KEYWORDS, DEFAULT_PRIORITY)

    def category(self, text: str) -> KeywordMatch:
        return _match(text, CATEGORY_KEYWORDS, DEFAULT_CATEGORY)

    def overrides(self, text: str) -> Dict[str, str]:
        """
        Fields the rule table decides on its own.

        Only a keyword hit of exactly one class counts; mixed signals such as
        "urgent, but someday" are left to the model.
        """
        out: Dict[str, str] = {}
        p = self.priority(text)
        if p.unambiguous:
            out["priority"] = p.value
        c = self.category(text)
        if c.unambiguous:
            out["category"] = c.value
        return out

    def describe_rules(self) -> str:
        lines: List[str] = ["Priority keywords (first match wins):"]
        for label, words in PRIORITY_KEYWORDS:
            lines.append(f'  - "{label}": {", ".join(words)}')
        lines.append(f'  - "{DEFAULT_PRIORITY}": no keyword above')
        lines.append("Category keywords:")
        for label, words in CATEGORY_KEYWORDS:
            lines.append(f'  - "{label}": {", ".join(words)}')
        lines.append(f'  - "{DEFAULT_CATEGORY}": no keyword above')
        return "\n".join(lines)
