from __future__ import annotations

import re

from todo_ai.errors import EmptyInput, NoMeaningfulContent, TooLong, TooShort

MIN_INPUT_LENGTH = 2
MAX_INPUT_LENGTH = 500

_WHITESPACE = re.compile(r"\s+")


def normalize_input(raw: str) -> str:
    """Trim and collapse whitespace runs to a single space."""
    return _WHITESPACE.sub(" ", (raw or "").strip())


def sanitize_input(raw: str) -> str:
    """
    Normalise free text and reject input that is not worth a model call.

    Checks run in order and stop at the first failure:
    empty, shorter than 2, longer than 500, no letter or digit at all.
    """
    text = normalize_input(raw)

    if not text:
        raise EmptyInput()
    if len(text) < MIN_INPUT_LENGTH:
        raise TooShort()
    if len(text) > MAX_INPUT_LENGTH:
        raise TooLong()
    if not any(ch.isalnum() for ch in text):
        raise NoMeaningfulContent()

    return text
