from datetime import datetime

import pytest

from todo_ai.models import Task


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str) -> str:
        self.calls.append({"system": system, "user": user})
        return self._response_text


class RaisingProvider:
    def __init__(self, exc: Exception):
        self._exc = exc
        self.calls = 0

    def generate(self, *, system: str, user: str) -> str:
        self.calls += 1
        raise self._exc


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def raising_provider_factory():
    def _make(exc: Exception):
        return RaisingProvider(exc)
    return _make


@pytest.fixture
def wednesday():
    # 2026-10-21 is a Wednesday
    return datetime(2026, 10, 21, 10, 0)


@pytest.fixture
def task_factory():
    counter = {"n": 0}

    def _make(title: str = "Task", **kwargs):
        counter["n"] += 1
        kwargs.setdefault("id", f"t{counter['n']}")
        kwargs.setdefault("owner_id", "u1")
        kwargs.setdefault("created_at", datetime(2026, 10, 19, 8, 0))
        return Task(title=title, **kwargs)
    return _make
