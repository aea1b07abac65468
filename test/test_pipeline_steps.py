import importlib

from fastapi.testclient import TestClient

from api.dependencies import get_llm_client, get_task_repository
from llm.llm_client import LLMClient, get_provider
from storage.task_repository import InMemoryTaskRepository

NOW = "2026-10-21T10:00:00+00:00"


def test_step1_text_to_stored_task_to_summary() -> None:
    """
    Free text is extracted and stored, then summarised for the week,
    entirely against the offline mock provider.
    """
    main_mod = importlib.import_module("api.main")
    repo = InMemoryTaskRepository()
    main_mod.app.dependency_overrides[get_llm_client] = lambda: LLMClient(provider=get_provider("mock"))
    main_mod.app.dependency_overrides[get_task_repository] = lambda: repo
    try:
        client = TestClient(main_mod.app)

        r = client.post("/tasks/from-text", json={"text": "urgent: finish the project report", "now": NOW})
        assert r.status_code == 201
        task = r.json()
        assert task["priority"] == "high"
        assert task["category"] == "work"

        # undated: the task falls into the current week through its creation time
        s = client.post("/ai/summarize-todos", json={"period": "week"})
        assert s.status_code == 200
        body = s.json()
        assert set(body) == {"summary", "urgentTasks", "insights", "recommendations"}
        assert body["urgentTasks"] == [task["title"]]
    finally:
        main_mod.app.dependency_overrides.clear()


def test_step2_completed_tasks_leave_the_urgent_set() -> None:
    main_mod = importlib.import_module("api.main")
    repo = InMemoryTaskRepository()
    main_mod.app.dependency_overrides[get_llm_client] = lambda: LLMClient(provider=get_provider("mock"))
    main_mod.app.dependency_overrides[get_task_repository] = lambda: repo
    try:
        client = TestClient(main_mod.app)
        a = client.post("/tasks", json={"title": "Call landlord", "priority": "high",
                                        "due_at": "2026-10-23T09:00:00+00:00"}).json()
        client.post("/tasks", json={"title": "Pay bills", "due_at": "2026-10-21T18:00:00+00:00"})

        first = client.post("/ai/summarize-todos", json={"period": "week", "now": NOW}).json()
        assert sorted(first["urgentTasks"]) == ["Call landlord", "Pay bills"]

        client.post(f"/tasks/{a['id']}/toggle")
        second = client.post("/ai/summarize-todos", json={"period": "week", "now": NOW}).json()
        assert second["urgentTasks"] == ["Pay bills"]
    finally:
        main_mod.app.dependency_overrides.clear()
