import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.crud import TaskRepository
from app.db import Database
from app.dependencies import get_repository
from app.main import create_app
from app.suggestions import FALLBACK_SUBTASKS


@pytest.fixture()
def client(database_url: str):
    app = create_app(Settings(database_url=database_url, gemini_api_key=None))
    with TestClient(app) as client:
        yield client


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["ai_enabled"] is False


def test_task_lifecycle(client: TestClient) -> None:
    created = client.post("/api/tasks", json={"title": " Buy milk ", "priority": "MEDIUM"})
    assert created.status_code == 201
    task = created.json()
    assert task["title"] == "Buy milk"
    assert task["priority"] == "MEDIUM"
    assert task["completed"] is False

    toggled = client.patch(f"/api/tasks/{task['id']}", json={"completed": True})
    assert toggled.status_code == 200
    assert toggled.json()["completed"] is True

    renamed = client.put(f"/api/tasks/{task['id']}/title", json={"title": "Buy oat milk"})
    assert renamed.json()["title"] == "Buy oat milk"

    listed = client.get("/api/tasks").json()
    assert [t["id"] for t in listed] == [task["id"]]
    assert listed[0]["completed"] is True

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
    assert client.get("/api/tasks").json() == []
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_list_newest_first(client: TestClient) -> None:
    a = client.post("/api/tasks", json={"title": "A"}).json()
    b = client.post("/api/tasks", json={"title": "B"}).json()

    assert a["priority"] == "LOW"
    assert [t["id"] for t in client.get("/api/tasks").json()] == [b["id"], a["id"]]


def test_blank_title_rejected(client: TestClient) -> None:
    response = client.post("/api/tasks", json={"title": "   "})
    assert response.status_code == 422
    assert client.get("/api/tasks").json() == []


def test_unknown_task_is_404(client: TestClient) -> None:
    assert client.patch("/api/tasks/nope", json={"completed": True}).status_code == 404
    assert client.put("/api/tasks/nope/title", json={"title": "x"}).status_code == 404


def test_suggestion_falls_back_without_api_key(client: TestClient) -> None:
    response = client.post("/api/suggestions", json={"title": "Buy milk"})
    assert response.status_code == 200
    assert response.json() == {"refinedTitle": "Buy milk", "subtasks": FALLBACK_SUBTASKS}


def test_html_board_flow(client: TestClient) -> None:
    page = client.get("/")
    assert page.status_code == 200
    assert "Clear skies ahead" in page.text

    page = client.post("/ui/tasks", data={"title": "Water <plants>", "priority": "HIGH"})
    assert page.status_code == 200
    assert "Water &lt;plants&gt;" in page.text
    assert "0/1" in page.text

    (task,) = client.get("/api/tasks").json()

    page = client.post(f"/ui/tasks/{task['id']}/toggle")
    assert "1/1" in page.text

    page = client.post(f"/ui/tasks/{task['id']}/suggest")
    assert "AI REFINEMENT" in page.text
    assert FALLBACK_SUBTASKS[0] in page.text

    page = client.post("/ui/suggestion/dismiss")
    assert "AI REFINEMENT" not in page.text

    page = client.post(f"/ui/tasks/{task['id']}/delete")
    assert "Clear skies ahead" in page.text


def test_long_titles_are_accepted(client: TestClient) -> None:
    title = "x" * 300
    response = client.post("/api/suggestions", json={"title": title})
    assert response.status_code == 200
    assert response.json()["refinedTitle"] == title

    created = client.post("/api/tasks", json={"title": title})
    assert created.status_code == 201
    renamed = client.put(f"/api/tasks/{created.json()['id']}/title", json={"title": title + "y"})
    assert renamed.status_code == 200


def test_storage_error_is_503(client: TestClient, tmp_path) -> None:
    broken = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'tasks.db'}")
    client.app.dependency_overrides[get_repository] = lambda: TaskRepository(broken)

    assert client.get("/api/tasks").json() == []
    response = client.post("/api/tasks", json={"title": "Buy milk"})
    assert response.status_code == 503
    assert response.json() == {"detail": "Database unavailable"}
    assert client.patch("/api/tasks/any", json={"completed": True}).status_code == 503
