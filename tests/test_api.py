"""Tests for the REST API: status codes, bodies and the {error} envelope."""

import pytest
from sqlmodel import SQLModel

from task_manager.models import Task


def _register(client, username="alice", password="pw1"):
    resp = client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 201
    return resp.json()


class TestScenario:
    def test_register_login_and_task_lifecycle(self, client):
        alice = _register(client)
        assert alice["username"] == "alice"
        assert "password" not in alice

        resp = client.post("/api/login", json={"username": "alice", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid username or password"}

        resp = client.post("/api/login", json={"username": "alice", "password": "pw1"})
        assert resp.status_code == 200
        assert resp.json() == {"id": alice["id"], "username": "alice"}

        resp = client.post("/api/tasks", json={"title": "Essay", "user_id": alice["id"]})
        assert resp.status_code == 201
        task = resp.json()
        assert task["status"] == "To Do"
        assert task["user_id"] == alice["id"]
        assert task["due_date"] is None
        assert task["created_at"]

        resp = client.get("/api/tasks", params={"user_id": alice["id"]})
        assert resp.status_code == 200
        assert resp.json() == [task]

        # Status change is a full PUT of the row as the client holds it
        resp = client.put(f"/api/tasks/{task['id']}", json={**task, "status": "Done"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "Done"
        assert client.get(f"/api/tasks/{task['id']}").json()["status"] == "Done"

        resp = client.delete(f"/api/tasks/{task['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Task deleted successfully"}

        resp = client.get(f"/api/tasks/{task['id']}")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Task not found"}


class TestTaskEndpoints:
    def test_list_requires_user_id(self, client):
        resp = client.get("/api/tasks")
        assert resp.status_code == 400
        assert resp.json() == {"error": "user_id is required"}

    def test_list_rejects_non_integer_user_id(self, client):
        resp = client.get("/api/tasks", params={"user_id": "abc"})
        assert resp.status_code == 400
        assert "user_id" in resp.json()["error"]

    def test_create_requires_title(self, client):
        alice = _register(client)
        resp = client.post(
            "/api/tasks",
            json={"description": "no title", "status": "Done", "user_id": alice["id"]},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Title is required"}

    def test_create_requires_user_id(self, client):
        resp = client.post("/api/tasks", json={"title": "Essay"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "user_id is required"}

    def test_create_with_all_fields(self, client):
        alice = _register(client)
        resp = client.post(
            "/api/tasks",
            json={
                "title": "Lab report",
                "description": "Chemistry",
                "status": "In Progress",
                "due_date": "2024-05-01",
                "user_id": str(alice["id"]),
            },
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "In Progress"
        assert body["due_date"] == "2024-05-01"
        assert body["description"] == "Chemistry"
        assert body["user_id"] == alice["id"]

    def test_blank_due_date_is_treated_as_missing(self, client):
        alice = _register(client)
        resp = client.post(
            "/api/tasks", json={"title": "Essay", "due_date": "", "user_id": alice["id"]}
        )
        assert resp.status_code == 201
        assert resp.json()["due_date"] is None

    def test_unknown_status_is_rejected(self, client):
        alice = _register(client)
        resp = client.post(
            "/api/tasks", json={"title": "Essay", "status": "Blocked", "user_id": alice["id"]}
        )
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("status")

    def test_malformed_json_body(self, client):
        resp = client.post(
            "/api/tasks", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_update_requires_title(self, client):
        alice = _register(client)
        task = client.post("/api/tasks", json={"title": "Essay", "user_id": alice["id"]}).json()
        resp = client.put(f"/api/tasks/{task['id']}", json={"status": "Done"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Title is required"}

    def test_update_unknown_task(self, client):
        resp = client.put("/api/tasks/999", json={"title": "Essay"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Task not found"}

    def test_delete_unknown_task(self, client):
        resp = client.delete("/api/tasks/999")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Task not found"}

    def test_list_is_scoped_and_ordered(self, client):
        alice = _register(client, "alice")
        bob = _register(client, "bob")
        for title, due in [("B", "2024-06-02"), ("A", "2024-06-01"), ("none", None)]:
            client.post(
                "/api/tasks", json={"title": title, "due_date": due, "user_id": alice["id"]}
            )
        client.post("/api/tasks", json={"title": "bob's", "user_id": bob["id"]})

        titles = [t["title"] for t in client.get("/api/tasks", params={"user_id": alice["id"]}).json()]
        assert titles == ["none", "A", "B"]

    @pytest.mark.parametrize(
        "method, kwargs",
        [("GET", {}), ("PUT", {"json": {"title": "Essay"}}), ("DELETE", {})],
    )
    def test_non_integer_task_id_is_not_found(self, client, method, kwargs):
        resp = client.request(method, "/api/tasks/abc", **kwargs)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Task not found"}

    def test_created_at_survives_reload(self, client):
        alice = _register(client)
        created = client.post("/api/tasks", json={"title": "Essay", "user_id": alice["id"]}).json()
        assert client.get(f"/api/tasks/{created['id']}").json()["created_at"] == created["created_at"]

    def test_storage_failure_is_500(self, client, app):
        alice = _register(client)
        SQLModel.metadata.tables[Task.__tablename__].drop(app.state.engine)
        resp = client.get("/api/tasks", params={"user_id": alice["id"]})
        assert resp.status_code == 500
        assert resp.json()["error"].startswith("Storage error")


class TestAccountEndpoints:
    def test_register_missing_field(self, client):
        resp = client.post("/api/register", json={"username": "alice"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Username and password are required"}

    def test_register_whitespace_username(self, client):
        resp = client.post("/api/register", json={"username": "   ", "password": "pw1"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Username and password are required"}

    def test_register_duplicate(self, client):
        _register(client)
        resp = client.post("/api/register", json={"username": "alice", "password": "x"})
        assert resp.status_code == 409
        assert resp.json() == {"error": "Username already exists"}

    def test_login_missing_field(self, client):
        resp = client.post("/api/login", json={"password": "pw1"})
        assert resp.status_code == 400

    def test_login_unknown_user(self, client):
        resp = client.post("/api/login", json={"username": "nobody", "password": "pw1"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid username or password"}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.json()
