from datetime import datetime

from fastapi.testclient import TestClient


def create(client: TestClient, text: str, **extra) -> dict:
    response = client.post("/api/tasks", json={"text": text, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_create_task_defaults(client: TestClient) -> None:
    task = create(client, "  buy milk  ")

    assert task["text"] == "buy milk"
    assert task["completed"] is False
    assert task["priority"] == "medium"
    assert task["id"]
    assert task["createdAt"] == task["updatedAt"]


def test_create_task_with_priority(client: TestClient) -> None:
    task = create(client, "file taxes", priority="high")
    assert task["priority"] == "high"


def test_create_rejects_blank_text(client: TestClient) -> None:
    for body in ({"text": ""}, {"text": "   \t"}, {}, {"priority": "low"}):
        response = client.post("/api/tasks", json=body)
        assert response.status_code == 400, body
        assert response.json()["message"]

    assert client.get("/api/tasks").json() == []


def test_create_rejects_unknown_priority(client: TestClient) -> None:
    response = client.post("/api/tasks", json={"text": "x", "priority": "urgent"})
    assert response.status_code == 400
    assert client.get("/api/stats").json()["total"] == 0


def test_get_task(client: TestClient) -> None:
    task = create(client, "read book")

    response = client.get(f"/api/tasks/{task['id']}")
    assert response.status_code == 200
    assert response.json() == task

    missing = client.get("/api/tasks/does-not-exist")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Task not found"


def test_list_filters_and_orders_newest_first(client: TestClient) -> None:
    first = create(client, "first")
    second = create(client, "second")
    third = create(client, "third")
    client.put(f"/api/tasks/{second['id']}", json={"completed": True})

    all_ids = [t["id"] for t in client.get("/api/tasks").json()]
    assert all_ids == [third["id"], second["id"], first["id"]]

    active = client.get("/api/tasks", params={"filter": "active"}).json()
    assert [t["id"] for t in active] == [third["id"], first["id"]]
    assert all(not t["completed"] for t in active)

    completed = client.get("/api/tasks", params={"filter": "completed"}).json()
    assert [t["id"] for t in completed] == [second["id"]]

    # Unknown filters mean no restriction
    assert len(client.get("/api/tasks", params={"filter": "all"}).json()) == 3
    assert len(client.get("/api/tasks", params={"filter": "bogus"}).json()) == 3


def test_update_completed_only_touches_completed(client: TestClient) -> None:
    task = create(client, "water plants", priority="low")

    response = client.put(f"/api/tasks/{task['id']}", json={"completed": True})
    assert response.status_code == 200
    updated = response.json()

    assert updated["completed"] is True
    assert updated["text"] == "water plants"
    assert updated["priority"] == "low"
    assert updated["createdAt"] == task["createdAt"]
    assert parse_ts(updated["updatedAt"]) > parse_ts(task["updatedAt"])


def test_update_with_empty_body_still_refreshes_updated_at(client: TestClient) -> None:
    task = create(client, "stretch")

    updated = client.put(f"/api/tasks/{task['id']}", json={}).json()
    assert updated["text"] == "stretch"
    assert parse_ts(updated["updatedAt"]) > parse_ts(task["updatedAt"])


def test_update_text_and_priority(client: TestClient) -> None:
    task = create(client, "call mom")

    updated = client.put(f"/api/tasks/{task['id']}", json={"text": "call mom tonight", "priority": "high"}).json()
    assert updated["text"] == "call mom tonight"
    assert updated["priority"] == "high"
    assert updated["completed"] is False

    bad = client.put(f"/api/tasks/{task['id']}", json={"priority": "someday"})
    assert bad.status_code == 400


def test_update_rejects_non_boolean_completed(client: TestClient) -> None:
    task = create(client, "sort mail")

    for value in ("yes", 1, "on"):
        response = client.put(f"/api/tasks/{task['id']}", json={"completed": value})
        assert response.status_code == 400, value

    assert client.get(f"/api/tasks/{task['id']}").json() == task


def test_update_missing_task(client: TestClient) -> None:
    response = client.put("/api/tasks/nope", json={"completed": True})
    assert response.status_code == 404


def test_delete_task(client: TestClient) -> None:
    task = create(client, "take out trash")

    response = client.delete(f"/api/tasks/{task['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["message"]
    assert body["task"] == task

    assert client.get(f"/api/tasks/{task['id']}").status_code == 404


def test_delete_missing_task_leaves_collection(client: TestClient) -> None:
    create(client, "one")
    create(client, "two")

    response = client.delete("/api/tasks/not-a-real-id")
    assert response.status_code == 404
    assert len(client.get("/api/tasks").json()) == 2


def test_clear_completed_removes_only_completed(client: TestClient) -> None:
    keep = create(client, "keep me")
    done_a = create(client, "done a")
    done_b = create(client, "done b")
    client.put(f"/api/tasks/{done_a['id']}", json={"completed": True})
    client.put(f"/api/tasks/{done_b['id']}", json={"completed": True})

    response = client.delete("/api/tasks")
    assert response.status_code == 200
    assert response.json()["deletedCount"] == 2

    remaining = client.get("/api/tasks").json()
    assert remaining == [keep]

    again = client.delete("/api/tasks")
    assert again.status_code == 200
    assert again.json()["deletedCount"] == 0


def test_stats(client: TestClient) -> None:
    assert client.get("/api/stats").json() == {"total": 0, "completed": 0, "active": 0}

    a = create(client, "a")
    create(client, "b")
    create(client, "c")
    client.put(f"/api/tasks/{a['id']}", json={"completed": True})

    stats = client.get("/api/stats").json()
    assert stats == {"total": 3, "completed": 1, "active": 2}
    assert stats["active"] + stats["completed"] == stats["total"]


def test_buy_milk_walkthrough(client: TestClient) -> None:
    task = create(client, "buy milk")
    assert task["completed"] is False and task["priority"] == "medium"

    active_ids = [t["id"] for t in client.get("/api/tasks?filter=active").json()]
    assert task["id"] in active_ids

    client.put(f"/api/tasks/{task['id']}", json={"completed": True})
    assert task["id"] in [t["id"] for t in client.get("/api/tasks?filter=completed").json()]
    assert task["id"] not in [t["id"] for t in client.get("/api/tasks?filter=active").json()]

    client.delete("/api/tasks")
    assert client.get("/api/stats").json()["completed"] == 0


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["uptime"] >= 0
    assert parse_ts(body["timestamp"])


def test_unknown_route(client: TestClient) -> None:
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"message": "API endpoint not found"}

    for method, path in (("POST", "/api/stats"), ("PATCH", "/api/tasks/abc"), ("PUT", "/api/tasks")):
        response = client.request(method, path, json={})
        assert response.status_code == 404, (method, path)
        assert response.json() == {"message": "API endpoint not found"}


def test_store_unavailable(broken_client: TestClient) -> None:
    response = broken_client.get("/api/tasks")
    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Task store unavailable"
    assert body["error"]

    assert broken_client.post("/api/tasks", json={"text": "x"}).status_code == 500
    assert broken_client.get("/api/stats").status_code == 500

    # Health never touches the store
    assert broken_client.get("/api/health").status_code == 200
