from taskhub.models.task import Task, TaskStatus

from conftest import auth_headers, task_payload


def test_create_task_returns_full_task(client, register):
    token = register("alice")
    r = client.post("/add_task", json=task_payload(), headers=auth_headers(token))
    assert r.status_code == 201
    task = r.json()
    assert task["name"] == "Write report"
    assert task["status"] == "pending"
    assert task["priority"] == "medium"
    assert task["category"] == "work"
    assert task["is_shared"] is False
    assert task["owner_username"] == "alice"
    assert task["is_owner"] is True
    assert task["end_date"] == "2024-01-01"
    assert task["end_time"] == "10:00:00"


def test_create_task_defaults(client, register):
    token = register("alice")
    payload = task_payload()
    for key in ("status", "priority", "category", "description"):
        payload.pop(key)
    r = client.post("/add_task", json=payload, headers=auth_headers(token))
    assert r.status_code == 201
    assert r.json()["status"] == "pending"
    assert r.json()["priority"] == "medium"
    assert r.json()["category"] is None


def test_create_task_requires_token(client):
    r = client.post("/add_task", json=task_payload())
    assert r.status_code == 401


def test_create_task_rejects_end_before_start(client, register):
    token = register("alice")
    r = client.post("/add_task", json=task_payload(end_time="07:00"), headers=auth_headers(token))
    assert r.status_code == 400
    r = client.post("/add_task", json=task_payload(end_time="08:00"), headers=auth_headers(token))
    assert r.status_code == 400


def test_create_task_rejects_invalid_status(client, register):
    token = register("alice")
    r = client.post("/add_task", json=task_payload(status="done"), headers=auth_headers(token))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid status value"


def test_create_task_rejects_unknown_fields_and_empty_name(client, register):
    token = register("alice")
    assert client.post("/add_task", json=task_payload(owner_id=99), headers=auth_headers(token)).status_code == 400
    assert client.post("/add_task", json=task_payload(name="   "), headers=auth_headers(token)).status_code == 400
    assert client.post("/add_task", json={}, headers=auth_headers(token)).status_code == 400


def test_list_contains_own_and_shared_tasks(client, register, create_task):
    alice = register("alice")
    bob = register("bob")
    private = create_task(alice, name="private")
    shared = create_task(alice, name="shared")
    own = create_task(bob, name="bob's")
    client.put(f"/tasks/{shared['id']}/share", json={"is_shared": True}, headers=auth_headers(alice))

    r = client.get("/tasks", headers=auth_headers(bob))
    assert r.status_code == 200
    by_id = {t["id"]: t for t in r.json()}
    assert set(by_id) == {shared["id"], own["id"]}
    assert private["id"] not in by_id
    assert by_id[shared["id"]]["owner_username"] == "alice"
    assert by_id[shared["id"]]["is_owner"] is False
    assert by_id[own["id"]]["is_owner"] is True


def test_shared_task_visible_to_every_user(client, register, create_task):
    alice = register("alice")
    task = create_task(alice)
    client.put(f"/tasks/{task['id']}/share", json={"is_shared": True}, headers=auth_headers(alice))

    for name in ("bob", "carol"):
        token = register(name)
        ids = [t["id"] for t in client.get("/tasks", headers=auth_headers(token)).json()]
        assert task["id"] in ids


def test_list_filters_and_pagination(client, register, create_task):
    token = register("alice")
    for i in range(3):
        create_task(token, name=f"report {i}")
    create_task(token, name="groceries", status="completed")

    r = client.get("/tasks?status=completed", headers=auth_headers(token))
    assert [t["name"] for t in r.json()] == ["groceries"]

    r = client.get("/tasks?q=report", headers=auth_headers(token))
    assert len(r.json()) == 3

    r = client.get("/tasks?page=2&limit=3", headers=auth_headers(token))
    page = r.json()
    assert page["total"] == 4
    assert page["pages"] == 2
    assert len(page["items"]) == 1

    assert client.get("/tasks?status=bogus", headers=auth_headers(token)).status_code == 400


def test_get_single_task_respects_visibility(client, register, create_task):
    alice = register("alice")
    bob = register("bob")
    task = create_task(alice)

    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(alice)).status_code == 200
    hidden = client.get(f"/tasks/{task['id']}", headers=auth_headers(bob))
    missing = client.get("/tasks/9999", headers=auth_headers(bob))
    assert hidden.status_code == missing.status_code == 404
    assert hidden.json() == missing.json()

    client.put(f"/tasks/{task['id']}/share", json={"is_shared": True}, headers=auth_headers(alice))
    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(bob)).status_code == 200


def test_owner_can_edit_task(client, register, create_task):
    token = register("alice")
    task = create_task(token)
    r = client.put(
        f"/tasks/{task['id']}",
        json=task_payload(name="Write final report", priority="high", status="in-progress", category=""),
        headers=auth_headers(token),
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["name"] == "Write final report"
    assert updated["priority"] == "high"
    assert updated["status"] == "in-progress"
    assert updated["category"] is None


def test_edit_rejects_invalid_schedule_and_leaves_task(client, register, create_task, db):
    token = register("alice")
    task = create_task(token)
    r = client.put(f"/tasks/{task['id']}", json=task_payload(name="changed", end_date="2023-12-31"), headers=auth_headers(token))
    assert r.status_code == 400
    assert db.get(Task, task["id"]).name == "Write report"


def test_non_owner_cannot_mutate_task(client, register, create_task, db):
    alice = register("alice")
    bob = register("bob")
    task = create_task(alice)
    headers = auth_headers(bob)

    attempts = [
        client.put(f"/tasks/{task['id']}", json=task_payload(name="hijacked"), headers=headers),
        client.put(f"/tasks/{task['id']}/status", json={"status": "completed"}, headers=headers),
        client.put(f"/tasks/{task['id']}/share", json={"is_shared": True}, headers=headers),
        client.delete(f"/tasks/{task['id']}", headers=headers),
    ]
    for r in attempts:
        assert r.status_code == 404
        assert r.json()["detail"] == "Task not found or not authorized"

    stored = db.get(Task, task["id"])
    assert stored.name == "Write report"
    assert stored.status == TaskStatus.PENDING
    assert stored.is_shared is False


def test_shared_task_still_only_mutable_by_owner(client, register, create_task, db):
    alice = register("alice")
    bob = register("bob")
    task = create_task(alice)
    client.put(f"/tasks/{task['id']}/share", json={"is_shared": True}, headers=auth_headers(alice))

    r = client.put(f"/tasks/{task['id']}/status", json={"status": "completed"}, headers=auth_headers(bob))
    assert r.status_code == 404
    r = client.delete(f"/tasks/{task['id']}", headers=auth_headers(bob))
    assert r.status_code == 404
    assert db.get(Task, task["id"]).status == TaskStatus.PENDING


def test_status_update_validates_enum(client, register, create_task):
    token = register("alice")
    task = create_task(token)

    r = client.put(f"/tasks/{task['id']}/status", json={"status": "archived"}, headers=auth_headers(token))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid status value"

    r = client.put(f"/tasks/{task['id']}/status", json={"status": "in-progress"}, headers=auth_headers(token))
    assert r.status_code == 200
    assert r.json()["status"] == "in-progress"


def test_status_change_keeps_stored_priority(client, register, create_task):
    """Stored priority is authoritative; the status-based mapping only shows up as derived_priority."""
    token = register("alice")
    task = create_task(token, priority="low")
    assert task["derived_priority"] == "low"

    r = client.put(f"/tasks/{task['id']}/status", json={"status": "completed"}, headers=auth_headers(token))
    body = r.json()
    assert body["priority"] == "low"
    assert body["derived_priority"] == "high"

    r = client.put(f"/tasks/{task['id']}/status", json={"status": "in-progress"}, headers=auth_headers(token))
    assert r.json()["priority"] == "low"
    assert r.json()["derived_priority"] == "medium"


def test_share_toggle_round_trip(client, register, create_task):
    token = register("alice")
    task = create_task(token)
    r = client.put(f"/tasks/{task['id']}/share", json={"is_shared": True}, headers=auth_headers(token))
    assert r.json()["is_shared"] is True
    r = client.put(f"/tasks/{task['id']}/share", json={"is_shared": False}, headers=auth_headers(token))
    assert r.json()["is_shared"] is False
    r = client.put(f"/tasks/{task['id']}/share", json={"is_shared": "maybe"}, headers=auth_headers(token))
    assert r.status_code == 400


def test_owner_deletes_task(client, register, create_task):
    token = register("alice")
    task = create_task(token)
    r = client.delete(f"/tasks/{task['id']}", headers=auth_headers(token))
    assert r.status_code == 200
    assert client.get("/tasks", headers=auth_headers(token)).json() == []
    assert client.delete(f"/tasks/{task['id']}", headers=auth_headers(token)).status_code == 404


def test_stats_count_visible_tasks(client, register, create_task):
    alice = register("alice")
    bob = register("bob")
    create_task(alice, status="pending", priority="high")
    create_task(alice, status="in-progress")
    create_task(alice, status="completed")
    shared = create_task(bob, status="overdue", priority="high")
    create_task(bob, status="pending")
    client.put(f"/tasks/{shared['id']}/share", json={"is_shared": True}, headers=auth_headers(bob))

    r = client.get("/tasks/stats", headers=auth_headers(alice))
    assert r.status_code == 200
    assert r.json() == {
        "total": 4,
        "pending": 1,
        "in_progress": 1,
        "completed": 1,
        "overdue": 1,
        "high_priority": 2,
    }


def test_edit_is_full_replace(client, register, create_task):
    token = register("alice")
    task = create_task(token, status="in-progress", priority="high")
    payload = task_payload(name="Rewritten")
    payload.pop("status")
    payload.pop("priority")

    r = client.put(f"/tasks/{task['id']}", json=payload, headers=auth_headers(token))
    assert r.status_code == 200
    assert r.json()["status"] == "pending"
    assert r.json()["priority"] == "medium"
