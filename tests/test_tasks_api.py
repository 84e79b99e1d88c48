# tests/test_tasks_api.py
# PURPOSE: verify CRUD, filters, pagination envelope and owner scoping.

from typing import Dict

from conftest import login, register


def _create_task(client, headers, title: str, **fields) -> Dict:
    """Helper: create a task and return response JSON."""
    r = client.post("/tasks", json={"title": title, **fields}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_create_and_get_by_id(client, auth_headers):
    created = _create_task(
        client, auth_headers, "First", description="hello", dueDate="2025-12-31T18:00:00Z"
    )
    tid = created["id"]
    assert created["status"] == "PENDING"  # default status on create
    assert created["priority"] == "MEDIUM"  # default priority on create
    assert created["notificationSent"] is False

    r = client.get(f"/tasks/{tid}", headers=auth_headers)
    assert r.status_code == 200
    got = r.json()
    assert got["id"] == tid
    assert got["title"] == "First"
    assert got["description"] == "hello"
    assert got["dueDate"].startswith("2025-12-31T18:00:00")
    assert got["userId"] == client.get("/auth/me", headers=auth_headers).json()["id"]


def test_create_accepts_snake_case_body(client, auth_headers):
    created = _create_task(client, auth_headers, "Snake", due_date="2025-11-01T10:00:00Z", priority="HIGH")
    assert created["dueDate"].startswith("2025-11-01T10:00:00")
    assert created["priority"] == "HIGH"


def test_create_rejects_blank_title_and_bad_enums(client, auth_headers):
    assert client.post("/tasks", json={"title": "   "}, headers=auth_headers).status_code == 422
    assert client.post("/tasks", json={"title": "x", "status": "DONE"}, headers=auth_headers).status_code == 422
    r = client.post("/tasks", json={"title": "x", "priority": "URGENT"}, headers=auth_headers)
    assert r.status_code == 422
    assert r.json()["error"] == "ValidationError"


def test_pagination_envelope(client, auth_headers):
    for i in range(23):
        _create_task(client, auth_headers, f"Task {i:02d}")

    r = client.get("/tasks?limit=10&page=1", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["meta"] == {"total": 23, "page": 1, "lastPage": 3}
    assert len(body["data"]) == 10

    seen = [t["id"] for t in body["data"]]
    seen += [t["id"] for t in client.get("/tasks?limit=10&page=2", headers=auth_headers).json()["data"]]

    r3 = client.get("/tasks?limit=10&page=3", headers=auth_headers).json()
    assert len(r3["data"]) == 3
    seen += [t["id"] for t in r3["data"]]
    # no row skipped or repeated across pages
    assert len(set(seen)) == 23

    r4 = client.get("/tasks?limit=10&page=4", headers=auth_headers).json()
    assert r4["data"] == []
    assert r4["meta"]["total"] == 23


def test_newest_first_and_defaults(client, auth_headers):
    _create_task(client, auth_headers, "older")
    _create_task(client, auth_headers, "newer")
    body = client.get("/tasks", headers=auth_headers).json()
    assert [t["title"] for t in body["data"]] == ["newer", "older"]
    assert body["meta"] == {"total": 2, "page": 1, "lastPage": 1}


def test_bad_page_values_fall_back_to_defaults(client, auth_headers):
    _create_task(client, auth_headers, "only")
    body = client.get("/tasks?page=0&limit=-5", headers=auth_headers).json()
    assert body["meta"] == {"total": 1, "page": 1, "lastPage": 1}


def test_page_far_past_the_end_is_empty(client, auth_headers):
    _create_task(client, auth_headers, "a")
    _create_task(client, auth_headers, "b")
    huge = 10**20
    r = client.get(f"/tasks?page={huge}", headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["data"] == []
    assert body["meta"] == {"total": 2, "page": huge, "lastPage": 1}


def test_huge_limit_returns_every_row(client, auth_headers):
    for i in range(12):
        _create_task(client, auth_headers, f"Task {i:02d}")

    r = client.get("/tasks?limit=150", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert len(body["data"]) == 12
    assert body["meta"] == {"total": 12, "page": 1, "lastPage": 1}

    r2 = client.get(f"/tasks?limit={10**20}&page=2", headers=auth_headers)
    assert r2.status_code == 200, r2.text
    assert r2.json()["data"] == []
    assert r2.json()["meta"]["lastPage"] == 1


def test_empty_list(client, auth_headers):
    body = client.get("/tasks", headers=auth_headers).json()
    assert body == {"data": [], "meta": {"total": 0, "page": 1, "lastPage": 0}}


def test_filters_are_anded(client, auth_headers):
    _create_task(client, auth_headers, "p-high", status="PENDING", priority="HIGH")
    _create_task(client, auth_headers, "p-low", status="PENDING", priority="LOW")
    _create_task(client, auth_headers, "c-high", status="COMPLETED", priority="HIGH")
    _create_task(client, auth_headers, "ip-high", status="IN_PROGRESS", priority="HIGH")

    r = client.get("/tasks?status=PENDING&priority=HIGH", headers=auth_headers)
    assert r.status_code == 200
    assert [t["title"] for t in r.json()["data"]] == ["p-high"]
    assert r.json()["meta"]["total"] == 1

    r2 = client.get("/tasks?priority=HIGH", headers=auth_headers)
    assert {t["title"] for t in r2.json()["data"]} == {"p-high", "c-high", "ip-high"}


def test_search_is_case_insensitive_over_title_and_description(client, auth_headers):
    _create_task(client, auth_headers, "Deploy Service")
    _create_task(client, auth_headers, "Write docs", description="then DEPLOY them")
    _create_task(client, auth_headers, "Buy milk", description="shopping")

    r = client.get("/tasks?search=deploy", headers=auth_headers)
    assert r.status_code == 200
    titles = {t["title"] for t in r.json()["data"]}
    assert titles == {"Deploy Service", "Write docs"}


def test_search_wildcards_match_literally(client, auth_headers):
    _create_task(client, auth_headers, "100% done")
    _create_task(client, auth_headers, "100 items")
    r = client.get("/tasks", params={"search": "100%"}, headers=auth_headers)
    assert [t["title"] for t in r.json()["data"]] == ["100% done"]


def test_search_matches_surrounding_spaces_verbatim(client, auth_headers):
    _create_task(client, auth_headers, "Sprint review")
    _create_task(client, auth_headers, "review notes")
    r = client.get("/tasks", params={"search": " review"}, headers=auth_headers)
    assert r.status_code == 200
    assert [t["title"] for t in r.json()["data"]] == ["Sprint review"]


def test_invalid_filter_is_rejected_with_field(client, auth_headers):
    r = client.get("/tasks?status=DONE", headers=auth_headers)
    assert r.status_code == 422
    body = r.json()
    assert body["error"].startswith("status")
    assert body["details"][0]["loc"] == ["query", "status"]
    assert body["details"][0]["input"] == "DONE"

    r2 = client.get("/tasks?priority=urgent", headers=auth_headers)
    assert r2.status_code == 422
    assert r2.json()["details"][0]["loc"] == ["query", "priority"]


def test_patch_partial_update(client, auth_headers):
    created = _create_task(client, auth_headers, "Patch me", priority="LOW", dueDate="2025-10-20T12:00:00Z")
    tid = created["id"]

    r = client.patch(f"/tasks/{tid}", json={"status": "COMPLETED"}, headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "COMPLETED"
    # Other fields should be preserved
    assert data["title"] == "Patch me"
    assert data["priority"] == "LOW"
    assert data["dueDate"] is not None

    # explicit null clears optional fields; required ones ignore null
    r2 = client.patch(f"/tasks/{tid}", json={"dueDate": None, "title": None}, headers=auth_headers)
    assert r2.status_code == 200
    assert r2.json()["dueDate"] is None
    assert r2.json()["title"] == "Patch me"


def test_delete_task(client, auth_headers):
    created = _create_task(client, auth_headers, "To remove")
    tid = created["id"]

    r = client.delete(f"/tasks/{tid}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Task deleted successfully"}

    # Further GET should be 404 echoing the id
    r2 = client.get(f"/tasks/{tid}", headers=auth_headers)
    assert r2.status_code == 404
    assert tid in r2.json()["error"]


def test_unknown_id_is_not_found_everywhere(client, auth_headers):
    assert client.get("/tasks/nope", headers=auth_headers).status_code == 404
    assert client.patch("/tasks/nope", json={"title": "x"}, headers=auth_headers).status_code == 404
    r = client.delete("/tasks/nope", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Task with ID nope not found"


def test_owner_scoping(client):
    register(client, email="a@example.com")
    register(client, email="b@example.com", name="Bruno")
    alice = login(client, email="a@example.com")
    bob = login(client, email="b@example.com")

    a_task = _create_task(client, alice, "Alice deploy", status="PENDING", priority="HIGH")
    _create_task(client, bob, "Bob deploy", status="PENDING", priority="HIGH")

    for query in ("", "?search=deploy", "?status=PENDING&priority=HIGH", "?search=Bob"):
        body = client.get(f"/tasks{query}", headers=alice).json()
        assert all(t["title"].startswith("Alice") for t in body["data"])

    # Bob cannot read, change or delete Alice's task
    tid = a_task["id"]
    assert client.get(f"/tasks/{tid}", headers=bob).status_code == 404
    assert client.patch(f"/tasks/{tid}", json={"title": "hijacked"}, headers=bob).status_code == 404
    assert client.delete(f"/tasks/{tid}", headers=bob).status_code == 404
    assert client.get(f"/tasks/{tid}", headers=alice).json()["title"] == "Alice deploy"


def test_tasks_require_bearer_token(client):
    for method, path in [("get", "/tasks"), ("post", "/tasks"), ("get", "/tasks/x"), ("delete", "/tasks/x")]:
        r = getattr(client, method)(path)
        assert r.status_code == 401
        assert r.headers.get("WWW-Authenticate") == "Bearer"
        assert r.json()["error"] == "Could not validate credentials"
