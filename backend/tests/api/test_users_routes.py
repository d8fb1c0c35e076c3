"""User Routes — end-to-end tests of the user mutation pipeline over HTTP.

Invariants under test:
    - emails are stored lower-cased and collide case-insensitively (400 DUPLICATE_KEY)
    - a user may keep their own email on update, but not take another user's
    - deleting a user deletes their tasks
    - stale versions on PUT → 409
"""

from todo_api.models.task import Task
from todo_api.models.user import User


def _user_payload(**overrides) -> dict:
    payload = {
        "name": "Ana Silva",
        "email": "Ana@Example.com",
        "birth_date": "1990-01-31",
        "occupation": "Engineer",
    }
    payload.update(overrides)
    return payload


async def test_email_round_trip_and_case_insensitive_duplicate(client, count_rows):
    created = await client.post("/api/users", json=_user_payload())
    assert created.status_code == 201
    user_id = created.json()["id"]
    assert created.headers["location"].endswith(f"/api/users/{user_id}")

    fetched = await client.get(f"/api/users/{user_id}")
    assert fetched.json()["email"] == "ana@example.com"

    duplicate = await client.post(
        "/api/users", json=_user_payload(name="Ana Again", email="ANA@EXAMPLE.COM"),
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "DUPLICATE_KEY"
    assert await count_rows(User) == 1


async def test_create_user_validation_report(client, count_rows):
    res = await client.post(
        "/api/users", json={"name": "Al", "email": "not-an-email", "occupation": "x" * 101},
    )
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "VALIDATION_FAILED"
    assert set(body["errors"]) == {"name", "email", "occupation"}
    assert await count_rows(User) == 0


async def test_list_users(client, seed_user):
    res = await client.get("/api/users")
    assert res.status_code == 200
    assert [u["email"] for u in res.json()] == ["ana@example.com"]


async def test_get_missing_user_is_404(client):
    res = await client.get("/api/users/77")
    assert res.status_code == 404
    assert res.json()["error"] == "NOT_FOUND"


async def test_list_user_tasks(client, seed_task, seed_user):
    res = await client.get(f"/api/users/{seed_user.id}/tasks")
    assert res.status_code == 200
    assert [t["id"] for t in res.json()] == [seed_task.id]
    assert (await client.get("/api/users/77/tasks")).status_code == 404


async def test_update_user_may_keep_own_email_in_other_case(client, seed_user, fetch_row):
    res = await client.put(
        f"/api/users/{seed_user.id}",
        json=_user_payload(id=seed_user.id, name="Ana Maria Silva", email="ANA@example.com"),
    )
    assert res.status_code == 204
    stored = await fetch_row(User, seed_user.id)
    assert stored.name == "Ana Maria Silva"
    assert stored.email == "ana@example.com"
    assert stored.version == 2


async def test_update_user_cannot_take_another_email(client, seed_user):
    other = await client.post(
        "/api/users", json=_user_payload(name="Bruno Costa", email="bruno@example.com"),
    )
    other_id = other.json()["id"]
    res = await client.put(
        f"/api/users/{other_id}",
        json=_user_payload(id=other_id, name="Bruno Costa", email="Ana@Example.com"),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "DUPLICATE_KEY"


async def test_update_user_id_mismatch(client, seed_user):
    res = await client.put(
        f"/api/users/{seed_user.id}", json=_user_payload(id=seed_user.id + 1),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "IDENTIFIER_MISMATCH"


async def test_update_missing_user_is_404(client):
    res = await client.put("/api/users/88", json=_user_payload(id=88))
    assert res.status_code == 404


async def test_update_user_with_stale_version_conflicts(client, seed_user, fetch_row):
    ok = await client.put(
        f"/api/users/{seed_user.id}",
        json=_user_payload(id=seed_user.id, name="First Writer", version=1),
    )
    stale = await client.put(
        f"/api/users/{seed_user.id}",
        json=_user_payload(id=seed_user.id, name="Second Writer", version=1),
    )
    assert ok.status_code == 204
    assert stale.status_code == 409
    assert "reload" in stale.json()["message"].lower()
    assert (await fetch_row(User, seed_user.id)).name == "First Writer"


async def test_delete_user_cascades_to_tasks(client, seed_task, seed_user, count_rows):
    res = await client.delete(f"/api/users/{seed_user.id}")
    assert res.status_code == 204
    assert await count_rows(User) == 0
    assert await count_rows(Task) == 0
    assert (await client.get(f"/api/tasks/{seed_task.id}")).status_code == 404


async def test_delete_missing_user_is_idempotent_404(client):
    first = await client.delete("/api/users/55")
    second = await client.delete("/api/users/55")
    assert first.status_code == second.status_code == 404
    assert first.json() == second.json()


async def test_out_of_range_user_ids_are_404(client):
    for path in ("/api/users/99999999999999999999", "/api/users/99999999999999999999/tasks"):
        res = await client.get(path)
        assert res.status_code == 404
        assert res.json()["error"] == "NOT_FOUND"
    assert (await client.delete("/api/users/99999999999999999999")).status_code == 404


async def test_update_with_out_of_range_ids_never_reaches_store(client):
    res = await client.put(
        "/api/users/99999999999999999999", json=_user_payload(id=99999999999999999999),
    )
    assert res.status_code == 400
    assert res.json()["errors"] == {"id": ["Invalid ID."]}
