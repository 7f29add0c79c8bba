"""Tests for the HTTP endpoints."""

from errors import InternalError
from repository import TaskRepository


def _create_task(client, headers, title="t1", description="d1"):
    response = client.post("/tasks", json={"title": title, "description": description}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestAuth:
    def test_signup(self, client):
        response = client.post("/auth/signup", json={"username": "alice", "password": "pw1"})
        assert response.status_code == 201
        data = response.json()
        assert data["username"] == "alice"
        assert "password" not in data and "password_hash" not in data

    def test_signup_duplicate(self, client):
        client.post("/auth/signup", json={"username": "alice", "password": "pw1"})
        response = client.post("/auth/signup", json={"username": "alice", "password": "pw2"})
        assert response.status_code == 409

    def test_signup_missing_password(self, client):
        response = client.post("/auth/signup", json={"username": "alice"})
        assert response.status_code == 400

    def test_signup_password_with_nul(self, client):
        response = client.post("/auth/signup", json={"username": "nul", "password": "a\u0000b"})
        assert response.status_code == 400
        assert client.post("/auth/login", json={"username": "nul", "password": "ab"}).status_code == 401

    def test_login_success(self, client, user):
        response = client.post("/auth/login", json={"username": "alice", "password": "pw1"})
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["token_type"] == "bearer"

    def test_login_documents_token_field(self, client):
        schema = client.get("/openapi.json").json()
        token = schema["components"]["schemas"]["Token"]
        assert "description" in token["properties"]["access_token"]

    def test_login_wrong_password(self, client, user):
        response = client.post("/auth/login", json={"username": "alice", "password": "wrong"})
        assert response.status_code == 401

    def test_login_unknown_user_looks_the_same(self, client, user):
        wrong_password = client.post("/auth/login", json={"username": "alice", "password": "wrong"})
        unknown_user = client.post("/auth/login", json={"username": "nobody", "password": "pw1"})
        assert unknown_user.status_code == 401
        assert unknown_user.json() == wrong_password.json()


class TestAuthRequired:
    def test_no_token(self, client):
        assert client.get("/tasks").status_code == 401

    def test_bad_token(self, client):
        response = client.get("/tasks", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_token_for_missing_user(self, client, token_service):
        headers = {"Authorization": f"Bearer {token_service.issue('ghost')}"}
        assert client.get("/tasks", headers=headers).status_code == 401


class TestTasks:
    def test_create(self, client, auth_headers, user):
        task = _create_task(client, auth_headers)
        assert task["status"] == "OPEN"
        assert task["owner_id"] == user.id

    def test_create_empty_title(self, client, auth_headers):
        response = client.post("/tasks", json={"title": "", "description": "d"}, headers=auth_headers)
        assert response.status_code == 400

    def test_get_by_id(self, client, auth_headers):
        task = _create_task(client, auth_headers)
        response = client.get(f"/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == task

    def test_get_missing(self, client, auth_headers):
        assert client.get("/tasks/999", headers=auth_headers).status_code == 404

    def test_non_integer_id(self, client, auth_headers):
        assert client.get("/tasks/abc", headers=auth_headers).status_code == 400

    def test_id_out_of_range(self, client, auth_headers):
        huge = 99999999999999999999999
        assert client.get(f"/tasks/{huge}", headers=auth_headers).status_code == 400
        assert client.get("/tasks/0", headers=auth_headers).status_code == 400
        response = client.patch(f"/tasks/{huge}/status", json={"status": "DONE"}, headers=auth_headers)
        assert response.status_code == 400
        assert client.delete(f"/tasks/{huge}", headers=auth_headers).status_code == 400

    def test_largest_id_is_not_found(self, client, auth_headers):
        assert client.get(f"/tasks/{2**31 - 1}", headers=auth_headers).status_code == 404

    def test_other_users_task_is_not_found(self, client, auth_headers, other_auth_headers):
        task = _create_task(client, auth_headers)
        url = f"/tasks/{task['id']}"

        assert client.get(url, headers=other_auth_headers).status_code == 404
        assert client.patch(f"{url}/status", json={"status": "DONE"}, headers=other_auth_headers).status_code == 404
        assert client.delete(url, headers=other_auth_headers).status_code == 404
        assert client.get(url, headers=auth_headers).json()["status"] == "OPEN"

    def test_list_only_own(self, client, auth_headers, other_auth_headers):
        mine = _create_task(client, auth_headers)
        _create_task(client, other_auth_headers, title="theirs")
        response = client.get("/tasks", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == [mine]

    def test_list_search(self, client, auth_headers):
        match = _create_task(client, auth_headers, title="Write ABC notes")
        _create_task(client, auth_headers, title="other", description="nothing")
        response = client.get("/tasks", params={"search": "abc"}, headers=auth_headers)
        assert [t["id"] for t in response.json()] == [match["id"]]

    def test_list_invalid_status(self, client, auth_headers):
        response = client.get("/tasks", params={"status": "FINISHED"}, headers=auth_headers)
        assert response.status_code == 400

    def test_update_invalid_status(self, client, auth_headers):
        task = _create_task(client, auth_headers)
        response = client.patch(f"/tasks/{task['id']}/status", json={"status": "FINISHED"}, headers=auth_headers)
        assert response.status_code == 400

    def test_delete_missing(self, client, auth_headers):
        assert client.delete("/tasks/999", headers=auth_headers).status_code == 404

    def test_storage_failure_is_500(self, client, auth_headers, monkeypatch):
        def broken(self, *args, **kwargs):
            raise InternalError()

        monkeypatch.setattr(TaskRepository, "search", broken)
        response = client.get("/tasks", headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}


def test_full_scenario(client):
    assert client.post("/auth/signup", json={"username": "alice", "password": "pw1"}).status_code == 201
    assert client.post("/auth/signup", json={"username": "alice", "password": "pw2"}).status_code == 409

    login = client.post("/auth/login", json={"username": "alice", "password": "pw1"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    created = client.post("/tasks", json={"title": "t1", "description": "d1"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["status"] == "OPEN"
    task_id = created.json()["id"]

    updated = client.patch(f"/tasks/{task_id}/status", json={"status": "DONE"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["status"] == "DONE"

    done = client.get("/tasks", params={"status": "DONE"}, headers=headers)
    assert [t["id"] for t in done.json()] == [task_id]
    assert client.get("/tasks", params={"status": "OPEN"}, headers=headers).json() == []

    deleted = client.delete(f"/tasks/{task_id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/tasks/{task_id}", headers=headers).status_code == 404
