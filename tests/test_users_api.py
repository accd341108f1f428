"""Tests for the user endpoints."""

import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _user(first: str = "Ana", last: str = "Li", email: str = "ana@x.com") -> dict:
    return {"firstName": first, "lastName": last, "email": email}


def _seed(client: TestClient, count: int) -> list[dict]:
    users = []
    for i in range(count):
        response = client.post("/users", json=_user(first=f"User{i}", email=f"user{i}@x.com"))
        assert response.status_code == 201
        users.append(response.json())
    return users


@pytest.mark.unit
def test_user_lifecycle(client: TestClient) -> None:
    """Test create, read, update and delete of a single user."""
    response = client.post("/users", json=_user())
    assert response.status_code == 201
    created = response.json()
    user_id = created["id"]
    assert uuid.UUID(user_id)
    assert created == {"id": user_id, "firstName": "Ana", "lastName": "Li", "email": "ana@x.com"}
    assert response.headers["Location"].endswith(f"/users/{user_id}")

    response = client.get(f"/users/{user_id}")
    assert response.status_code == 200
    assert response.json() == created

    response = client.put(f"/users/{user_id}", json=_user(last="Lee"))
    assert response.status_code == 204

    response = client.get(f"/users/{user_id}")
    assert response.json()["lastName"] == "Lee"

    response = client.delete(f"/users/{user_id}")
    assert response.status_code == 204

    response = client.get(f"/users/{user_id}")
    assert response.status_code == 404
    assert response.json() == {"message": "User not found."}


@pytest.mark.unit
def test_create_invalid_payload_is_400(client: TestClient) -> None:
    response = client.post("/users", json=_user(first="", email="not-an-email"))

    assert response.status_code == 400
    assert response.json()["message"] == "firstName is required.; email is not a valid email address."


@pytest.mark.unit
def test_create_missing_field_is_400(client: TestClient) -> None:
    response = client.post("/users", json={"firstName": "Ana", "lastName": "Li"})

    assert response.status_code == 400
    assert "email" in response.json()["message"]


@pytest.mark.unit
def test_create_malformed_json_is_400(client: TestClient) -> None:
    response = client.post("/users", content=b"{oops", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert "message" in response.json()


@pytest.mark.unit
def test_create_duplicate_email_is_409(client: TestClient) -> None:
    assert client.post("/users", json=_user()).status_code == 201

    response = client.post("/users", json=_user(first="Other", email="ANA@X.com"))

    assert response.status_code == 409
    assert response.json() == {"message": "Email already exists."}


@pytest.mark.unit
def test_get_unknown_or_malformed_id_is_404(client: TestClient) -> None:
    assert client.get(f"/users/{uuid.uuid4()}").status_code == 404
    assert client.get("/users/not-a-uuid").status_code == 404


@pytest.mark.unit
def test_update_errors(client: TestClient) -> None:
    ana, bob = _seed(client, 2)

    response = client.put(f"/users/{uuid.uuid4()}", json=_user(email="new@x.com"))
    assert response.status_code == 404

    response = client.put(f"/users/{bob['id']}", json=_user(email=ana["email"].upper()))
    assert response.status_code == 409
    assert response.json() == {"message": "Email already exists."}

    response = client.put(f"/users/{bob['id']}", json=_user(last="L" * 101))
    assert response.status_code == 400


@pytest.mark.unit
def test_delete_unknown_is_404(client: TestClient) -> None:
    response = client.delete(f"/users/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"message": "User not found."}


@pytest.mark.unit
def test_list_defaults(client: TestClient) -> None:
    _seed(client, 3)

    response = client.get("/users")

    assert response.status_code == 200
    data = response.json()
    assert data["page"] == 1
    assert data["pageSize"] == 50
    assert data["total"] == 3
    assert data["totalPages"] == 1
    assert len(data["items"]) == 3


@pytest.mark.unit
def test_list_empty(client: TestClient) -> None:
    data = client.get("/users").json()

    assert data["total"] == 0
    assert data["totalPages"] == 0
    assert data["items"] == []


@pytest.mark.unit
def test_list_pagination(client: TestClient) -> None:
    users = _seed(client, 10)

    data = client.get("/users", params={"page": 2, "pageSize": 3}).json()

    assert data["total"] == 10
    assert data["totalPages"] == 4
    assert data["items"] == users[3:6]

    last_page = client.get("/users", params={"page": 4, "pageSize": 3}).json()
    assert last_page["items"] == users[9:]

    past_end = client.get("/users", params={"page": 5, "pageSize": 3}).json()
    assert past_end["items"] == []


@pytest.mark.unit
@pytest.mark.parametrize(
    ("params", "status_code"),
    [
        ({"pageSize": 200}, 200),
        ({"pageSize": 201}, 400),
        ({"pageSize": 0}, 400),
        ({"page": 0}, 400),
        ({"page": -1}, 400),
        ({"page": "two"}, 400),
    ],
)
def test_list_bounds(client: TestClient, params: dict, status_code: int) -> None:
    response = client.get("/users", params=params)

    assert response.status_code == status_code
    if status_code == 400:
        assert "message" in response.json()


@pytest.mark.unit
def test_store_unavailable_is_503(client: TestClient, users_file: Path) -> None:
    users_file.parent.mkdir(parents=True, exist_ok=True)
    users_file.write_text("{corrupt", encoding="utf-8")

    assert client.get("/users").status_code == 503
    assert client.get(f"/users/{uuid.uuid4()}").status_code == 503
    assert client.delete(f"/users/{uuid.uuid4()}").status_code == 503
    assert client.put(f"/users/{uuid.uuid4()}", json=_user()).status_code == 503

    response = client.post("/users", json=_user())
    assert response.status_code == 503
    assert response.json() == {"message": "User store unavailable."}


@pytest.mark.unit
def test_write_failure_is_503(client: TestClient, users_file: Path) -> None:
    assert client.get("/users").status_code == 200
    users_file.mkdir(parents=True)

    response = client.post("/users", json=_user())

    assert response.status_code == 503
    assert client.get("/users").json()["total"] == 0


@pytest.mark.unit
def test_write_failure_on_update_and_delete_is_503(client: TestClient, users_file: Path) -> None:
    (user,) = _seed(client, 1)
    # Swap the file for a directory so the next write fails
    users_file.unlink()
    users_file.mkdir()

    response = client.put(f"/users/{user['id']}", json=_user(last="Lee"))
    assert response.status_code == 503
    assert response.json() == {"message": "User store unavailable."}

    assert client.delete(f"/users/{user['id']}").status_code == 503

    # Nothing was committed, so reads still see the original record
    assert client.get(f"/users/{user['id']}").json() == user
