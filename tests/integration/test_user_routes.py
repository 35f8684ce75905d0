"""Integration tests for user API endpoints."""

from fastapi.testclient import TestClient

from src.core.user_store import InMemoryUserStore


def authenticate(client: TestClient, **body) -> dict:
    response = client.post("/api/users/auth", json=body)
    assert response.status_code == 200, response.text
    return response.json()


class TestAuthenticate:
    """Tests for POST /api/users/auth endpoint."""

    def test_creates_user(self, client: TestClient, user_store: InMemoryUserStore) -> None:
        data = authenticate(client, pubkey="PKEY1", address="PKEY1", name="Bob")

        assert data["name"] == "Bob"
        assert data["isProfileComplete"] is True
        assert data["avatarUri"] is None
        assert set(data) == {
            "id",
            "pubkey",
            "address",
            "name",
            "avatarUri",
            "isProfileComplete",
            "createdAt",
            "updatedAt",
        }
        assert len(user_store) == 1

    def test_second_login_returns_same_user(self, client: TestClient) -> None:
        first = authenticate(client, pubkey="PKEY1", address="PKEY1", name="Bob")
        second = authenticate(client, pubkey="PKEY1", address="PKEY1", name="Bob")

        assert second == first

    def test_missing_address_returns_400(self, client: TestClient) -> None:
        response = client.post("/api/users/auth", json={"pubkey": "PKEY1"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_input"
        assert body["message"] == "pubkey and address are required"


class TestGetUser:
    """Tests for the user lookup endpoints."""

    def test_get_by_id(self, client: TestClient) -> None:
        created = authenticate(client, pubkey="PKEY2", address="ADDR2")

        response = client.get(f"/api/users/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_by_id_not_found(self, client: TestClient) -> None:
        response = client.get("/api/users/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_get_by_address_matches_pubkey(self, client: TestClient) -> None:
        created = authenticate(client, pubkey="PKEY3", address="ADDR3")

        by_address = client.get("/api/users/by-address/ADDR3")
        by_pubkey = client.get("/api/users/by-address/PKEY3")

        assert by_address.json()["id"] == created["id"]
        assert by_pubkey.json()["id"] == created["id"]

    def test_get_by_address_not_found(self, client: TestClient) -> None:
        response = client.get("/api/users/by-address/UNKNOWN")

        assert response.status_code == 404

    def test_list_users(self, client: TestClient) -> None:
        authenticate(client, pubkey="A", address="A")
        authenticate(client, pubkey="B", address="B")

        response = client.get("/api/users")

        assert response.status_code == 200
        assert {user["pubkey"] for user in response.json()} == {"A", "B"}


class TestUpdateProfile:
    """Tests for PATCH /api/users/{user_id} endpoint."""

    def test_updates_avatar_only(self, client: TestClient) -> None:
        created = authenticate(client, pubkey="PKEY4", address="ADDR4", name="Carol")

        response = client.patch(
            f"/api/users/{created['id']}",
            json={"avatarUri": "https://img.test/carol.png"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Carol"
        assert data["avatarUri"] == "https://img.test/carol.png"
        assert data["isProfileComplete"] is True
        assert data["createdAt"] == created["createdAt"]

    def test_name_completes_profile(self, client: TestClient) -> None:
        created = authenticate(client, pubkey="PKEY5", address="ADDR5")
        assert created["isProfileComplete"] is False

        response = client.patch(f"/api/users/{created['id']}", json={"name": "Dave"})

        assert response.json()["isProfileComplete"] is True
        assert client.get(f"/api/users/{created['id']}").json()["name"] == "Dave"

    def test_empty_body_returns_400(self, client: TestClient) -> None:
        created = authenticate(client, pubkey="PKEY6", address="ADDR6")

        response = client.patch(f"/api/users/{created['id']}", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "no_fields_provided"
        assert client.get(f"/api/users/{created['id']}").json() == created

    def test_missing_body_returns_400(self, client: TestClient) -> None:
        """Test that a PATCH without a body is treated like an empty one."""
        created = authenticate(client, pubkey="PKEY7", address="ADDR7")

        response = client.patch(f"/api/users/{created['id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "no_fields_provided"
        assert client.get(f"/api/users/{created['id']}").json() == created

    def test_missing_body_unknown_user_returns_404(self, client: TestClient) -> None:
        response = client.patch("/api/users/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_unknown_user_returns_404(self, client: TestClient) -> None:
        response = client.patch("/api/users/missing", json={"name": "Eve"})

        assert response.status_code == 404
