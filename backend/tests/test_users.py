"""Tests for User CRUD and collection endpoints."""
from tests.conftest import create_test_game, create_test_user


class TestUserCRUD:
    """User create / get / update / list."""

    def test_create_user(self, client):
        data = create_test_user(client, name="Alice", tz="Europe/Madrid")
        assert data["name"] == "Alice"
        assert data["email"] == "alice@example.com"
        assert data["default_timezone"] == "Europe/Madrid"
        assert "user_id" in data

    def test_duplicate_email_rejected(self, client):
        create_test_user(client, name="Alice")
        resp = client.post("/api/users/", json={"name": "Other", "email": "alice@example.com"})
        assert resp.status_code == 409

    def test_get_user(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Test User"

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_update_user(self, client):
        user = create_test_user(client)
        resp = client.patch(f"/api/users/{user['user_id']}", json={
            "name": "Updated Name",
            "catalog_username": "meeple42",
        })
        assert resp.status_code == 200
        assert resp.json()["name"] == "Updated Name"
        assert resp.json()["catalog_username"] == "meeple42"

    def test_list_users(self, client):
        create_test_user(client, name="Alice")
        create_test_user(client, name="Bob")
        resp = client.get("/api/users/")
        assert resp.status_code == 200
        names = [u["name"] for u in resp.json()]
        assert "Alice" in names
        assert "Bob" in names


class TestCollection:

    def test_put_and_list_collection(self, client):
        user = create_test_user(client, name="Alice")
        create_test_game(client, 13, name="Catan")
        resp = client.put(f"/api/users/{user['user_id']}/collection/13", json={"user_rating": 8.5, "num_plays": 3})
        assert resp.status_code == 200
        resp = client.put(f"/api/users/{user['user_id']}/collection/13", json={"user_rating": 9})
        assert resp.json()["user_rating"] == 9
        entries = client.get(f"/api/users/{user['user_id']}/collection").json()
        assert len(entries) == 1
        assert entries[0]["num_plays"] == 0

    def test_unknown_game(self, client):
        user = create_test_user(client, name="Alice")
        assert client.put(f"/api/users/{user['user_id']}/collection/99", json={}).status_code == 404

    def test_rating_out_of_range(self, client):
        user = create_test_user(client, name="Alice")
        create_test_game(client, 13)
        resp = client.put(f"/api/users/{user['user_id']}/collection/13", json={"user_rating": 11})
        assert resp.status_code == 422


class TestGames:

    def test_put_game_validates_range(self, client):
        resp = client.put("/api/games/5", json={
            "catalog_id": 5, "name": "Odd", "min_players": 5, "max_players": 2,
        })
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "invalid_player_range"

    def test_get_game(self, client):
        create_test_game(client, 7, name="Azul", min_players=2, max_players=4, rating=7.8)
        data = client.get("/api/games/7").json()
        assert data["name"] == "Azul"
        assert data["catalog_rating"] == 7.8
        assert client.get("/api/games/8").status_code == 404
