"""Tests for the catalog boundary: TTL cache, cached client, local import."""
import pytest

from gamenight.main import app
from gamenight.models.game import Game, GameCollection
from gamenight.models.user import User
from gamenight.services.catalog_service import (
    CachedCatalogClient, CatalogError, CollectionItem, GameDetail, GameSummary, TTLCache,
    collection_key, configure_catalog_client, details_key, get_catalog_client, import_games, search_key,
    sync_collection,
)
from tests.conftest import create_test_user


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeCatalog:
    """In-memory catalog that counts calls."""

    def __init__(self):
        self.calls = []
        self.fail = False
        self.details = {
            1: GameDetail(1, "Catan", 3, 4, 90, 7.1),
            2: GameDetail(2, "Azul", 2, 4, 45, 7.8),
        }
        self.collections = {
            "ana": [
                CollectionItem(1, "Catan", own=True, user_rating=8.0, num_plays=12),
                CollectionItem(2, "Azul", own=False, want_to_play=True),
                CollectionItem(3, "Unlisted"),
            ],
        }

    def search_games(self, query):
        self.calls.append(("search", query))
        if self.fail:
            raise CatalogError("catalog unavailable")
        return [GameSummary(d.catalog_id, d.name) for d in self.details.values() if query.lower() in d.name.lower()]

    def get_game_details(self, ids):
        self.calls.append(("details", tuple(ids)))
        return [self.details[i] for i in ids if i in self.details]

    def get_user_collection(self, username):
        self.calls.append(("collection", username))
        return self.collections.get(username, [])


class TestTTLCache:

    def test_expires_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache(300, clock=clock)
        cache.set("k", [1])
        clock.now = 299
        assert cache.get("k") == [1]
        clock.now = 300
        assert cache.get("k") is None

    def test_keys(self):
        assert search_key("  Catan ") == "search:catan"
        assert details_key([3, 1, 3]) == "games:1,3"
        assert collection_key("Ana") == "collection:ana"


class TestCachedCatalogClient:

    def test_repeated_search_hits_cache(self):
        catalog = FakeCatalog()
        client = CachedCatalogClient(catalog, TTLCache(60, clock=FakeClock()))
        assert [g.name for g in client.search_games("cat")] == ["Catan"]
        client.search_games("CAT")
        assert catalog.calls == [("search", "cat")]

    def test_detail_ids_order_independent(self):
        catalog = FakeCatalog()
        client = CachedCatalogClient(catalog, TTLCache(60, clock=FakeClock()))
        client.get_game_details([2, 1])
        client.get_game_details([1, 2])
        assert catalog.calls == [("details", (1, 2))]

    def test_failures_not_cached(self):
        catalog = FakeCatalog()
        catalog.fail = True
        client = CachedCatalogClient(catalog, TTLCache(60, clock=FakeClock()))
        with pytest.raises(CatalogError):
            client.search_games("azul")
        catalog.fail = False
        assert [g.name for g in client.search_games("azul")] == ["Azul"]

    def test_expired_entries_refetched(self):
        clock = FakeClock()
        catalog = FakeCatalog()
        client = CachedCatalogClient(catalog, TTLCache(60, clock=clock))
        client.get_user_collection("ana")
        clock.now = 61
        client.get_user_collection("ana")
        assert catalog.calls == [("collection", "ana"), ("collection", "ana")]


class TestImport:

    def test_import_games_upserts(self, db):
        catalog = FakeCatalog()
        import_games(db, catalog, [1, 2])
        catalog.details[1] = GameDetail(1, "Catan", 3, 6, 120, 7.3)
        import_games(db, catalog, [1])
        games = {g.catalog_id: g for g in db.query(Game).all()}
        assert set(games) == {1, 2}
        assert games[1].max_players == 6
        assert games[1].catalog_rating == pytest.approx(7.3)

    def test_sync_collection(self, db):
        user = User(name="Ana", email="ana@example.com", catalog_username="ana")
        db.add(user)
        db.commit()
        entries = sync_collection(db, FakeCatalog(), user)
        assert len(entries) == 2
        rows = {r.catalog_id: r for r in db.query(GameCollection).filter(GameCollection.user_id == user.user_id)}
        assert rows[1].user_rating == pytest.approx(8.0)
        assert rows[1].num_plays == 12
        assert rows[2].want_to_play is True
        assert db.query(Game).count() == 2

    def test_sync_requires_username(self, db):
        user = User(name="Bo", email="bo@example.com")
        db.add(user)
        db.commit()
        with pytest.raises(CatalogError):
            sync_collection(db, FakeCatalog(), user)


@pytest.fixture
def fake_catalog():
    catalog = FakeCatalog()
    app.dependency_overrides[get_catalog_client] = lambda: CachedCatalogClient(catalog, TTLCache(60, clock=FakeClock()))
    return catalog


class TestCatalogRoutes:

    def test_search(self, client, fake_catalog):
        resp = client.get("/api/games/search", params={"q": "azul"})
        assert resp.status_code == 200
        assert resp.json() == [{"catalog_id": 2, "name": "Azul", "year_published": None}]

    def test_search_failure_is_bad_gateway(self, client, fake_catalog):
        fake_catalog.fail = True
        resp = client.get("/api/games/search", params={"q": "azul"})
        assert resp.status_code == 502
        assert resp.json()["detail"]["code"] == "catalog_unavailable"

    def test_import(self, client, fake_catalog):
        resp = client.post("/api/games/import", json={"catalog_ids": [1, 2, 99]})
        assert resp.status_code == 200
        assert sorted(g["name"] for g in resp.json()) == ["Azul", "Catan"]
        assert client.get("/api/games/1").json()["max_players"] == 4

    def test_sync_collection(self, client, fake_catalog):
        user = create_test_user(client, name="Ana")
        client.patch(f"/api/users/{user['user_id']}", json={"catalog_username": "ana"})
        resp = client.post(f"/api/users/{user['user_id']}/collection/sync")
        assert resp.status_code == 200, resp.text
        entries = {e["catalog_id"]: e for e in resp.json()}
        assert set(entries) == {1, 2}
        assert entries[1]["user_rating"] == 8.0
        assert len(client.get(f"/api/users/{user['user_id']}/collection").json()) == 2

    def test_sync_requires_username(self, client, fake_catalog):
        user = create_test_user(client, name="Bo")
        resp = client.post(f"/api/users/{user['user_id']}/collection/sync")
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "missing_catalog_username"

    def test_no_catalog_configured(self, client):
        resp = client.post("/api/games/import", json={"catalog_ids": [1]})
        assert resp.status_code == 503
        assert resp.json()["detail"]["code"] == "catalog_not_configured"

    def test_configured_client_is_cached(self, monkeypatch):
        catalog = FakeCatalog()
        monkeypatch.setattr("gamenight.services.catalog_service._catalog_client", None)
        configure_catalog_client(catalog)
        client = get_catalog_client()
        assert isinstance(client, CachedCatalogClient)
        client.search_games("catan")
        client.search_games("catan")
        assert catalog.calls == [("search", "catan")]
