"""Board game catalog boundary: client protocol, TTL cache and local import.

The HTTP client itself lives outside this service; anything implementing
``CatalogClient`` can be plugged in. Caching is a latency optimisation only,
recommendations never depend on it.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from sqlalchemy.orm import Session

from gamenight.config import settings
from gamenight.models.game import Game, GameCollection
from gamenight.models.user import User
from gamenight.services.errors import unavailable

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The catalog could not answer after its own retries were exhausted."""


@dataclass
class GameSummary:
    catalog_id: int
    name: str
    year_published: Optional[int] = None


@dataclass
class GameDetail:
    catalog_id: int
    name: str
    min_players: int
    max_players: int
    playing_time: int = 0
    rating: Optional[float] = None
    thumbnail: Optional[str] = None
    year_published: Optional[int] = None


@dataclass
class CollectionItem:
    catalog_id: int
    name: str
    own: bool = False
    want_to_play: bool = False
    user_rating: Optional[float] = None
    num_plays: int = 0


class CatalogClient(Protocol):
    def search_games(self, query: str) -> list[GameSummary]: ...

    def get_game_details(self, ids: list[int]) -> list[GameDetail]: ...

    def get_user_collection(self, username: str) -> list[CollectionItem]: ...


class TTLCache:
    """Fixed-TTL key/value cache. ``clock`` is injectable for tests."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()


def search_key(query: str) -> str:
    return f"search:{query.strip().lower()}"


def details_key(ids: list[int]) -> str:
    return "games:" + ",".join(str(i) for i in sorted(set(ids)))


def collection_key(username: str) -> str:
    return f"collection:{username.lower()}"


class CachedCatalogClient:
    """Read-through cache in front of a CatalogClient. Failures are never cached."""

    def __init__(self, client: CatalogClient, cache: Optional[TTLCache] = None):
        self.client = client
        self.cache = cache or TTLCache(settings.CATALOG_CACHE_TTL_SECONDS)

    def _cached(self, key: str, fetch: Callable[[], Any]) -> Any:
        hit = self.cache.get(key)
        if hit is not None:
            return hit
        value = fetch()
        self.cache.set(key, value)
        return value

    def search_games(self, query: str) -> list[GameSummary]:
        return self._cached(search_key(query), lambda: self.client.search_games(query))

    def get_game_details(self, ids: list[int]) -> list[GameDetail]:
        if not ids:
            return []
        return self._cached(details_key(ids), lambda: self.client.get_game_details(sorted(set(ids))))

    def get_user_collection(self, username: str) -> list[CollectionItem]:
        return self._cached(collection_key(username), lambda: self.client.get_user_collection(username))


def upsert_game(db: Session, detail: GameDetail) -> Game:
    game = db.query(Game).filter(Game.catalog_id == detail.catalog_id).first()
    if game is None:
        game = Game(catalog_id=detail.catalog_id)
        db.add(game)
    game.name = detail.name
    game.min_players = detail.min_players
    game.max_players = detail.max_players
    game.playing_time = detail.playing_time
    game.catalog_rating = detail.rating
    game.thumbnail = detail.thumbnail
    game.year_published = detail.year_published
    return game


def import_games(db: Session, client: CatalogClient, ids: list[int]) -> list[Game]:
    """Fetch catalog details for ``ids`` and store them locally."""
    details = client.get_game_details(ids)
    games = [upsert_game(db, d) for d in details]
    db.commit()
    logger.info("Imported %d of %d requested catalog games", len(games), len(set(ids)))
    return games


def sync_collection(db: Session, client: CatalogClient, user: User) -> list[GameCollection]:
    """Mirror a user's catalog collection into ``game_collections``.

    Missing game metadata is imported first so every entry can be scored.
    """
    if not user.catalog_username:
        raise CatalogError(f"User {user.user_id} has no catalog username")

    items = client.get_user_collection(user.catalog_username)
    known = {
        cid for (cid,) in db.query(Game.catalog_id).filter(Game.catalog_id.in_([i.catalog_id for i in items]))
    }
    missing = [i.catalog_id for i in items if i.catalog_id not in known]
    if missing:
        for detail in client.get_game_details(missing):
            upsert_game(db, detail)
            known.add(detail.catalog_id)
        db.flush()

    now = datetime.now(timezone.utc)
    entries = []
    for item in items:
        if item.catalog_id not in known:
            logger.warning("Skipping collection item %s: no catalog details", item.catalog_id)
            continue
        entry = (
            db.query(GameCollection)
            .filter(GameCollection.user_id == user.user_id, GameCollection.catalog_id == item.catalog_id)
            .first()
        )
        if entry is None:
            entry = GameCollection(user_id=user.user_id, catalog_id=item.catalog_id)
            db.add(entry)
        entry.own = item.own
        entry.want_to_play = item.want_to_play
        entry.user_rating = item.user_rating
        entry.num_plays = item.num_plays
        entry.last_synced = now
        entries.append(entry)
    db.commit()
    logger.info("Synced %d collection items for user %s", len(entries), user.user_id)
    return entries


_catalog_client: Optional[CatalogClient] = None


def configure_catalog_client(client: Optional[CatalogClient]) -> None:
    """Install the catalog HTTP client used by the API, wrapped in the TTL cache."""
    global _catalog_client
    _catalog_client = CachedCatalogClient(client) if client is not None else None


def get_catalog_client() -> CatalogClient:
    """FastAPI dependency: the configured catalog client, 503 when none is installed."""
    if _catalog_client is None:
        raise unavailable("catalog_not_configured", "No game catalog is configured.")
    return _catalog_client
