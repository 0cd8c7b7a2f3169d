"""Catalog game cache and per-user collection entries."""
import uuid
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gamenight.database import Base


class Game(Base):
    """Metadata for a game in the external catalog, keyed by its catalog id."""

    __tablename__ = "games"

    catalog_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    thumbnail = Column(String(500), nullable=True)
    min_players = Column(Integer, nullable=False, default=1)
    max_players = Column(Integer, nullable=False, default=1)
    playing_time = Column(Integer, nullable=False, default=0)
    catalog_rating = Column(Float, nullable=True)
    year_published = Column(Integer, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class GameCollection(Base):
    __tablename__ = "game_collections"
    __table_args__ = (UniqueConstraint("user_id", "catalog_id", name="uq_collection_user_game"),)

    collection_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    catalog_id = Column(Integer, ForeignKey("games.catalog_id"), nullable=False)
    user_rating = Column(Float, nullable=True)
    own = Column(Boolean, nullable=False, default=True)
    want_to_play = Column(Boolean, nullable=False, default=False)
    num_plays = Column(Integer, nullable=False, default=0)
    last_synced = Column(DateTime(timezone=True), server_default=func.now())

    game = relationship("Game")
