"""Catalog game API routes (local metadata store and catalog import)."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gamenight.database import get_db
from gamenight.models.game import Game
from gamenight.schemas.game import GameIn, GameOut, GameImportRequest, GameSummaryOut
from gamenight.services.catalog_service import (
    CatalogClient, CatalogError, GameDetail, get_catalog_client, import_games, upsert_game,
)
from gamenight.services.errors import not_found, upstream_error, validation_error

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/search", response_model=list[GameSummaryOut])
def search_games(
    q: str = Query(..., min_length=1),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Search the external catalog by name."""
    try:
        return catalog.search_games(q)
    except CatalogError as exc:
        raise upstream_error("catalog_unavailable", str(exc)) from exc


@router.post("/import", response_model=list[GameOut])
def import_catalog_games(
    payload: GameImportRequest,
    db: Session = Depends(get_db),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Fetch games from the external catalog and store them locally."""
    try:
        return import_games(db, catalog, payload.catalog_ids)
    except CatalogError as exc:
        raise upstream_error("catalog_unavailable", str(exc)) from exc


@router.put("/{catalog_id}", response_model=GameOut, status_code=status.HTTP_200_OK)
def put_game(catalog_id: int, payload: GameIn, db: Session = Depends(get_db)):
    """Create or replace a game's catalog metadata."""
    if payload.catalog_id != catalog_id:
        raise validation_error("catalog_id_mismatch", "Path and body catalog ids differ.")
    if payload.min_players > payload.max_players:
        raise validation_error("invalid_player_range", "min_players cannot exceed max_players.")
    game = upsert_game(db, GameDetail(
        catalog_id=payload.catalog_id,
        name=payload.name,
        min_players=payload.min_players,
        max_players=payload.max_players,
        playing_time=payload.playing_time,
        rating=payload.catalog_rating,
        thumbnail=payload.thumbnail,
        year_published=payload.year_published,
    ))
    db.commit()
    db.refresh(game)
    logger.info("Stored catalog game %s (%s)", game.catalog_id, game.name)
    return game


@router.get("/", response_model=list[GameOut])
def list_games(db: Session = Depends(get_db)):
    return db.query(Game).order_by(Game.name).all()


@router.get("/{catalog_id}", response_model=GameOut)
def get_game(catalog_id: int, db: Session = Depends(get_db)):
    game = db.query(Game).filter(Game.catalog_id == catalog_id).first()
    if not game:
        raise not_found("Game")
    return game
