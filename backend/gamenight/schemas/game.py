"""Pydantic schemas for catalog games."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class GameIn(BaseModel):
    catalog_id: int
    name: str
    min_players: int = Field(..., ge=1)
    max_players: int = Field(..., ge=1)
    playing_time: int = 0
    catalog_rating: Optional[float] = Field(None, ge=0, le=10)
    thumbnail: Optional[str] = None
    year_published: Optional[int] = None


class GameOut(GameIn):
    model_config = {"from_attributes": True}


class GameSummaryOut(BaseModel):
    catalog_id: int
    name: str
    year_published: Optional[int] = None

    model_config = {"from_attributes": True}


class GameImportRequest(BaseModel):
    catalog_ids: list[int] = Field(..., min_length=1)
