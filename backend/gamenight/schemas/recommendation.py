"""Pydantic schemas for ranked dates and games."""
from __future__ import annotations
from datetime import date, time
from typing import Optional
from pydantic import BaseModel


class DateRecommendationOut(BaseModel):
    date_id: str
    proposed_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    available_count: int
    percentage: int

    model_config = {"from_attributes": True}


class GameCandidateOut(BaseModel):
    event_game_id: str
    catalog_id: int
    name: str
    min_players: int
    max_players: int
    playing_time: int
    catalog_rating: Optional[float] = None
    thumbnail: Optional[str] = None
    owner_id: Optional[str] = None
    is_recommended: bool
    votes: int

    model_config = {"from_attributes": True}


class GameRecommendationOut(BaseModel):
    candidate: GameCandidateOut
    score: float
    reasons: list[str]

    model_config = {"from_attributes": True}


class OrganizerSummaryOut(BaseModel):
    event_id: str
    status: str
    total_participants: int
    responded_count: int
    interested_count: int
    player_count: int
    dates: list[DateRecommendationOut]
    games: list[GameRecommendationOut]


class VoteTalliesOut(BaseModel):
    event_id: str
    date_counts: dict[str, int]
    game_counts: dict[str, int]
    interested_count: int
