"""Pydantic schemas for Events and their lifecycle commands."""
from __future__ import annotations
from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel

from gamenight.models.event import EventStatus
from gamenight.models.participant import ParticipantStatus


class EventDateIn(BaseModel):
    proposed_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class EventGameIn(BaseModel):
    catalog_id: int
    owner_id: Optional[str] = None
    is_recommended: bool = False


class EventCreate(BaseModel):
    organizer_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    response_deadline: datetime
    dates: list[EventDateIn] = []
    games: list[EventGameIn] = []


class EventDateOut(BaseModel):
    date_id: str
    proposed_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    model_config = {"from_attributes": True}


class EventGameOut(BaseModel):
    event_game_id: str
    catalog_id: int
    proposed_by: str
    owner_id: Optional[str] = None
    is_recommended: bool

    model_config = {"from_attributes": True}


class DateVoteOut(BaseModel):
    date_id: str
    available: bool

    model_config = {"from_attributes": True}


class GameVoteOut(BaseModel):
    event_game_id: str
    vote: int

    model_config = {"from_attributes": True}


class ParticipantOut(BaseModel):
    participant_id: str
    user_id: str
    status: ParticipantStatus
    invited_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    date_votes: list[DateVoteOut] = []
    game_votes: list[GameVoteOut] = []

    model_config = {"from_attributes": True}


class FinalGameOut(BaseModel):
    catalog_id: int
    responsible_user_id: str

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    organizer_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    response_deadline: datetime
    status: EventStatus
    final_date_id: Optional[str] = None
    version: int
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    dates: list[EventDateOut] = []
    games: list[EventGameOut] = []
    participants: list[ParticipantOut] = []
    final_games: list[FinalGameOut] = []

    model_config = {"from_attributes": True}


class InvitationRequest(BaseModel):
    actor_user_id: str
    user_ids: list[str]
    send_email: bool = True


class InvitationResult(BaseModel):
    user_id: str
    invited: bool
    participant_id: Optional[str] = None
    email_sent: bool = False
    reason: Optional[str] = None


class FinalGameSelection(BaseModel):
    event_game_id: str
    responsible_user_id: Optional[str] = None


class EventConfirmRequest(BaseModel):
    actor_user_id: str
    final_date_id: Optional[str] = None
    games: list[FinalGameSelection] = []
    version: Optional[int] = None  # optimistic locking, optional


class EventCancelRequest(BaseModel):
    actor_user_id: str
    cancel_reason: Optional[str] = None
    version: Optional[int] = None


class EventCompleteRequest(BaseModel):
    actor_user_id: str
