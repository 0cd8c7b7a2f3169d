"""Pydantic schemas for RSVP submissions and invite links."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel

from gamenight.models.participant import ParticipantStatus


class RSVPPayload(BaseModel):
    actor_user_id: str
    interested: bool
    available_date_ids: list[str] = []
    game_votes: dict[str, int] = {}  # event_game_id -> -1, 0 or 1


class InvitationOut(BaseModel):
    participant_id: str
    event_id: str
    user_id: str
    status: ParticipantStatus
    event_title: Optional[str] = None
