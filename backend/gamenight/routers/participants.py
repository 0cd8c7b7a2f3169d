"""Participant / RSVP API routes."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gamenight.database import get_db
from gamenight.schemas.event import ParticipantOut
from gamenight.schemas.participant import RSVPPayload, InvitationOut
from gamenight.services import rsvp_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{participant_id}/rsvp", response_model=ParticipantOut)
def submit_rsvp(participant_id: str, payload: RSVPPayload, db: Session = Depends(get_db)):
    """Answer an invitation; interested answers carry the full vote set."""
    return rsvp_service.submit_rsvp(
        db=db,
        participant_id=participant_id,
        actor_user_id=payload.actor_user_id,
        interested=payload.interested,
        available_date_ids=payload.available_date_ids,
        game_votes=payload.game_votes,
    )


@router.get("/invite/{token}", response_model=InvitationOut)
def resolve_invitation(token: str, db: Session = Depends(get_db)):
    """Resolve an invite link to its event and participant."""
    participant = rsvp_service.resolve_invitation(db, token)
    return InvitationOut(
        participant_id=participant.participant_id,
        event_id=participant.event_id,
        user_id=participant.user_id,
        status=participant.status,
        event_title=participant.event.title,
    )
