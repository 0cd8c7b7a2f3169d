"""Event API routes — delegates to event_service for lifecycle enforcement."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gamenight.database import get_db
from gamenight.models.event import Event, EventStatus
from gamenight.schemas.event import (
    EventCreate, EventOut, InvitationRequest, InvitationResult,
    EventConfirmRequest, EventCancelRequest, EventCompleteRequest,
)
from gamenight.schemas.recommendation import GameRecommendationOut, OrganizerSummaryOut, VoteTalliesOut
from gamenight.services import event_service, rsvp_service
from gamenight.services.errors import not_found
from gamenight.services.notification_service import Notifier, get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, db: Session = Depends(get_db)):
    """Create a draft event with candidate dates and games."""
    return event_service.create_event(
        db=db,
        organizer_id=payload.organizer_id,
        title=payload.title,
        response_deadline=payload.response_deadline,
        dates=[d.model_dump() for d in payload.dates],
        games=[g.model_dump() for g in payload.games],
        description=payload.description,
        location=payload.location,
        notes=payload.notes,
    )


@router.get("/", response_model=list[EventOut])
def list_events(
    organizer_id: Optional[str] = Query(None),
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """List events with optional filters."""
    query = db.query(Event)
    if organizer_id:
        query = query.filter(Event.organizer_id == organizer_id)
    if status_filter:
        query = query.filter(Event.status == status_filter)
    return query.order_by(Event.created_at.desc()).all()


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event with dates, games, participants and votes."""
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise not_found("Event")
    return event


@router.post("/{event_id}/invitations", response_model=list[InvitationResult])
def send_invitations(
    event_id: str,
    payload: InvitationRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Invite users (organizer only). The first invitation publishes a draft event."""
    return event_service.send_invitations(
        db=db,
        event_id=event_id,
        actor_user_id=payload.actor_user_id,
        user_ids=payload.user_ids,
        notifier=notifier,
        send_email=payload.send_email,
    )


@router.get("/{event_id}/summary", response_model=OrganizerSummaryOut)
def organizer_summary(
    event_id: str,
    actor_user_id: str = Query(..., description="ID of the organizer"),
    player_count: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    """Ranked dates and games for the organizer."""
    return event_service.get_organizer_summary(db, event_id, actor_user_id, player_count)


@router.get("/{event_id}/tallies", response_model=VoteTalliesOut)
def vote_tallies(
    event_id: str,
    actor_user_id: str = Query(..., description="ID of the organizer or an invited user"),
    db: Session = Depends(get_db),
):
    """Current vote counts per date and game."""
    return rsvp_service.get_vote_tallies(db, event_id, actor_user_id)


@router.post("/{event_id}/confirm", response_model=EventOut)
def confirm_event(
    event_id: str,
    payload: EventConfirmRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Confirm final date, games and who brings them (organizer only)."""
    return event_service.confirm_event(
        db=db,
        event_id=event_id,
        actor_user_id=payload.actor_user_id,
        final_date_id=payload.final_date_id,
        selections=[g.model_dump() for g in payload.games],
        notifier=notifier,
        version=payload.version,
    )


@router.post("/{event_id}/cancel", response_model=EventOut)
def cancel_event(event_id: str, payload: EventCancelRequest, db: Session = Depends(get_db)):
    """Cancel an event (organizer only). Nothing is deleted."""
    return event_service.cancel_event(
        db=db,
        event_id=event_id,
        actor_user_id=payload.actor_user_id,
        cancel_reason=payload.cancel_reason,
        version=payload.version,
    )


@router.post("/{event_id}/complete", response_model=EventOut)
def complete_event(event_id: str, payload: EventCompleteRequest, db: Session = Depends(get_db)):
    """Mark a confirmed event as played (organizer only)."""
    return event_service.complete_event(db=db, event_id=event_id, actor_user_id=payload.actor_user_id)


@router.get("/{event_id}/recommendations", response_model=list[GameRecommendationOut])
def recommended_games(
    event_id: str,
    actor_user_id: str = Query(..., description="ID of the organizer"),
    top_n: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    """Top-scoring games for the people currently attending."""
    return event_service.get_recommended_games(db, event_id, actor_user_id, top_n)
