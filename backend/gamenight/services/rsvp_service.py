"""Invitation / RSVP workflow: the participant's capability set."""
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from sqlalchemy.orm import Session

from gamenight.models.event import EventStatus
from gamenight.models.participant import EventParticipant, ParticipantStatus
from gamenight.services import repositories
from gamenight.services.errors import validation_error, forbidden, conflict, not_found
from gamenight.services.event_service import as_utc
from gamenight.services.vote_aggregator import aggregate_votes

logger = logging.getLogger(__name__)

VALID_GAME_VOTES = (-1, 0, 1)


def deadline_passed(response_deadline: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return as_utc(now) > as_utc(response_deadline)


def submit_rsvp(
    db: Session,
    participant_id: str,
    actor_user_id: str,
    interested: bool,
    available_date_ids: Optional[list[str]] = None,
    game_votes: Optional[dict[str, int]] = None,
    now: Optional[datetime] = None,
) -> EventParticipant:
    """Record a participant's answer.

    Interested replaces the participant's whole date and game vote set.
    Declined only changes the status; stored votes stay but stop counting.
    """
    participant = repositories.get_participant(db, participant_id)
    if not participant:
        raise not_found("Participant")
    if participant.user_id != actor_user_id:
        raise forbidden("not_participant", "You can only answer for your own invitation.")

    event = participant.event
    if EventStatus(event.status) != EventStatus.pending:
        raise conflict("voting_closed", f"The event is {EventStatus(event.status).value}; answers are closed.")
    if ParticipantStatus(participant.status) == ParticipantStatus.confirmed:
        raise conflict("participant_confirmed", "Your attendance is already confirmed.")

    now = now or datetime.now(timezone.utc)
    if deadline_passed(event.response_deadline, now):
        raise forbidden(
            "deadline_passed",
            f"The response deadline ({as_utc(event.response_deadline).isoformat()}) has passed.",
        )

    available_date_ids = available_date_ids or []
    game_votes = game_votes or {}
    date_ids = {d.date_id for d in event.dates}
    game_ids = {g.event_game_id for g in event.games}
    if any(date_id not in date_ids for date_id in available_date_ids):
        raise validation_error("unknown_date", "A voted date does not belong to this event.")
    if any(game_id not in game_ids for game_id in game_votes):
        raise validation_error("unknown_game", "A voted game does not belong to this event.")
    if any(vote not in VALID_GAME_VOTES for vote in game_votes.values()):
        raise validation_error("invalid_vote", "Game votes must be -1, 0 or 1.")

    new_status = ParticipantStatus.interested if interested else ParticipantStatus.declined
    try:
        repositories.update_participant_status(db, participant, new_status, responded_at=now)
        if interested:
            repositories.replace_votes(
                db,
                participant,
                date_votes={date_id: True for date_id in available_date_ids},
                game_votes=game_votes,
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(participant)
    logger.info("Participant %s answered %s for event %s", participant_id, new_status.value, event.event_id)
    return participant


def resolve_invitation(db: Session, token: str) -> EventParticipant:
    """Look up the participant an invite link belongs to."""
    participant = repositories.get_participant_by_token(db, token)
    if not participant:
        raise not_found("Invitation")
    return participant


def get_vote_tallies(db: Session, event_id: str, actor_user_id: str) -> dict[str, Any]:
    """Current tallies, visible to the organizer and to invited participants."""
    event = repositories.get_event(db, event_id)
    if not event:
        raise not_found("Event")
    if event.organizer_id != actor_user_id and actor_user_id not in {p.user_id for p in event.participants}:
        raise forbidden("not_participant", "You are not invited to this event.")

    tally = aggregate_votes(event)
    return {
        "event_id": event.event_id,
        "date_counts": tally.date_counts,
        "game_counts": tally.game_counts,
        "interested_count": tally.interested_count,
    }
