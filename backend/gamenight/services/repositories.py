"""Storage operations on the event aggregate.

Nothing here commits: callers own the transaction so multi-step writes
succeed or roll back together.
"""
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gamenight.models.event import Event, EventStatus, EventFinalGame
from gamenight.models.participant import EventParticipant, ParticipantStatus, DateVote, GameVote


def get_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.event_id == event_id).first()


def get_participant(db: Session, participant_id: str) -> Optional[EventParticipant]:
    return db.query(EventParticipant).filter(EventParticipant.participant_id == participant_id).first()


def get_participant_by_token(db: Session, token: str) -> Optional[EventParticipant]:
    return db.query(EventParticipant).filter(EventParticipant.invitation_token == token).first()


def update_event_status(
    db: Session,
    event_id: str,
    new_status: EventStatus,
    expected_statuses: Iterable[EventStatus],
    expected_version: Optional[int] = None,
    **fields,
) -> bool:
    """Compare-and-set the event status.

    The UPDATE only matches while the row is still in one of
    ``expected_statuses`` (and at ``expected_version`` when given), so of two
    racing transitions exactly one wins. Returns whether this call won.
    """
    query = db.query(Event).filter(
        Event.event_id == event_id,
        Event.status.in_(list(expected_statuses)),
    )
    if expected_version is not None:
        query = query.filter(Event.version == expected_version)

    values = {
        Event.status: new_status,
        Event.version: Event.version + 1,
        Event.updated_at: datetime.now(timezone.utc),
    }
    for name, value in fields.items():
        values[getattr(Event, name)] = value
    updated = query.update(values, synchronize_session=False)
    return updated == 1


def insert_final_games(db: Session, event_id: str, assignments: Iterable[tuple[int, str]]) -> list[EventFinalGame]:
    """Insert one final-game row per (catalog_id, responsible_user_id) pair."""
    rows = [
        EventFinalGame(event_id=event_id, catalog_id=catalog_id, responsible_user_id=user_id)
        for catalog_id, user_id in assignments
    ]
    db.add_all(rows)
    db.flush()
    return rows


def replace_votes(
    db: Session,
    participant: EventParticipant,
    date_votes: dict[str, bool],
    game_votes: dict[str, int],
) -> None:
    """Replace a participant's whole date and game vote set in one step.

    Zero game votes mean "no opinion" and are not stored.
    """
    db.query(DateVote).filter(DateVote.participant_id == participant.participant_id).delete()
    db.query(GameVote).filter(GameVote.participant_id == participant.participant_id).delete()
    db.flush()

    db.add_all(
        DateVote(participant_id=participant.participant_id, date_id=date_id, available=available)
        for date_id, available in date_votes.items()
    )
    db.add_all(
        GameVote(participant_id=participant.participant_id, event_game_id=event_game_id, vote=vote)
        for event_game_id, vote in game_votes.items()
        if vote != 0
    )
    db.flush()
    db.expire(participant, ["date_votes", "game_votes"])


def update_participant_status(
    db: Session,
    participant: EventParticipant,
    new_status: ParticipantStatus,
    responded_at: Optional[datetime] = None,
) -> None:
    participant.status = new_status
    if responded_at is not None:
        participant.responded_at = responded_at
    db.flush()


def bulk_update_participant_status(
    db: Session,
    event_id: str,
    from_statuses: Iterable[ParticipantStatus],
    to_status: ParticipantStatus,
) -> int:
    """Move every participant of an event in ``from_statuses`` to ``to_status``."""
    return (
        db.query(EventParticipant)
        .filter(
            EventParticipant.event_id == event_id,
            EventParticipant.status.in_(list(from_statuses)),
        )
        .update({EventParticipant.status: to_status}, synchronize_session=False)
    )
