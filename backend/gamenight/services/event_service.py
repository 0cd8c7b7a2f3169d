"""Event lifecycle service: the organizer's capability set.

Responsibilities:
- Authorization hook: only the organizer may invite/confirm/cancel/complete
- Status machine: draft -> pending -> confirmed -> completed, cancel before completion
- Confirmation as one transaction guarded by a compare-and-set on status
- Mutation ledger (EventMutations) for every lifecycle write
- Organizer read model: response progress plus ranked dates and games
"""
import logging
import secrets
from datetime import datetime, timezone
from typing import Optional, Any

import pytz
from sqlalchemy.orm import Session

from gamenight.config import settings
from gamenight.models.event import Event, EventStatus, EventDate, EventGame
from gamenight.models.event_mutation import EventMutation, ActionType
from gamenight.models.game import Game
from gamenight.models.participant import EventParticipant, ParticipantStatus
from gamenight.models.user import User
from gamenight.services import repositories
from gamenight.services.errors import validation_error, forbidden, conflict, not_found
from gamenight.services.notification_service import Notifier, NotificationError
from gamenight.services.recommendation_service import (
    build_game_candidates, player_count_for, rank_dates, rank_games, top_games,
)
from gamenight.services.vote_aggregator import ATTENDING_STATUSES, aggregate_votes

logger = logging.getLogger(__name__)

INVITATION_TOKEN_BYTES = 24

# Statuses each status may move to
TRANSITIONS: dict[EventStatus, frozenset] = {
    EventStatus.draft: frozenset({EventStatus.pending, EventStatus.cancelled}),
    EventStatus.pending: frozenset({EventStatus.confirmed, EventStatus.cancelled}),
    EventStatus.confirmed: frozenset({EventStatus.completed, EventStatus.cancelled}),
    EventStatus.cancelled: frozenset(),
    EventStatus.completed: frozenset(),
}


def generate_invitation_token() -> str:
    """48 hex chars from the OS CSPRNG; used as a bearer capability in invite links."""
    return secrets.token_hex(INVITATION_TOKEN_BYTES)


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    return EventStatus(target) in TRANSITIONS[EventStatus(current)]


def _sources_for(target: EventStatus) -> list[EventStatus]:
    return [s for s, targets in TRANSITIONS.items() if target in targets]


def _event_snapshot(event: Event) -> dict[str, Any]:
    """Serialize an event to a JSON-safe dict for the mutation ledger."""
    return {
        "event_id": event.event_id,
        "title": event.title,
        "status": EventStatus(event.status).value if event.status else None,
        "final_date_id": event.final_date_id,
        "response_deadline": event.response_deadline.isoformat() if event.response_deadline else None,
        "version": event.version,
    }


def _record(db: Session, event: Event, actor_user_id: str, action: ActionType,
            before: Optional[dict], after: dict) -> None:
    db.add(EventMutation(
        event_id=event.event_id,
        actor_user_id=actor_user_id,
        action_type=action,
        before_snapshot=before,
        after_snapshot=after,
    ))


def _check_organizer(event: Event, actor_user_id: str) -> None:
    if event.organizer_id != actor_user_id:
        raise forbidden("not_organizer", "Only the organizer may manage this event.")


def _load_event(db: Session, event_id: str) -> Event:
    event = repositories.get_event(db, event_id)
    if not event:
        raise not_found("Event")
    return event


def _require_transition(event: Event, target: EventStatus) -> None:
    current = EventStatus(event.status)
    if not can_transition(current, target):
        raise conflict(
            "invalid_transition",
            f"Event is {current.value} and cannot become {target.value}.",
        )


def as_utc(value: datetime) -> datetime:
    """Timestamps come back naive from SQLite; treat those as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def format_event_date(event_date: EventDate) -> str:
    text = event_date.proposed_date.strftime("%A, %d %B %Y")
    if event_date.start_time:
        text += f" at {event_date.start_time.strftime('%H:%M')}"
    return text


def format_deadline(deadline: datetime, tz_name: str) -> str:
    """Render the response deadline in the recipient's timezone."""
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.utc
    return as_utc(deadline).astimezone(tz).strftime("%d %B %Y %H:%M %Z")


def create_event(
    db: Session,
    organizer_id: str,
    title: str,
    response_deadline: datetime,
    dates: list[dict],
    games: list[dict],
    description: Optional[str] = None,
    location: Optional[str] = None,
    notes: Optional[str] = None,
) -> Event:
    """Create a draft event with its candidate dates and games."""
    if not db.query(User).filter(User.user_id == organizer_id).first():
        raise not_found("Organizer")

    catalog_ids = {g["catalog_id"] for g in games}
    known = {cid for (cid,) in db.query(Game.catalog_id).filter(Game.catalog_id.in_(catalog_ids))}
    unknown = sorted(catalog_ids - known)
    if unknown:
        raise validation_error("unknown_game", f"Games not in the catalog: {unknown}")

    event = Event(
        organizer_id=organizer_id,
        title=title,
        description=description,
        location=location,
        notes=notes,
        response_deadline=as_utc(response_deadline),
        status=EventStatus.draft,
        version=1,
    )
    db.add(event)
    db.flush()

    for d in dates:
        db.add(EventDate(
            event_id=event.event_id,
            proposed_date=d["proposed_date"],
            start_time=d.get("start_time"),
            end_time=d.get("end_time"),
        ))

    # One row per catalog game, first proposal wins
    seen: set[int] = set()
    for g in games:
        if g["catalog_id"] in seen:
            continue
        seen.add(g["catalog_id"])
        db.add(EventGame(
            event_id=event.event_id,
            catalog_id=g["catalog_id"],
            proposed_by=organizer_id,
            owner_id=g.get("owner_id"),
            is_recommended=g.get("is_recommended", False),
        ))

    _record(db, event, organizer_id, ActionType.create, None, _event_snapshot(event))
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", title, event.event_id, organizer_id)
    return event


def send_invitations(
    db: Session,
    event_id: str,
    actor_user_id: str,
    user_ids: list[str],
    notifier: Notifier,
    send_email: bool = True,
) -> list[dict]:
    """Invite users to an event and dispatch invitation mail.

    Users already invited are skipped. The first dispatch moves a draft event
    to pending. A failed delivery is reported for that recipient only.
    """
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)
    if EventStatus(event.status) not in (EventStatus.draft, EventStatus.pending):
        raise conflict("invalid_transition", f"Cannot invite to a {EventStatus(event.status).value} event.")

    before = _event_snapshot(event)
    already = {p.user_id for p in event.participants}
    users = {u.user_id: u for u in db.query(User).filter(User.user_id.in_(user_ids)).all()}

    results: list[dict] = []
    created: list[tuple[EventParticipant, User]] = []
    for uid in dict.fromkeys(user_ids):
        if uid in already:
            results.append({"user_id": uid, "invited": False, "reason": "already_invited"})
            continue
        user = users.get(uid)
        if user is None:
            results.append({"user_id": uid, "invited": False, "reason": "user_not_found"})
            continue
        participant = EventParticipant(
            event_id=event.event_id,
            user_id=uid,
            status=ParticipantStatus.pending,
            invitation_token=generate_invitation_token(),
            invited_at=datetime.now(timezone.utc),
        )
        db.add(participant)
        created.append((participant, user))
    db.flush()

    if created and EventStatus(event.status) == EventStatus.draft:
        if not repositories.update_event_status(db, event.event_id, EventStatus.pending, [EventStatus.draft]):
            db.rollback()
            raise conflict("invalid_transition", "Event changed status while sending invitations.")

    if created:
        after = dict(before, status=EventStatus.pending.value, invited=[u.user_id for _, u in created])
        _record(db, event, actor_user_id, ActionType.invite, before, after)
    db.commit()
    db.refresh(event)

    organizer_name = event.organizer.name if event.organizer else "A friend"
    proposed_dates = [format_event_date(d) for d in event.dates]
    for participant, user in created:
        entry = {"user_id": user.user_id, "invited": True, "participant_id": participant.participant_id,
                 "email_sent": False}
        if send_email:
            try:
                notifier.send_invitation(
                    to_email=user.email,
                    event_title=event.title,
                    organizer_name=organizer_name,
                    proposed_dates=proposed_dates,
                    invite_token=participant.invitation_token,
                    response_deadline=format_deadline(event.response_deadline, user.default_timezone),
                )
                entry["email_sent"] = True
            except NotificationError as exc:
                logger.warning("Invitation for event %s not delivered to %s: %s", event.event_id, user.email, exc)
            except Exception:
                logger.exception("Unexpected error sending invitation for event %s to %s", event.event_id, user.email)
        results.append(entry)

    logger.info("Sent %d invitations for event %s", len(created), event.event_id)
    return results


def confirm_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    final_date_id: Optional[str],
    selections: list[dict],
    notifier: Optional[Notifier] = None,
    version: Optional[int] = None,
) -> Event:
    """Fix the final date and game list of a pending event.

    All selections are validated before anything is written. Status, final
    games and participant promotion then commit together or not at all; the
    status write only succeeds while the event is still pending, so a second
    confirmation is rejected instead of inserting a second set of games.
    """
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)
    _require_transition(event, EventStatus.confirmed)

    if not final_date_id:
        raise validation_error("missing_final_date", "Select a date.")
    if final_date_id not in {d.date_id for d in event.dates}:
        raise validation_error("unknown_date", "The selected date does not belong to this event.")
    if not selections:
        raise validation_error("no_games_selected", "Select at least one game.")

    games_by_id = {g.event_game_id: g for g in event.games}
    eligible = {p.user_id for p in event.participants if ParticipantStatus(p.status) in ATTENDING_STATUSES}
    assignments: list[tuple[int, str]] = []
    seen: set[str] = set()
    for selection in selections:
        event_game = games_by_id.get(selection.get("event_game_id"))
        if event_game is None:
            raise validation_error("unknown_game", "A selected game does not belong to this event.")
        if event_game.event_game_id in seen:
            continue
        seen.add(event_game.event_game_id)
        responsible = selection.get("responsible_user_id")
        if not responsible:
            raise validation_error("missing_responsible", "Assign someone to bring each game.")
        if responsible not in eligible:
            raise validation_error(
                "invalid_responsible",
                "Only interested or confirmed participants can bring a game.",
            )
        assignments.append((event_game.catalog_id, responsible))

    before = _event_snapshot(event)
    try:
        won = repositories.update_event_status(
            db, event.event_id, EventStatus.confirmed, [EventStatus.pending],
            expected_version=version, final_date_id=final_date_id,
        )
        if not won:
            db.rollback()
            if version is not None:
                raise conflict("version_mismatch", "The event changed since it was loaded. Re-fetch and retry.")
            raise conflict("already_confirmed", "The event is no longer pending.")
        repositories.insert_final_games(db, event.event_id, assignments)
        promoted = repositories.bulk_update_participant_status(
            db, event.event_id, [ParticipantStatus.interested], ParticipantStatus.confirmed,
        )
        after = dict(before, status=EventStatus.confirmed.value, final_date_id=final_date_id,
                     final_games=[{"catalog_id": c, "responsible_user_id": u} for c, u in assignments])
        _record(db, event, actor_user_id, ActionType.confirm, before, after)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(event)
    logger.info("Confirmed event %s for date %s with %d games (%d participants confirmed)",
                event.event_id, final_date_id, len(assignments), promoted)

    if notifier is not None:
        _send_confirmation(db, event, notifier)
    return event


def _send_confirmation(db: Session, event: Event, notifier: Notifier) -> dict[str, bool]:
    confirmed = [p for p in event.participants if ParticipantStatus(p.status) == ParticipantStatus.confirmed]
    names = {u.user_id: u.name for u in db.query(User).filter(
        User.user_id.in_([fg.responsible_user_id for fg in event.final_games])
    )}
    final_date = event.final_date
    return notifier.send_confirmation(
        to_emails=[p.user.email for p in confirmed],
        event_title=event.title,
        final_date=final_date.proposed_date.strftime("%A, %d %B %Y"),
        final_time=final_date.start_time.strftime("%H:%M") if final_date.start_time else None,
        location=event.location,
        final_games=[
            {"name": fg.game.name, "responsible": names.get(fg.responsible_user_id, "someone")}
            for fg in event.final_games
        ],
    )


def cancel_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    cancel_reason: Optional[str] = None,
    version: Optional[int] = None,
) -> Event:
    """Cancel an event before completion. Cancellation is a status, nothing is deleted."""
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)
    _require_transition(event, EventStatus.cancelled)

    before = _event_snapshot(event)
    now = datetime.now(timezone.utc)
    if not repositories.update_event_status(
        db, event.event_id, EventStatus.cancelled, _sources_for(EventStatus.cancelled),
        expected_version=version, cancelled_at=now, final_date_id=None,
    ):
        db.rollback()
        raise conflict("version_mismatch", "The event changed since it was loaded. Re-fetch and retry.")
    _record(db, event, actor_user_id, ActionType.cancel, before,
            dict(before, status=EventStatus.cancelled.value, final_date_id=None, cancel_reason=cancel_reason))
    db.commit()
    db.refresh(event)
    logger.info("Cancelled event %s (reason: %s)", event_id, cancel_reason)
    return event


def complete_event(db: Session, event_id: str, actor_user_id: str) -> Event:
    """Mark a confirmed event as played."""
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)
    _require_transition(event, EventStatus.completed)

    before = _event_snapshot(event)
    if not repositories.update_event_status(db, event.event_id, EventStatus.completed, [EventStatus.confirmed]):
        db.rollback()
        raise conflict("invalid_transition", "The event is no longer confirmed.")
    _record(db, event, actor_user_id, ActionType.complete, before,
            dict(before, status=EventStatus.completed.value))
    db.commit()
    db.refresh(event)
    logger.info("Completed event %s", event_id)
    return event


def get_organizer_summary(
    db: Session,
    event_id: str,
    actor_user_id: str,
    player_count: Optional[int] = None,
) -> dict[str, Any]:
    """Response progress and ranked choices for the organizer."""
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)

    tally = aggregate_votes(event)
    participants = list(event.participants)
    if player_count is None:
        player_count = player_count_for(event)

    return {
        "event_id": event.event_id,
        "status": EventStatus(event.status).value,
        "total_participants": len(participants),
        "responded_count": sum(1 for p in participants if ParticipantStatus(p.status) != ParticipantStatus.pending),
        "interested_count": tally.interested_count,
        "player_count": player_count,
        "dates": rank_dates(event.dates, tally.date_counts, tally.interested_count),
        "games": rank_games(build_game_candidates(db, event, tally), player_count),
    }


def get_recommended_games(
    db: Session,
    event_id: str,
    actor_user_id: str,
    top_n: Optional[int] = None,
) -> list:
    """Best-scoring candidate games for the current attendee count."""
    event = _load_event(db, event_id)
    _check_organizer(event, actor_user_id)
    tally = aggregate_votes(event)
    return top_games(
        build_game_candidates(db, event, tally),
        player_count_for(event),
        settings.RECOMMENDATION_TOP_N if top_n is None else top_n,
    )
