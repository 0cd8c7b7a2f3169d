"""Vote aggregator: reduces per-participant vote rows into per-candidate tallies.

Works on anything shaped like the ORM objects (participants with ``status``,
``date_votes`` and ``game_votes``), so the same functions serve the organizer
view and plain in-memory fixtures.
"""
from dataclasses import dataclass, field
from typing import Iterable

from gamenight.models.participant import ParticipantStatus

# Participants whose recorded votes count toward tallies
VOTING_STATUSES = frozenset({
    ParticipantStatus.pending,
    ParticipantStatus.interested,
    ParticipantStatus.confirmed,
})

# Participants planning to attend
ATTENDING_STATUSES = frozenset({ParticipantStatus.interested, ParticipantStatus.confirmed})


@dataclass
class VoteTally:
    date_counts: dict[str, int] = field(default_factory=dict)
    game_counts: dict[str, int] = field(default_factory=dict)
    interested_count: int = 0


def _voting(participants: Iterable) -> list:
    # Declined participants keep their stored votes but stop counting
    return [p for p in participants if ParticipantStatus(p.status) in VOTING_STATUSES]


def count_date_votes(date_ids: Iterable[str], participants: Iterable) -> dict[str, int]:
    """Count ``available=True`` votes per date. Every date id gets an entry."""
    counts = {date_id: 0 for date_id in date_ids}
    for participant in _voting(participants):
        for vote in participant.date_votes:
            if vote.available and vote.date_id in counts:
                counts[vote.date_id] += 1
    return counts


def sum_game_votes(event_game_ids: Iterable[str], participants: Iterable) -> dict[str, int]:
    """Signed sum of thumbs-up/down votes per event game."""
    sums = {game_id: 0 for game_id in event_game_ids}
    for participant in _voting(participants):
        for vote in participant.game_votes:
            if vote.event_game_id in sums:
                sums[vote.event_game_id] += vote.vote
    return sums


def count_attending(participants: Iterable) -> int:
    return sum(1 for p in participants if ParticipantStatus(p.status) in ATTENDING_STATUSES)


def aggregate_votes(event) -> VoteTally:
    """Tally every date and game vote of an event aggregate."""
    participants = list(event.participants)
    return VoteTally(
        date_counts=count_date_votes((d.date_id for d in event.dates), participants),
        game_counts=sum_game_votes((g.event_game_id for g in event.games), participants),
        interested_count=count_attending(participants),
    )
