"""Game scoring and date ranking.

Game score is additive over four capped factors:

- player-count fit: 40 inside the inner quartile of the supported range,
  30 elsewhere in range, 10 when one player outside it
- catalog rating: up to 25
- participant collection ratings (average): up to 25
- net votes: 2 per vote, up to 10

Everything here except ``build_game_candidates`` is pure.
"""
import math
from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gamenight.models.game import GameCollection
from gamenight.models.participant import ParticipantStatus
from gamenight.services.vote_aggregator import ATTENDING_STATUSES, VoteTally

PLAYER_FIT_OPTIMAL = 40
PLAYER_FIT_SUPPORTED = 30
PLAYER_FIT_NEAR = 10
CATALOG_RATING_MAX = 25
PARTICIPANT_RATING_MAX = 25
VOTES_MAX = 10
POINTS_PER_VOTE = 2

CATALOG_RATING_REASON_THRESHOLD = 7.5
PARTICIPANT_RATING_REASON_THRESHOLD = 7


@dataclass
class GameCandidate:
    event_game_id: str
    catalog_id: int
    name: str
    min_players: int
    max_players: int
    catalog_rating: Optional[float] = None
    participant_ratings: list[float] = field(default_factory=list)
    votes: int = 0
    playing_time: int = 0
    thumbnail: Optional[str] = None
    owner_id: Optional[str] = None
    is_recommended: bool = False


@dataclass
class GameRecommendation:
    candidate: GameCandidate
    score: float
    reasons: list[str]


@dataclass
class DateRecommendation:
    date_id: str
    proposed_date: date
    start_time: Optional[time]
    end_time: Optional[time]
    available_count: int
    percentage: int


def _rating_points(rating: float, cap: int) -> float:
    return max(0.0, min(rating / 10 * cap, cap))


def player_fit(min_players: int, max_players: int, player_count: int) -> tuple[int, Optional[str]]:
    """Points and reason for how well ``player_count`` suits the game."""
    if min_players <= player_count <= max_players:
        span = max_players - min_players
        optimal_min = min_players + math.floor(span * 0.25)
        optimal_max = min_players + math.floor(span * 0.75)
        if optimal_min <= player_count <= optimal_max:
            return PLAYER_FIT_OPTIMAL, "Optimal player count"
        return PLAYER_FIT_SUPPORTED, "Supports the player count"
    if player_count == min_players - 1 or player_count == max_players + 1:
        return PLAYER_FIT_NEAR, "Almost within the player range"
    return 0, None


def score_game(candidate: GameCandidate, player_count: int) -> GameRecommendation:
    score = 0.0
    reasons: list[str] = []

    points, reason = player_fit(candidate.min_players, candidate.max_players, player_count)
    score += points
    if reason:
        reasons.append(reason)

    if candidate.catalog_rating is not None:
        score += _rating_points(candidate.catalog_rating, CATALOG_RATING_MAX)
        if candidate.catalog_rating >= CATALOG_RATING_REASON_THRESHOLD:
            reasons.append(f"High catalog rating ({candidate.catalog_rating:.1f})")

    if candidate.participant_ratings:
        average = sum(candidate.participant_ratings) / len(candidate.participant_ratings)
        score += _rating_points(average, PARTICIPANT_RATING_MAX)
        if average >= PARTICIPANT_RATING_REASON_THRESHOLD:
            reasons.append("Well rated by participants")

    if candidate.votes > 0:
        score += min(candidate.votes * POINTS_PER_VOTE, VOTES_MAX)
        reasons.append(f"{candidate.votes} vote(s) in favor")

    return GameRecommendation(candidate=candidate, score=score, reasons=reasons)


def rank_games(candidates: Iterable[GameCandidate], player_count: int) -> list[GameRecommendation]:
    """Score every candidate and sort by score, highest first. Ties keep input order."""
    scored = [score_game(c, player_count) for c in candidates]
    return sorted(scored, key=lambda r: r.score, reverse=True)


def top_games(candidates: Iterable[GameCandidate], player_count: int, top_n: int = 3) -> list[GameRecommendation]:
    return rank_games(candidates, player_count)[:top_n]


def availability_percentage(available_count: int, total_participants: int) -> int:
    if total_participants <= 0:
        return 0
    # Half rounds up
    return math.floor(available_count / total_participants * 100 + 0.5)


def rank_dates(dates: Iterable, date_counts: dict[str, int], total_participants: int) -> list[DateRecommendation]:
    """Rank candidate dates by raw available count. Percentage is informational only."""
    ranked = [
        DateRecommendation(
            date_id=d.date_id,
            proposed_date=d.proposed_date,
            start_time=d.start_time,
            end_time=d.end_time,
            available_count=date_counts.get(d.date_id, 0),
            percentage=availability_percentage(date_counts.get(d.date_id, 0), total_participants),
        )
        for d in dates
    ]
    return sorted(ranked, key=lambda r: r.available_count, reverse=True)


def player_count_for(event) -> int:
    """Attending participants, plus the organizer when not already among them."""
    attending = {p.user_id for p in event.participants if ParticipantStatus(p.status) in ATTENDING_STATUSES}
    attending.add(event.organizer_id)
    return len(attending)


def build_game_candidates(db: Session, event, tally: VoteTally) -> list[GameCandidate]:
    """Join an event's proposed games with catalog metadata, attendee ratings and vote sums."""
    raters = [p.user_id for p in event.participants if ParticipantStatus(p.status) in ATTENDING_STATUSES]
    raters.append(event.organizer_id)
    catalog_ids = [eg.catalog_id for eg in event.games]

    ratings: dict[int, list[float]] = {}
    if catalog_ids:
        rows = (
            db.query(GameCollection)
            .filter(
                GameCollection.user_id.in_(raters),
                GameCollection.catalog_id.in_(catalog_ids),
                GameCollection.user_rating.isnot(None),
            )
            .all()
        )
        for row in rows:
            ratings.setdefault(row.catalog_id, []).append(row.user_rating)

    candidates = []
    for eg in event.games:
        game = eg.game
        candidates.append(GameCandidate(
            event_game_id=eg.event_game_id,
            catalog_id=eg.catalog_id,
            name=game.name,
            min_players=game.min_players,
            max_players=game.max_players,
            catalog_rating=game.catalog_rating,
            participant_ratings=ratings.get(eg.catalog_id, []),
            votes=tally.game_counts.get(eg.event_game_id, 0),
            playing_time=game.playing_time,
            thumbnail=game.thumbnail,
            owner_id=eg.owner_id,
            is_recommended=eg.is_recommended,
        ))
    return candidates
