"""Import every model so Base.metadata knows about all tables."""
from gamenight.models.user import User  # noqa: F401
from gamenight.models.game import Game, GameCollection  # noqa: F401
from gamenight.models.event import Event, EventDate, EventGame, EventFinalGame, EventStatus  # noqa: F401
from gamenight.models.participant import (  # noqa: F401
    EventParticipant, DateVote, GameVote, ParticipantStatus,
)
from gamenight.models.event_mutation import EventMutation, ActionType  # noqa: F401
