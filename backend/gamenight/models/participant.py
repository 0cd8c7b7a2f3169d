"""Event participants and their date/game votes."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint,
    Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gamenight.database import Base


class ParticipantStatus(str, enum.Enum):
    pending = "pending"
    interested = "interested"
    confirmed = "confirmed"
    declined = "declined"


class EventParticipant(Base):
    __tablename__ = "event_participants"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_participant_event_user"),)

    participant_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    status = Column(SAEnum(ParticipantStatus), nullable=False, default=ParticipantStatus.pending)
    invitation_token = Column(String(64), nullable=False, unique=True)
    invited_at = Column(DateTime(timezone=True), server_default=func.now())
    responded_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="participants")
    user = relationship("User")
    date_votes = relationship("DateVote", back_populates="participant", cascade="all, delete-orphan")
    game_votes = relationship("GameVote", back_populates="participant", cascade="all, delete-orphan")


class DateVote(Base):
    __tablename__ = "date_votes"
    __table_args__ = (UniqueConstraint("participant_id", "date_id", name="uq_date_vote"),)

    vote_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    participant_id = Column(String(36), ForeignKey("event_participants.participant_id"), nullable=False)
    date_id = Column(String(36), ForeignKey("event_dates.date_id"), nullable=False)
    available = Column(Boolean, nullable=False, default=True)

    participant = relationship("EventParticipant", back_populates="date_votes")


class GameVote(Base):
    __tablename__ = "game_votes"
    __table_args__ = (
        UniqueConstraint("participant_id", "event_game_id", name="uq_game_vote"),
        CheckConstraint("vote IN (-1, 1)", name="ck_game_vote_value"),
    )

    vote_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    participant_id = Column(String(36), ForeignKey("event_participants.participant_id"), nullable=False)
    event_game_id = Column(String(36), ForeignKey("event_games.event_game_id"), nullable=False)
    vote = Column(Integer, nullable=False)  # -1 or +1, zero is never stored

    participant = relationship("EventParticipant", back_populates="game_votes")
