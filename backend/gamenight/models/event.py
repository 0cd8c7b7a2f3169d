"""Event aggregate root and its date/game children."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Date, Time, DateTime, Integer, Boolean, ForeignKey, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from gamenight.database import Base


class EventStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organizer_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(500), nullable=True)
    response_deadline = Column(DateTime(timezone=True), nullable=False)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.draft)
    # Set only on confirmation
    final_date_id = Column(
        String(36),
        ForeignKey("event_dates.date_id", use_alter=True, name="fk_events_final_date"),
        nullable=True,
    )
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organizer = relationship("User", foreign_keys=[organizer_id])
    dates = relationship(
        "EventDate",
        back_populates="event",
        foreign_keys="EventDate.event_id",
        cascade="all, delete-orphan",
        order_by="EventDate.proposed_date",
    )
    final_date = relationship("EventDate", foreign_keys=[final_date_id], viewonly=True)
    games = relationship("EventGame", back_populates="event", cascade="all, delete-orphan")
    participants = relationship("EventParticipant", back_populates="event", cascade="all, delete-orphan")
    final_games = relationship("EventFinalGame", back_populates="event", cascade="all, delete-orphan")


class EventDate(Base):
    __tablename__ = "event_dates"

    date_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    proposed_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    event = relationship("Event", back_populates="dates", foreign_keys=[event_id])


class EventGame(Base):
    __tablename__ = "event_games"

    event_game_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    catalog_id = Column(Integer, ForeignKey("games.catalog_id"), nullable=False)
    proposed_by = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    owner_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    is_recommended = Column(Boolean, nullable=False, default=False)

    event = relationship("Event", back_populates="games")
    game = relationship("Game")


class EventFinalGame(Base):
    __tablename__ = "event_final_games"

    final_game_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    catalog_id = Column(Integer, ForeignKey("games.catalog_id"), nullable=False)
    responsible_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)

    event = relationship("Event", back_populates="final_games")
    game = relationship("Game")
