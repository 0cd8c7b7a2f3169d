"""EventMutation ORM model: append-only ledger of lifecycle writes."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from gamenight.database import Base


class ActionType(str, enum.Enum):
    create = "create"
    invite = "invite"
    confirm = "confirm"
    cancel = "cancel"
    complete = "complete"


class EventMutation(Base):
    __tablename__ = "event_mutations"

    mutation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    actor_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    action_type = Column(SAEnum(ActionType), nullable=False)
    before_snapshot = Column(JSON, nullable=True)
    after_snapshot = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
