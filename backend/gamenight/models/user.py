"""User ORM model."""
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from gamenight.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    catalog_username = Column(String(100), nullable=True)  # board game catalog account
    default_timezone = Column(String(50), nullable=False, default="UTC")  # IANA tz
    created_at = Column(DateTime(timezone=True), server_default=func.now())
