"""Pydantic schemas for Users and their game collections."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    name: str
    email: str
    catalog_username: Optional[str] = None
    default_timezone: str = "UTC"


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    catalog_username: Optional[str] = None
    default_timezone: Optional[str] = None


class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    catalog_username: Optional[str] = None
    default_timezone: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CollectionEntryIn(BaseModel):
    user_rating: Optional[float] = Field(None, ge=0, le=10)
    own: bool = True
    want_to_play: bool = False
    num_plays: int = Field(0, ge=0)


class CollectionEntryOut(BaseModel):
    catalog_id: int
    user_rating: Optional[float] = None
    own: bool
    want_to_play: bool
    num_plays: int

    model_config = {"from_attributes": True}
