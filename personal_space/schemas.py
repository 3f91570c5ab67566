"""
Pydantic schemas for the personal space API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: Literal["ok"]
    database_configured: bool
    db_url_prefix: str


# Fields left unset are dropped, so an unavailable row renders as {}.
class ProfileResponse(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    cover: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    cover: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    content: str
    type: str
    title: Optional[str] = None
    artist: Optional[str] = None
    created_at: datetime


# Required fields are Optional here so the store can report them as 400s.
class MessageCreateRequest(BaseModel):
    content: Optional[str] = None
    type: Optional[str] = "text"
    title: Optional[str] = None
    artist: Optional[str] = None


class MessageUpdateRequest(BaseModel):
    id: Optional[int] = None
    content: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None


class MessageDeleteRequest(BaseModel):
    id: Optional[int] = None


class VerifyAdminRequest(BaseModel):
    password: Optional[str] = None


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class CreatedResponse(SuccessResponse):
    id: int
