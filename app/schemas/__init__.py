"""Pydantic schemas for request/response validation.

The chat widget speaks camelCase (``sessionId``, ``chatLogId``); those
fields carry aliases and are serialized by alias.
"""

from typing import Optional, List
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, Field


# ─── Chat ────────────────────────────────────────────────────────────────────

class ChatRequest(BaseModel):
    # Optional so that a missing field reaches the service and yields a 400
    message: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    class Config:
        populate_by_name = True


class ChatResponse(BaseModel):
    success: bool = True
    response: str
    chat_log_id: UUID = Field(alias="chatLogId")
    topic: Optional[str] = None

    class Config:
        populate_by_name = True


# ─── Session ─────────────────────────────────────────────────────────────────

class SessionRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    class Config:
        populate_by_name = True


class SessionResponse(BaseModel):
    session_id: str = Field(alias="sessionId")
    exists: bool

    class Config:
        populate_by_name = True


class ChatLogResponse(BaseModel):
    id: UUID
    user_query: str = Field(alias="userQuery")
    bot_response: str = Field(alias="botResponse")
    faq_id: Optional[UUID] = Field(default=None, alias="faqId")
    note_id: Optional[UUID] = Field(default=None, alias="noteId")
    timestamp: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class SessionDetailResponse(BaseModel):
    session_id: str = Field(alias="sessionId")
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    ip_address: Optional[str] = Field(default=None, alias="ipAddress")
    created_at: datetime = Field(alias="createdAt")
    chat_logs: List[ChatLogResponse] = Field(default_factory=list, alias="chatLogs")

    class Config:
        from_attributes = True
        populate_by_name = True


# ─── Feedback ────────────────────────────────────────────────────────────────

class FeedbackCreate(BaseModel):
    chat_log_id: Optional[UUID] = Field(default=None, alias="chatLogId")
    rating: Optional[int] = None
    comment: Optional[str] = None

    class Config:
        populate_by_name = True


class FeedbackResponse(BaseModel):
    success: bool = True
    feedback_id: UUID = Field(alias="feedbackId")

    class Config:
        populate_by_name = True


# ─── Topic ───────────────────────────────────────────────────────────────────

class TopicResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    faq_count: int = 0
    note_count: int = 0


# ─── Admin ───────────────────────────────────────────────────────────────────

class AdminLogin(BaseModel):
    email: str
    password: str


class AdminResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: str
    is_active: bool = True
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse


# ─── Stats ───────────────────────────────────────────────────────────────────

class RecentActivity(BaseModel):
    id: UUID
    type: str
    title: str
    created_at: datetime


class StatsResponse(BaseModel):
    topics_count: int
    notes_count: int
    faqs_count: int
    sessions_count: int
    chat_logs_count: int
    feedback_count: int
    positive_feedback_count: int
    recent_activity: List[RecentActivity] = Field(default_factory=list)
