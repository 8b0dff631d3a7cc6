"""Chat session endpoints (start/resume a conversation, read its history)."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.core.logging import logger
from app.models.chat_session import ChatSession
from app.schemas import ChatLogResponse, SessionDetailResponse, SessionRequest, SessionResponse
from app.services import knowledge_service

router = APIRouter()

HISTORY_LIMIT = 50


def _client_ip(request: Request) -> Optional[str]:
    """Best-effort client address, honouring reverse-proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


@router.post("/", response_model=SessionResponse)
async def start_session(
    request: Request,
    body: Optional[SessionRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """Resume the given session if it exists, otherwise start a new one."""
    if body and body.session_id:
        existing = await knowledge_service.get_session(db, body.session_id)
        if existing:
            return SessionResponse(session_id=existing.session_id, exists=True)

    chat_session = await knowledge_service.upsert_session(
        db,
        str(uuid.uuid4()),
        user_agent=request.headers.get("user-agent"),
        ip_address=_client_ip(request),
    )
    logger.info(f"New chat session started: {chat_session.session_id}")
    return SessionResponse(session_id=chat_session.session_id, exists=False)


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session_history(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a session with its most recent chat logs, newest first."""
    result = await db.execute(
        select(ChatSession)
        .options(selectinload(ChatSession.chat_logs))
        .where(ChatSession.session_id == session_id)
    )
    chat_session = result.scalar_one_or_none()
    if not chat_session:
        raise HTTPException(status_code=404, detail="Session not found")

    return SessionDetailResponse(
        session_id=chat_session.session_id,
        user_agent=chat_session.user_agent,
        ip_address=chat_session.ip_address,
        created_at=chat_session.created_at,
        chat_logs=[
            ChatLogResponse.model_validate(log)
            for log in chat_session.chat_logs[:HISTORY_LIMIT]
        ],
    )
