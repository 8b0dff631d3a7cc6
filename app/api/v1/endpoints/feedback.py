"""Feedback endpoint — thumbs up/down on a chat answer."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging import logger
from app.models.chat_log import ChatLog
from app.models.feedback import Feedback, THUMBS_DOWN, THUMBS_UP
from app.schemas import FeedbackCreate, FeedbackResponse

router = APIRouter()


@router.post("/", response_model=FeedbackResponse)
async def submit_feedback(
    body: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
):
    """Rate a chat answer: 1 = thumbs down, 2 = thumbs up."""
    if body.chat_log_id is None or body.rating is None:
        raise HTTPException(status_code=400, detail="chatLogId and rating are required")

    if body.rating not in (THUMBS_DOWN, THUMBS_UP):
        raise HTTPException(
            status_code=400,
            detail="Rating must be 1 (thumbs down) or 2 (thumbs up)",
        )

    result = await db.execute(select(ChatLog).where(ChatLog.id == body.chat_log_id))
    if not result.scalar_one_or_none():
        raise HTTPException(status_code=404, detail="Chat log not found")

    feedback = Feedback(
        chat_log_id=body.chat_log_id,
        rating=body.rating,
        comment=body.comment or None,
    )
    db.add(feedback)
    await db.flush()
    await db.refresh(feedback)

    logger.info(f"Feedback {body.rating} recorded for chat log {body.chat_log_id}")
    return FeedbackResponse(feedback_id=feedback.id)
