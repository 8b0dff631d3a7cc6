"""Chat widget endpoint."""

import traceback

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InternalFailureError, InvalidInputError
from app.core.logging import logger
from app.schemas import ChatRequest, ChatResponse
from app.services.answer_service import answer_service

router = APIRouter()


@router.post("/", response_model=ChatResponse)
async def send_message(
    body: ChatRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Answer a student's message.

    Looks for a confident FAQ or note match first, falls back to the AI
    assistant, and finally to a list of the available topics. Every
    exchange is recorded so the student can rate it afterwards.
    """
    try:
        answer = await answer_service.resolve_message(db, body.message, body.session_id)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InternalFailureError as e:
        logger.error(f"Chat failed for session {body.session_id}: {e}")
        if settings.DEBUG:
            logger.error(f"Traceback:\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=500,
            detail="Error processing your question. Please try again.",
        )

    logger.info(
        f"Answered message in session {body.session_id} from {answer.source} "
        f"({len(answer.response)} chars)"
    )
    return ChatResponse(
        response=answer.response,
        chat_log_id=answer.chat_log_id,
        topic=answer.topic,
    )
