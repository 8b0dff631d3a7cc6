"""Persist each answered message as an auditable chat log entry."""

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.services import knowledge_service
from app.services.candidates import FAQ_KIND, NOTE_KIND, Candidate

logger = get_logger("chat_log")


@dataclass(frozen=True)
class LoggedExchange:
    chat_log_id: uuid.UUID
    topic: Optional[str]


async def log_exchange(
    db: AsyncSession,
    session_id: str,
    query: str,
    response: str,
    match: Optional[Candidate] = None,
) -> LoggedExchange:
    """Upsert the session, write the chat log and report the matched topic.

    ``match`` is the FAQ or note whose stored text became the response, or
    None for AI and static answers.
    """
    await knowledge_service.upsert_session(db, session_id)

    faq_id = match.id if match is not None and match.kind == FAQ_KIND else None
    note_id = match.id if match is not None and match.kind == NOTE_KIND else None

    chat_log = await knowledge_service.insert_chat_log(
        db,
        session_id=session_id,
        user_query=query,
        bot_response=response,
        faq_id=faq_id,
        note_id=note_id,
    )

    topic = match.topic_name if match is not None else None
    logger.info(
        f"Chat log {chat_log.id} recorded for session {session_id} "
        f"(source={match.kind if match else 'generated'}, topic={topic})"
    )
    return LoggedExchange(chat_log_id=chat_log.id, topic=topic)
