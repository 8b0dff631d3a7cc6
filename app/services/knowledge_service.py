"""Read/write access to the knowledge base and chat audit tables.

This is the only module that knows how keywords are stored; everything
downstream receives :class:`~app.services.candidates.Candidate` objects with
a proper list of strings.
"""

import json
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.logging import get_logger
from app.models.chat_log import ChatLog
from app.models.chat_session import ChatSession
from app.models.faq import FAQ
from app.models.note import Note
from app.models.topic import Topic
from app.services.candidates import FAQCandidate, NoteCandidate

logger = get_logger("knowledge")


def parse_keywords(raw: Union[str, list, None], source: str = "record") -> List[str]:
    """Decode a stored keyword blob; anything unreadable becomes an empty list."""
    if raw is None or raw == "":
        return []

    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed keywords on {source}: {raw[:80]!r}")
            return []

    if not isinstance(value, list):
        logger.warning(f"Ignoring non-list keywords on {source}: {type(value).__name__}")
        return []

    return [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


def serialize_keywords(keywords: Union[str, List[str], None]) -> str:
    """Encode keywords for storage. Accepts a list or a comma-separated string."""
    if keywords is None:
        return "[]"
    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",")]
    return json.dumps([k for k in keywords if k])


def _topic_name(record: Union[FAQ, Note]) -> Optional[str]:
    return record.topic.name if record.topic is not None else None


# ─── Reads ───────────────────────────────────────────────────────────────────

async def list_faqs(db: AsyncSession, limit: Optional[int] = None) -> List[FAQCandidate]:
    """All FAQs, oldest first, with their topic name attached."""
    query = select(FAQ).options(selectinload(FAQ.topic)).order_by(FAQ.created_at, FAQ.id)
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return [
        FAQCandidate(
            id=faq.id,
            title=faq.question,
            body=faq.answer,
            keywords=parse_keywords(faq.keywords, source=f"faq {faq.id}"),
            topic_name=_topic_name(faq),
        )
        for faq in result.scalars().all()
    ]


async def list_notes(
    db: AsyncSession, active_only: bool = True, limit: Optional[int] = None
) -> List[NoteCandidate]:
    """Notes (active ones by default), oldest first, with their topic name attached."""
    query = select(Note).options(selectinload(Note.topic))
    if active_only:
        query = query.where(Note.is_active.is_(True))
    query = query.order_by(Note.created_at, Note.id)
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return [
        NoteCandidate(
            id=note.id,
            title=note.title,
            body=note.content,
            keywords=parse_keywords(note.keywords, source=f"note {note.id}"),
            topic_name=_topic_name(note),
        )
        for note in result.scalars().all()
    ]


async def list_topics(db: AsyncSession) -> List[Topic]:
    result = await db.execute(select(Topic).order_by(Topic.name))
    return list(result.scalars().all())


# ─── Writes ──────────────────────────────────────────────────────────────────

async def get_session(db: AsyncSession, session_id: str) -> Optional[ChatSession]:
    result = await db.execute(select(ChatSession).where(ChatSession.session_id == session_id))
    return result.scalar_one_or_none()


async def upsert_session(
    db: AsyncSession,
    session_id: str,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> ChatSession:
    """Return the session for ``session_id``, creating it on first use.

    A concurrent request may insert the same session id between our select
    and insert; the unique constraint rejects the loser, which then reads
    the winner's row.
    """
    existing = await get_session(db, session_id)
    if existing:
        return existing

    chat_session = ChatSession(session_id=session_id, user_agent=user_agent, ip_address=ip_address)
    try:
        async with db.begin_nested():
            db.add(chat_session)
            await db.flush()
    except IntegrityError:
        logger.info(f"Session {session_id} created concurrently, reusing it")
        existing = await get_session(db, session_id)
        if existing is None:
            raise
        return existing

    logger.info(f"Chat session created: {session_id}")
    return chat_session


async def insert_chat_log(
    db: AsyncSession,
    session_id: str,
    user_query: str,
    bot_response: str,
    faq_id=None,
    note_id=None,
) -> ChatLog:
    if faq_id is not None and note_id is not None:
        raise ValueError("A chat log references either an FAQ or a note, not both")

    chat_log = ChatLog(
        session_id=session_id,
        user_query=user_query,
        bot_response=bot_response,
        faq_id=faq_id,
        note_id=note_id,
    )
    db.add(chat_log)
    await db.flush()
    await db.refresh(chat_log)
    return chat_log
