"""Public topic listing for the chat sidebar."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.faq import FAQ
from app.models.note import Note
from app.models.topic import Topic
from app.schemas import TopicResponse

router = APIRouter()


@router.get("/", response_model=List[TopicResponse])
async def list_topics(db: AsyncSession = Depends(get_db)):
    """List all topics by name, with how many FAQs and active notes each has."""
    faq_counts = (
        select(FAQ.topic_id, func.count(FAQ.id).label("faq_count"))
        .group_by(FAQ.topic_id)
        .subquery()
    )
    note_counts = (
        select(Note.topic_id, func.count(Note.id).label("note_count"))
        .where(Note.is_active.is_(True))
        .group_by(Note.topic_id)
        .subquery()
    )

    result = await db.execute(
        select(Topic, faq_counts.c.faq_count, note_counts.c.note_count)
        .outerjoin(faq_counts, faq_counts.c.topic_id == Topic.id)
        .outerjoin(note_counts, note_counts.c.topic_id == Topic.id)
        .order_by(Topic.name)
    )

    return [
        TopicResponse(
            id=topic.id,
            name=topic.name,
            description=topic.description,
            icon=topic.icon,
            color=topic.color,
            faq_count=faq_count or 0,
            note_count=note_count or 0,
        )
        for topic, faq_count, note_count in result.all()
    ]
