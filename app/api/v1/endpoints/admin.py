"""Admin login and dashboard statistics."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging import logger
from app.dependencies import create_access_token, require_admin, verify_password
from app.models.admin import Admin
from app.models.chat_log import ChatLog
from app.models.chat_session import ChatSession
from app.models.faq import FAQ
from app.models.feedback import Feedback, THUMBS_UP
from app.models.note import Note
from app.models.topic import Topic
from app.schemas import AdminLogin, AdminResponse, RecentActivity, StatsResponse, TokenResponse

router = APIRouter()

RECENT_PER_KIND = 5
RECENT_TOTAL = 10


@router.post("/login", response_model=TokenResponse)
async def login(data: AdminLogin, db: AsyncSession = Depends(get_db)):
    """Exchange admin credentials for a bearer token."""
    result = await db.execute(select(Admin).where(Admin.email == data.email))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(data.password, admin.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not admin.is_active:
        raise HTTPException(status_code=401, detail="Your admin account has been disabled")

    admin.last_login = datetime.utcnow()
    await db.flush()
    await db.refresh(admin)

    logger.info(f"Admin logged in: {admin.email}")
    return TokenResponse(
        access_token=create_access_token(admin),
        admin=AdminResponse.model_validate(admin),
    )


async def _count(db: AsyncSession, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    for criterion in criteria:
        query = query.where(criterion)
    result = await db.execute(query)
    return result.scalar() or 0


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    current_admin: Admin = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard totals plus the most recently added notes and FAQs (admin only)."""
    notes_result = await db.execute(
        select(Note).where(Note.is_active.is_(True))
        .order_by(Note.created_at.desc())
        .limit(RECENT_PER_KIND)
    )
    faqs_result = await db.execute(
        select(FAQ).order_by(FAQ.created_at.desc()).limit(RECENT_PER_KIND)
    )

    recent = [
        RecentActivity(id=note.id, type="note", title=note.title, created_at=note.created_at)
        for note in notes_result.scalars().all()
    ] + [
        RecentActivity(id=faq.id, type="faq", title=faq.question, created_at=faq.created_at)
        for faq in faqs_result.scalars().all()
    ]
    recent.sort(key=lambda item: item.created_at, reverse=True)

    return StatsResponse(
        topics_count=await _count(db, Topic),
        notes_count=await _count(db, Note, Note.is_active.is_(True)),
        faqs_count=await _count(db, FAQ),
        sessions_count=await _count(db, ChatSession),
        chat_logs_count=await _count(db, ChatLog),
        feedback_count=await _count(db, Feedback),
        positive_feedback_count=await _count(db, Feedback, Feedback.rating == THUMBS_UP),
        recent_activity=recent[:RECENT_TOTAL],
    )
