"""Chat log model — audit trail of every answered message."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class ChatLog(Base):
    __tablename__ = "chat_logs"
    __table_args__ = (
        CheckConstraint(
            "faq_id IS NULL OR note_id IS NULL",
            name="ck_chat_logs_single_source",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("chat_sessions.session_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_query: Mapped[str] = mapped_column(Text, nullable=False)
    bot_response: Mapped[str] = mapped_column(Text, nullable=False)
    faq_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("faqs.id", ondelete="SET NULL"), nullable=True
    )
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("notes.id", ondelete="SET NULL"), nullable=True
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    session = relationship("ChatSession", back_populates="chat_logs")
    faq = relationship("FAQ")
    note = relationship("Note")
    feedback = relationship("Feedback", back_populates="chat_log", cascade="all, delete-orphan")
