"""SQLAlchemy models package."""

from app.models.admin import Admin
from app.models.topic import Topic
from app.models.faq import FAQ
from app.models.note import Note
from app.models.chat_session import ChatSession
from app.models.chat_log import ChatLog
from app.models.feedback import Feedback

__all__ = ["Admin", "Topic", "FAQ", "Note", "ChatSession", "ChatLog", "Feedback"]
