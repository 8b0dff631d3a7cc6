from fastapi import APIRouter

from app.api.v1.endpoints import admin, chat, feedback, session, topics

api_router = APIRouter()

api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
api_router.include_router(session.router, prefix="/session", tags=["Session"])
api_router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
api_router.include_router(topics.router, prefix="/topics", tags=["Topics"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
