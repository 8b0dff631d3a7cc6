"""Shared fixtures: an in-memory SQLite database and an HTTP client bound to it."""

import os

# Must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from unittest.mock import AsyncMock, Mock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.database import Base, get_db
from app.main import app as fastapi_app
from app.models.faq import FAQ
from app.models.note import Note
from app.models.topic import Topic
from app.services.knowledge_service import serialize_keywords
from app.services.llm_service import LLMResult


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave as on PostgreSQL
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def fake_llm(text=None, error="service unavailable"):
    """An LLM stand-in whose ``complete`` returns a fixed result."""
    result = LLMResult.success(text) if text else LLMResult.failure(error)
    llm = Mock()
    llm.complete = AsyncMock(return_value=result)
    return llm


async def add_topic(db, name, description=None):
    topic = Topic(name=name, description=description)
    db.add(topic)
    await db.flush()
    return topic


async def add_faq(db, topic, question, answer, keywords=()):
    faq = FAQ(topic_id=topic.id, question=question, answer=answer, keywords=serialize_keywords(list(keywords)))
    db.add(faq)
    await db.flush()
    return faq


async def add_note(db, topic, title, content, keywords=(), is_active=True):
    note = Note(
        topic_id=topic.id,
        title=title,
        content=content,
        keywords=serialize_keywords(list(keywords)),
        is_active=is_active,
    )
    db.add(note)
    await db.flush()
    return note


@pytest.fixture
async def knowledge_base(db):
    """A small computer-science knowledge base, committed."""
    programming = await add_topic(db, "Programming Basics")
    structures = await add_topic(db, "Data Structures")
    systems = await add_topic(db, "Operating Systems")

    variables = await add_faq(
        db, programming,
        "What are variables in programming?",
        "A variable is a named storage location that holds a value.",
        ["variable"],
    )
    stack = await add_faq(
        db, structures,
        "What is a stack?",
        "A stack is a last-in, first-out collection.",
        ["stack", "lifo"],
    )
    threads = await add_note(
        db, systems,
        "Processes and Threads",
        "A process is a running program. A thread is a unit of execution inside a process.",
        ["thread", "process"],
    )
    await db.commit()
    return {
        "topics": [programming, structures, systems],
        "variables": variables,
        "stack": stack,
        "threads": threads,
    }
