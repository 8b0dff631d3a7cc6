"""Seed the database with an admin account and starter course content.

Usage:
    source .venv/bin/activate
    python -m app.scripts.seed_content
"""

import asyncio

from sqlalchemy import select

import app.models  # noqa: F401
from app.core.database import Base, async_session, engine
from app.dependencies import hash_password
from app.models.admin import Admin
from app.models.faq import FAQ
from app.models.note import Note
from app.models.topic import Topic
from app.services.knowledge_service import serialize_keywords

ADMIN_EMAIL = "admin@com1111.edu"
ADMIN_PASSWORD = "admin123"

TOPICS = [
    ("Programming Basics", "Fundamental concepts of programming and coding", "💻", "#3B82F6"),
    ("Algorithms", "Step-by-step procedures for solving problems", "🧮", "#10B981"),
    ("Data Structures", "Ways to organize and store data efficiently", "🗂️", "#F59E0B"),
    ("Computer Architecture", "How computers are built and process instructions", "🖥️", "#8B5CF6"),
    ("Operating Systems", "Software that manages hardware and runs programs", "⚙️", "#EF4444"),
    ("Networking", "How computers communicate with each other", "🌐", "#06B6D4"),
]

FAQS = [
    (
        "Programming Basics",
        "What are variables in programming?",
        "A variable is a named storage location that holds a value which can change while "
        "a program runs. For example, `age = 20` stores the number 20 under the name `age`.",
        ["variable", "variables", "storage", "value"],
    ),
    (
        "Programming Basics",
        "What is a loop?",
        "A loop repeats a block of code while a condition holds. Common forms are `for` "
        "loops, which iterate over a sequence, and `while` loops, which run until a "
        "condition becomes false.",
        ["loop", "for loop", "while loop", "iteration"],
    ),
    (
        "Algorithms",
        "What is recursion?",
        "Recursion is when a function calls itself to solve smaller instances of the same "
        "problem. Every recursive function needs a base case that stops the calls.",
        ["recursion", "recursive", "base case"],
    ),
    (
        "Algorithms",
        "How does binary search work?",
        "Binary search finds an item in a sorted list by repeatedly halving the search "
        "range, comparing the middle element with the target. It runs in O(log n) time.",
        ["binary search", "search", "sorted"],
    ),
    (
        "Data Structures",
        "What is a stack?",
        "A stack is a last-in, first-out (LIFO) collection. Items are added with push and "
        "removed with pop, always from the top.",
        ["stack", "lifo", "push", "pop"],
    ),
    (
        "Networking",
        "What is an IP address?",
        "An IP address is a numeric label that identifies a device on a network so that "
        "packets can be routed to it.",
        ["ip address", "ipv4", "ipv6"],
    ),
]

NOTES = [
    (
        "Data Structures",
        "Queues",
        "A queue is a first-in, first-out (FIFO) collection. Elements are added at the back "
        "(enqueue) and removed from the front (dequeue). Queues model waiting lines, "
        "print jobs and breadth-first search.",
        ["queue", "fifo", "enqueue", "dequeue"],
    ),
    (
        "Operating Systems",
        "Processes and Threads",
        "A process is a running program with its own memory space. A thread is a unit of "
        "execution inside a process; threads of the same process share memory, which "
        "makes communication cheap but requires synchronization.",
        ["process", "thread", "concurrency"],
    ),
    (
        "Computer Architecture",
        "The CPU",
        "The central processing unit fetches, decodes and executes instructions. Its main "
        "parts are the control unit, the arithmetic logic unit and registers.",
        ["cpu", "processor", "alu", "registers"],
    ),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        result = await session.execute(select(Admin).where(Admin.email == ADMIN_EMAIL))
        if result.scalar_one_or_none():
            print(f"Admin already exists: {ADMIN_EMAIL}")
        else:
            session.add(Admin(
                email=ADMIN_EMAIL,
                name="Course Admin",
                password_hash=hash_password(ADMIN_PASSWORD),
                role="admin",
            ))
            print(f"Admin created: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")

        result = await session.execute(select(Topic))
        if result.scalars().first():
            print("Topics already exist, skipping course content")
            await session.commit()
            return

        topics = {}
        for name, description, icon, color in TOPICS:
            topic = Topic(name=name, description=description, icon=icon, color=color)
            session.add(topic)
            topics[name] = topic
        await session.flush()

        for topic_name, question, answer, keywords in FAQS:
            session.add(FAQ(
                topic_id=topics[topic_name].id,
                question=question,
                answer=answer,
                keywords=serialize_keywords(keywords),
            ))

        for topic_name, title, content, keywords in NOTES:
            session.add(Note(
                topic_id=topics[topic_name].id,
                title=title,
                content=content,
                keywords=serialize_keywords(keywords),
            ))

        await session.commit()
        print(f"Seeded {len(TOPICS)} topics, {len(FAQS)} FAQs and {len(NOTES)} notes")


if __name__ == "__main__":
    asyncio.run(seed())
