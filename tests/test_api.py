"""
HTTP tests for the chat, session, feedback, topic and admin endpoints.
"""
import uuid
from unittest.mock import patch

import pytest

from app.dependencies import hash_password
from app.models.admin import Admin
from app.services import answer_service as answer_module

from conftest import fake_llm

API = "/api/v1"


@pytest.fixture
def ai_down():
    with patch.object(answer_module.answer_service, "llm", fake_llm()):
        yield


@pytest.fixture
async def admin(db):
    account = Admin(
        email="admin@com1111.edu",
        name="Course Admin",
        password_hash=hash_password("admin123"),
        role="admin",
    )
    db.add(account)
    await db.commit()
    return account


async def login(client, email="admin@com1111.edu", password="admin123"):
    return await client.post(f"{API}/admin/login", json={"email": email, "password": password})


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestChatEndpoint:
    """POST /chat/"""

    async def test_database_answer(self, client, knowledge_base, ai_down):
        response = await client.post(
            f"{API}/chat/", json={"message": "What is a variable?", "sessionId": "widget-1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["response"] == knowledge_base["variables"].answer
        assert body["topic"] == "Programming Basics"
        uuid.UUID(body["chatLogId"])

    async def test_static_fallback_when_ai_unavailable(self, client, knowledge_base, ai_down):
        response = await client.post(
            f"{API}/chat/", json={"message": "What is quantum entanglement?", "sessionId": "widget-1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert "• Data Structures" in body["response"]
        assert body["topic"] is None

    @pytest.mark.parametrize(
        "payload",
        [{"message": "hi"}, {"sessionId": "abc"}, {"message": "", "sessionId": "abc"}, {}],
    )
    async def test_missing_fields(self, client, payload):
        response = await client.post(f"{API}/chat/", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "Message and sessionId are required"
        assert set(response.json()) == {"detail"}


class TestSessionEndpoints:
    """POST /session/ and GET /session/{id}"""

    async def test_new_session(self, client):
        response = await client.post(
            f"{API}/session/", json={}, headers={"user-agent": "pytest", "x-forwarded-for": "10.0.0.1, 10.0.0.2"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["exists"] is False
        uuid.UUID(body["sessionId"])

        detail = await client.get(f"{API}/session/{body['sessionId']}")
        assert detail.status_code == 200
        assert detail.json()["userAgent"] == "pytest"
        assert detail.json()["ipAddress"] == "10.0.0.1"

    async def test_resume_existing_session(self, client):
        created = (await client.post(f"{API}/session/", json={})).json()

        response = await client.post(f"{API}/session/", json={"sessionId": created["sessionId"]})

        assert response.json() == {"sessionId": created["sessionId"], "exists": True}

    async def test_unknown_session_id_gets_a_fresh_one(self, client):
        response = await client.post(f"{API}/session/", json={"sessionId": "never-seen"})

        body = response.json()
        assert body["exists"] is False
        assert body["sessionId"] != "never-seen"

    async def test_history_newest_first(self, client, knowledge_base, ai_down):
        for message in ["What is a variable?", "define stack"]:
            await client.post(f"{API}/chat/", json={"message": message, "sessionId": "hist"})

        response = await client.get(f"{API}/session/hist")

        assert response.status_code == 200
        logs = response.json()["chatLogs"]
        assert len(logs) == 2
        assert {log["userQuery"] for log in logs} == {"What is a variable?", "define stack"}
        assert logs[0]["timestamp"] >= logs[1]["timestamp"]

    async def test_unknown_session_history(self, client):
        response = await client.get(f"{API}/session/missing")
        assert response.status_code == 404


class TestFeedbackEndpoint:
    """POST /feedback/"""

    async def _chat_log_id(self, client):
        response = await client.post(f"{API}/chat/", json={"message": "define stack", "sessionId": "fb"})
        return response.json()["chatLogId"]

    async def test_thumbs_up(self, client, knowledge_base, ai_down):
        chat_log_id = await self._chat_log_id(client)

        response = await client.post(
            f"{API}/feedback/", json={"chatLogId": chat_log_id, "rating": 2, "comment": "helpful"}
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        uuid.UUID(response.json()["feedbackId"])

    async def test_invalid_rating(self, client, knowledge_base, ai_down):
        chat_log_id = await self._chat_log_id(client)

        response = await client.post(f"{API}/feedback/", json={"chatLogId": chat_log_id, "rating": 5})

        assert response.status_code == 400

    async def test_missing_rating(self, client):
        response = await client.post(f"{API}/feedback/", json={"chatLogId": str(uuid.uuid4())})
        assert response.status_code == 400

    async def test_unknown_chat_log(self, client):
        response = await client.post(f"{API}/feedback/", json={"chatLogId": str(uuid.uuid4()), "rating": 1})
        assert response.status_code == 404


class TestTopicsEndpoint:
    """GET /topics/"""

    async def test_topics_with_counts(self, client, knowledge_base):
        response = await client.get(f"{API}/topics/")

        assert response.status_code == 200
        topics = response.json()
        assert [t["name"] for t in topics] == ["Data Structures", "Operating Systems", "Programming Basics"]
        counts = {t["name"]: (t["faq_count"], t["note_count"]) for t in topics}
        assert counts == {
            "Data Structures": (1, 0),
            "Operating Systems": (0, 1),
            "Programming Basics": (1, 0),
        }


class TestAdminEndpoints:
    """POST /admin/login and GET /admin/stats"""

    async def test_login_and_stats(self, client, admin, knowledge_base, ai_down):
        await client.post(f"{API}/chat/", json={"message": "define stack", "sessionId": "s"})

        response = await login(client)
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["admin"]["email"] == "admin@com1111.edu"

        stats = await client.get(f"{API}/admin/stats", headers={"Authorization": f"Bearer {token}"})

        assert stats.status_code == 200
        body = stats.json()
        assert body["topics_count"] == 3
        assert body["faqs_count"] == 2
        assert body["notes_count"] == 1
        assert body["sessions_count"] == 1
        assert body["chat_logs_count"] == 1
        assert {item["type"] for item in body["recent_activity"]} == {"faq", "note"}

    async def test_wrong_password(self, client, admin):
        response = await login(client, password="nope")
        assert response.status_code == 401

    async def test_stats_require_token(self, client):
        response = await client.get(f"{API}/admin/stats")
        assert response.status_code == 401

    async def test_stats_reject_bad_token(self, client):
        response = await client.get(f"{API}/admin/stats", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
