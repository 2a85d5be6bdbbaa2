# ============================================================================
# Topic & Lesson Tests
# ============================================================================
import pytest
from httpx import AsyncClient


async def create_topic(client: AsyncClient, account, subject_id: str, **overrides) -> dict:
    payload = {"subject_id": subject_id, "name": "Vectors", "order_index": 1}
    payload.update(overrides)
    response = await client.post("/api/topics", json=payload, headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_lesson(client: AsyncClient, account, subject_id: str, **overrides) -> dict:
    payload = {
        "title": "Introduction to vectors",
        "subject_id": subject_id,
        "subject_type": "physics",
        "content": {"introduction": "A vector has magnitude and direction.", "concepts": []},
        "duration_minutes": 30,
    }
    payload.update(overrides)
    response = await client.post("/api/lessons", json=payload, headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]

class TestTopics:
    """Tests for topic endpoints"""

    @pytest.mark.asyncio
    async def test_list_in_order(self, client: AsyncClient, teacher, student, make_subject):
        """Test topics list by order_index by default"""
        subject = await make_subject()
        await create_topic(client, teacher, subject["id"], name="Forces", order_index=2)
        await create_topic(client, teacher, subject["id"], name="Motion", order_index=1)

        response = await client.get(f"/api/topics?subject_id={subject['id']}", headers=student.headers)
        assert [t["name"] for t in response.json()["data"]] == ["Motion", "Forces"]

    @pytest.mark.asyncio
    async def test_student_cannot_create(self, client: AsyncClient, student, make_subject):
        subject = await make_subject()
        response = await client.post("/api/topics", json={
            "subject_id": subject["id"],
            "name": "Optics",
        }, headers=student.headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_unreferenced_topic(self, client: AsyncClient, admin, teacher, make_subject):
        """Test a topic nothing points at is removed"""
        subject = await make_subject()
        topic = await create_topic(client, teacher, subject["id"])

        response = await client.delete(f"/api/topics/{topic['id']}", headers=admin.headers)
        assert response.json()["data"]["outcome"] == "deleted"

        response = await client.get(f"/api/topics/{topic['id']}", headers=admin.headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_referenced_topic(self, client: AsyncClient, admin, teacher, make_subject):
        """Test a topic used by a lesson is only deactivated"""
        subject = await make_subject()
        topic = await create_topic(client, teacher, subject["id"])
        await create_lesson(client, teacher, subject["id"], topic_id=topic["id"])

        response = await client.delete(f"/api/topics/{topic['id']}", headers=admin.headers)
        assert response.json()["data"]["outcome"] == "deactivated"

        response = await client.get(f"/api/topics/{topic['id']}", headers=admin.headers)
        assert response.json()["data"]["is_active"] is False

class TestLessons:
    """Tests for lesson endpoints"""

    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient, teacher, student, make_subject):
        """Test the detail view carries content and references"""
        subject = await make_subject(name="Physics", code="PHY")
        lesson = await create_lesson(client, teacher, subject["id"])

        response = await client.get(f"/api/lessons/{lesson['id']}", headers=student.headers)
        data = response.json()["data"]
        assert data["content"]["introduction"].startswith("A vector")
        assert data["subject"]["code"] == "PHY"
        assert data["author"]["id"] == str(teacher.id)
        assert data["interactivity_level"] == "medium"

    @pytest.mark.asyncio
    async def test_list_omits_content(self, client: AsyncClient, teacher, student, make_subject):
        subject = await make_subject()
        await create_lesson(client, teacher, subject["id"])

        response = await client.get("/api/lessons?subject_type=physics", headers=student.headers)
        listed = response.json()["data"]
        assert len(listed) == 1
        assert "content" not in listed[0]

    @pytest.mark.asyncio
    async def test_unknown_topic(self, client: AsyncClient, teacher, make_subject):
        subject = await make_subject()
        response = await client.post("/api/lessons", json={
            "title": "Lost lesson",
            "subject_id": subject["id"],
            "subject_type": "history",
            "topic_id": "00000000-0000-0000-0000-000000000000",
        }, headers=teacher.headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Topic not found"

    @pytest.mark.asyncio
    async def test_only_author_or_admin_changes(
        self, client: AsyncClient, admin, teacher, other_teacher, make_subject
    ):
        """Test ownership on update and delete"""
        subject = await make_subject()
        lesson = await create_lesson(client, teacher, subject["id"])
        url = f"/api/lessons/{lesson['id']}"

        response = await client.put(url, json={"title": "Hijacked"}, headers=other_teacher.headers)
        assert response.status_code == 403
        response = await client.delete(url, headers=other_teacher.headers)
        assert response.status_code == 403

        response = await client.put(url, json={"title": "Vectors revisited"}, headers=teacher.headers)
        assert response.json()["data"]["title"] == "Vectors revisited"

        response = await client.delete(url, headers=admin.headers)
        assert response.json()["data"]["outcome"] == "deleted"

    @pytest.mark.asyncio
    async def test_missing_lesson_is_404_before_ownership(self, client: AsyncClient, other_teacher):
        response = await client.put(
            "/api/lessons/00000000-0000-0000-0000-000000000000",
            json={"title": "Nothing here"},
            headers=other_teacher.headers
        )
        assert response.status_code == 404
