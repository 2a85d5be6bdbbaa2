# ============================================================================
# Question Tests
# ============================================================================
import pytest
from httpx import AsyncClient

INVALID_QUESTION = {"content": "?", "format": "riddle"}

class TestQuestionAccess:
    """Tests for authentication, role and validation ordering"""

    @pytest.mark.asyncio
    async def test_no_token_is_unauthorized(self, client: AsyncClient):
        """Test a missing token wins over an invalid body"""
        response = await client.post("/api/questions", json=INVALID_QUESTION)

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_student_is_forbidden(self, client: AsyncClient, student):
        """Test a student role wins over an invalid body"""
        response = await client.post("/api/questions", json=INVALID_QUESTION, headers=student.headers)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_teacher_gets_validation_errors(self, client: AsyncClient, teacher):
        """Test an allowed role reaches validation"""
        response = await client.post("/api/questions", json=INVALID_QUESTION, headers=teacher.headers)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = {error["field"] for error in body["errors"]}
        assert {"content", "format", "difficulty", "subject_id"} <= fields

    @pytest.mark.asyncio
    async def test_multiple_choice_needs_correct_option(self, client: AsyncClient, teacher, make_subject):
        """Test cross-field option rules"""
        subject = await make_subject()
        response = await client.post("/api/questions", json={
            "content": "Pick the prime number",
            "format": "multiple_choice",
            "options": [{"text": "4"}, {"text": "6"}],
            "difficulty": "beginner",
            "subject_id": subject["id"],
        }, headers=teacher.headers)

        assert response.status_code == 400
        assert "correct option" in response.json()["errors"][0]["message"]

    @pytest.mark.asyncio
    async def test_unknown_subject(self, client: AsyncClient, teacher):
        """Test a question must reference an existing subject"""
        response = await client.post("/api/questions", json={
            "content": "What is the boiling point of water?",
            "format": "short_answer",
            "difficulty": "beginner",
            "subject_id": "00000000-0000-0000-0000-000000000000",
        }, headers=teacher.headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Subject not found"

class TestQuestionCrud:
    """Tests for question CRUD and ownership"""

    @pytest.mark.asyncio
    async def test_create_hydrates_references(self, make_subject, make_question, teacher):
        """Test created questions carry subject and author summaries"""
        subject = await make_subject(name="Calculus", code="CALC")
        question = await make_question(subject["id"])

        assert question["subject"] == {"id": subject["id"], "name": "Calculus", "code": "CALC"}
        assert question["author"]["id"] == str(teacher.id)
        assert question["verification"]["verified"] is False

    @pytest.mark.asyncio
    async def test_list_hides_answers(self, client: AsyncClient, student, make_subject, make_question):
        """Test the list view leaves out correct answers"""
        subject = await make_subject()
        question = await make_question(subject["id"])

        response = await client.get("/api/questions", headers=student.headers)
        listed = response.json()["data"][0]
        assert listed["id"] == question["id"]
        assert "correct_answer" not in listed

    @pytest.mark.asyncio
    async def test_list_search_over_tags(self, client: AsyncClient, student, make_subject, make_question):
        """Test search matches tags as well as content"""
        subject = await make_subject()
        await make_question(subject["id"], tags=["trigonometry"])
        await make_question(subject["id"], content="Name the capital of Kenya", tags=["geography"])

        response = await client.get("/api/questions?search=trigono", headers=student.headers)
        assert len(response.json()["data"]) == 1

        response = await client.get("/api/questions?search=kenya", headers=student.headers)
        assert response.json()["data"][0]["content"] == "Name the capital of Kenya"

    @pytest.mark.asyncio
    async def test_only_author_or_admin_updates(
        self, client: AsyncClient, admin, other_teacher, make_subject, make_question
    ):
        """Test another teacher cannot edit someone else's question"""
        subject = await make_subject()
        question = await make_question(subject["id"])

        response = await client.put(
            f"/api/questions/{question['id']}", json={"points": 5}, headers=other_teacher.headers
        )
        assert response.status_code == 403

        response = await client.put(
            f"/api/questions/{question['id']}", json={"points": 5}, headers=admin.headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["points"] == 5

    @pytest.mark.asyncio
    async def test_delete_is_admin_only_and_hard(
        self, client: AsyncClient, admin, teacher, make_subject, make_question
    ):
        """Test question delete removes the record"""
        subject = await make_subject()
        question = await make_question(subject["id"])

        response = await client.delete(f"/api/questions/{question['id']}", headers=teacher.headers)
        assert response.status_code == 403

        response = await client.delete(f"/api/questions/{question['id']}", headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["data"]["outcome"] == "deleted"

        response = await client.get(f"/api/questions/{question['id']}", headers=admin.headers)
        assert response.status_code == 404

class TestQuestionVerification:
    """Tests for one-way verification"""

    @pytest.mark.asyncio
    async def test_verify_once(self, client: AsyncClient, admin, make_subject, make_question):
        """Test verification records the reviewer and cannot be repeated"""
        subject = await make_subject()
        question = await make_question(subject["id"])
        url = f"/api/questions/{question['id']}/verify"

        response = await client.post(url, json={"quality_score": 8.5, "feedback": "Clear"}, headers=admin.headers)
        assert response.status_code == 200
        verification = response.json()["data"]["verification"]
        assert verification["verified"] is True
        assert verification["verifier_id"] == str(admin.id)
        assert verification["quality_score"] == 8.5
        assert verification["verified_at"] is not None

        response = await client.post(url, json={"quality_score": 3}, headers=admin.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Question is already verified"

    @pytest.mark.asyncio
    async def test_teacher_cannot_verify(self, client: AsyncClient, teacher, make_subject, make_question):
        """Test verification is reserved for admins"""
        subject = await make_subject()
        question = await make_question(subject["id"])

        response = await client.post(
            f"/api/questions/{question['id']}/verify", json={"quality_score": 9}, headers=teacher.headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_quality_score_range(self, client: AsyncClient, admin, make_subject, make_question):
        """Test quality scores stay within 0-10"""
        subject = await make_subject()
        question = await make_question(subject["id"])

        response = await client.post(
            f"/api/questions/{question['id']}/verify", json={"quality_score": 11}, headers=admin.headers
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "quality_score"
