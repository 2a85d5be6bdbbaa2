# ============================================================================
# User Management Tests
# ============================================================================
import pytest
from httpx import AsyncClient

class TestUserAdministration:
    """Tests for admin-only user management"""

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client: AsyncClient, teacher):
        """Test teachers cannot list users"""
        response = await client.get("/api/users", headers=teacher.headers)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_list_filters_by_role(self, client: AsyncClient, admin, teacher, student, other_student):
        """Test role filter and password hashes never leak"""
        response = await client.get("/api/users?role=student", headers=admin.headers)

        assert response.status_code == 200
        body = response.json()
        assert {u["email"] for u in body["data"]} == {student.email, other_student.email}
        assert all("password_hash" not in u for u in body["data"])
        assert body["pagination"]["totalCount"] == 2

    @pytest.mark.asyncio
    async def test_search_by_email(self, client: AsyncClient, admin, teacher, student):
        """Test search matches email"""
        response = await client.get("/api/users?search=teacher@", headers=admin.headers)

        assert [u["id"] for u in response.json()["data"]] == [str(teacher.id)]

    @pytest.mark.asyncio
    async def test_promote_user(self, client: AsyncClient, admin, student):
        """Test admins can change a role"""
        response = await client.put(
            f"/api/users/{student.id}", json={"role": "teacher"}, headers=admin.headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "teacher"

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, client: AsyncClient, admin, student, other_student):
        """Test email uniqueness on update"""
        response = await client.put(
            f"/api/users/{student.id}", json={"email": other_student.email.upper()}, headers=admin.headers
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_deactivated_user_cannot_log_in(self, client: AsyncClient, admin, student):
        """Test delete deactivates instead of removing the account"""
        response = await client.delete(f"/api/users/{student.id}", headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

        response = await client.get(f"/api/users/{student.id}", headers=admin.headers)
        assert response.status_code == 200

        response = await client.post("/api/auth/login", json={
            "email": student.email,
            "password": "password123",
        })
        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"

    @pytest.mark.asyncio
    async def test_missing_user(self, client: AsyncClient, admin):
        """Test unknown ids are 404"""
        response = await client.get(
            "/api/users/00000000-0000-0000-0000-000000000000", headers=admin.headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"
