# ============================================================================
# Subject Tests
# ============================================================================
import math
import pytest
from httpx import AsyncClient

class TestSubjectUniqueness:
    """Tests for name/code uniqueness"""

    @pytest.mark.asyncio
    async def test_duplicate_name_case_insensitive(self, client: AsyncClient, admin, make_subject):
        """Test a name differing only by case conflicts"""
        await make_subject(name="Mathematics", code="MATH")

        response = await client.post("/api/subjects", json={
            "name": "  MATHEMATICS ",
            "code": "MATH2",
            "category": "mathematics",
        }, headers=admin.headers)

        assert response.status_code == 409
        assert response.json()["message"] == "A subject with this name already exists"

    @pytest.mark.asyncio
    async def test_duplicate_code_case_insensitive(self, client: AsyncClient, admin, make_subject):
        """Test codes are uppercased before the uniqueness check"""
        await make_subject(name="Physics", code="PHY")

        response = await client.post("/api/subjects", json={
            "name": "Applied Physics",
            "code": "phy",
            "category": "sciences",
        }, headers=admin.headers)

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_deleted_subject_still_reserves_name(self, client: AsyncClient, admin, make_subject):
        """Test soft-deleted subjects keep their name and code"""
        subject = await make_subject(name="Chemistry", code="CHEM")
        response = await client.delete(f"/api/subjects/{subject['id']}", headers=admin.headers)
        assert response.status_code == 200

        response = await client.post("/api/subjects", json={
            "name": "chemistry",
            "code": "CHEM9",
            "category": "sciences",
        }, headers=admin.headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_update_to_taken_code(self, client: AsyncClient, admin, make_subject):
        """Test renaming onto another subject's code conflicts"""
        await make_subject(name="Biology", code="BIO")
        other = await make_subject(name="Geography", code="GEO")

        response = await client.put(
            f"/api/subjects/{other['id']}", json={"code": "bio"}, headers=admin.headers
        )
        assert response.status_code == 409

        # Re-sending its own values is not a conflict
        response = await client.put(
            f"/api/subjects/{other['id']}",
            json={"name": "Geography", "code": "GEO"},
            headers=admin.headers
        )
        assert response.status_code == 200

class TestSubjectCrud:
    """Tests for subject CRUD and permissions"""

    @pytest.mark.asyncio
    async def test_create_returns_stats(self, make_subject, admin):
        """Test a new subject starts with zeroed stats"""
        subject = await make_subject(name="History", code="hist")

        assert subject["code"] == "HIST"
        assert subject["created_by"] == str(admin.id)
        assert subject["stats"] == {
            "total_students": 0,
            "total_lessons": 0,
            "total_quizzes": 0,
            "total_questions": 0,
        }

    @pytest.mark.asyncio
    async def test_student_cannot_create(self, client: AsyncClient, student):
        """Test students are forbidden from creating subjects"""
        response = await client.post("/api/subjects", json={
            "name": "Music",
            "code": "MUS",
            "category": "arts",
        }, headers=student.headers)

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_teacher_cannot_delete(self, client: AsyncClient, teacher, make_subject):
        """Test only admins delete subjects"""
        subject = await make_subject()
        response = await client.delete(f"/api/subjects/{subject['id']}", headers=teacher.headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, client: AsyncClient, admin, student, make_subject):
        """Test deleted subjects are deactivated, still readable and hidden from lists"""
        subject = await make_subject()
        response = await client.delete(f"/api/subjects/{subject['id']}", headers=admin.headers)
        assert response.json()["data"]["outcome"] == "deactivated"

        response = await client.get(f"/api/subjects/{subject['id']}", headers=student.headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False
        assert response.json()["data"]["status"] == "inactive"

        response = await client.get("/api/subjects", headers=student.headers)
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_get_missing(self, client: AsyncClient, student):
        """Test unknown ids are 404"""
        response = await client.get(
            "/api/subjects/00000000-0000-0000-0000-000000000000", headers=student.headers
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Subject not found"

class TestSubjectCatalogue:
    """Tests for featured, popular, search and lookup routes"""

    @pytest.mark.asyncio
    async def test_featured_and_popular(self, client: AsyncClient, student, teacher, make_subject):
        """Test featured filter and popularity ordering"""
        quiet = await make_subject(name="Latin", code="LAT", is_featured=True)
        busy = await make_subject(name="English", code="ENG")
        for _ in range(3):
            response = await client.post(f"/api/subjects/{busy['id']}/students", headers=teacher.headers)
            assert response.status_code == 200

        response = await client.get("/api/subjects/featured", headers=student.headers)
        assert [s["id"] for s in response.json()["data"]] == [quiet["id"]]

        response = await client.get("/api/subjects/popular?limit=1", headers=student.headers)
        data = response.json()["data"]
        assert [s["id"] for s in data] == [busy["id"]]
        assert data[0]["stats"]["total_students"] == 3

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, student, make_subject):
        """Test search matches name, description and code"""
        await make_subject(name="Philosophy", code="PHILO", description="Logic and ethics")
        await make_subject(name="French", code="FR")

        response = await client.get("/api/subjects/search?q=ethic", headers=student.headers)
        assert [s["name"] for s in response.json()["data"]] == ["Philosophy"]

        response = await client.get("/api/subjects/search?q=e", headers=student.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, client: AsyncClient, student, make_subject):
        """Test LIKE wildcards in the search term do not match everything"""
        await make_subject(name="Economics", code="ECO")

        response = await client.get("/api/subjects/search?q=%25%25", headers=student.headers)
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_by_exam_type_and_education(self, client: AsyncClient, student, make_subject):
        """Test lookups on list-valued fields"""
        bac = await make_subject(exam_types=["BAC"], countries=["CM"], education_levels=["secondary"])
        await make_subject(exam_types=["GCE"], countries=["NG"], education_levels=["primary"])

        response = await client.get("/api/subjects/by-exam-type/BAC", headers=student.headers)
        assert [s["id"] for s in response.json()["data"]] == [bac["id"]]

        response = await client.get(
            "/api/subjects/by-exam-type/BAC?education_level=primary", headers=student.headers
        )
        assert response.json()["data"] == []

        response = await client.get("/api/subjects/by-education/secondary/CM", headers=student.headers)
        assert [s["id"] for s in response.json()["data"]] == [bac["id"]]

    @pytest.mark.asyncio
    async def test_accented_list_values(self, client: AsyncClient, student, make_subject):
        """Test list-valued filters match non-ASCII values"""
        subject = await make_subject(countries=["Sénégal"], exam_types=["Baccalauréat"])
        await make_subject(countries=["CM"], exam_types=["BAC"])

        response = await client.get("/api/subjects", params={"country": "Sénégal"}, headers=student.headers)
        assert response.json()["pagination"]["totalCount"] == 1
        assert response.json()["data"][0]["id"] == subject["id"]

        response = await client.get("/api/subjects/by-exam-type/Baccalauréat", headers=student.headers)
        assert [s["id"] for s in response.json()["data"]] == [subject["id"]]

    @pytest.mark.asyncio
    async def test_list_value_wildcards_match_literally(self, client: AsyncClient, student, make_subject):
        """Test LIKE wildcards in a list filter only match themselves"""
        await make_subject(countries=["CM"], education_levels=["secondary"])

        for value in ("%", "_", "C_"):
            response = await client.get("/api/subjects", params={"country": value}, headers=student.headers)
            assert response.json()["pagination"]["totalCount"] == 0

        response = await client.get("/api/subjects/by-education/%25/%25", headers=student.headers)
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_stats_never_negative(self, client: AsyncClient, teacher, make_subject):
        """Test decrementing a counter floors at zero"""
        subject = await make_subject()

        response = await client.patch(
            f"/api/subjects/{subject['id']}/stats",
            json={"field": "total_lessons", "increment": -5},
            headers=teacher.headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["stats"]["total_lessons"] == 0

        response = await client.patch(
            f"/api/subjects/{subject['id']}/stats",
            json={"field": "total_views", "increment": 1},
            headers=teacher.headers
        )
        assert response.status_code == 400

class TestSubjectListing:
    """Tests for the paginated subject list"""

    @pytest.mark.asyncio
    async def test_pagination_metadata(self, client: AsyncClient, student, make_subject):
        """Test total pages follow total count and page size"""
        for _ in range(7):
            await make_subject()

        response = await client.get("/api/subjects?page=2&limit=3", headers=student.headers)
        body = response.json()

        assert response.status_code == 200
        assert len(body["data"]) <= 3
        assert body["pagination"] == {
            "currentPage": 2,
            "totalPages": math.ceil(7 / 3),
            "totalCount": 7,
            "hasNextPage": True,
            "hasPrevPage": True,
        }

    @pytest.mark.asyncio
    async def test_filter_and_sort(self, client: AsyncClient, student, make_subject):
        """Test category filter and code ordering"""
        await make_subject(name="Zoology", code="ZOO", category="sciences")
        await make_subject(name="Algebra", code="ALG", category="mathematics")
        await make_subject(name="Botany", code="BOT", category="sciences")

        response = await client.get(
            "/api/subjects?category=sciences&sort_by=code&sort_order=desc", headers=student.headers
        )
        assert [s["code"] for s in response.json()["data"]] == ["ZOO", "BOT"]
