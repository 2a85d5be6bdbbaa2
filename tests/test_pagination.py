# ============================================================================
# Pagination Tests
# ============================================================================
import math
import pytest
from httpx import AsyncClient

from app.schemas.responses import Pagination

class TestPaginationBuild:
    """Tests for pagination metadata"""

    @pytest.mark.parametrize("total,limit", [(0, 10), (1, 10), (10, 10), (11, 10), (99, 7), (100, 100)])
    def test_total_pages_is_ceiling(self, total, limit):
        """Test total pages is the ceiling of count over limit"""
        pagination = Pagination.build(page=1, limit=limit, total=total)

        assert pagination.totalPages == math.ceil(total / limit)
        assert pagination.totalCount == total
        assert pagination.hasPrevPage is False
        assert pagination.hasNextPage == (pagination.totalPages > 1)

    def test_last_page(self):
        """Test flags on the last page"""
        pagination = Pagination.build(page=3, limit=5, total=11)

        assert pagination.totalPages == 3
        assert pagination.hasNextPage is False
        assert pagination.hasPrevPage is True

    def test_page_past_the_end(self):
        """Test asking beyond the last page is not an error"""
        pagination = Pagination.build(page=9, limit=5, total=11)

        assert pagination.currentPage == 9
        assert pagination.hasNextPage is False

class TestListEndpoints:
    """Tests for pagination across list endpoints"""

    @pytest.mark.asyncio
    async def test_pages_cover_every_item_once(self, client: AsyncClient, student, make_subject, make_question):
        """Test walking all pages yields each question exactly once"""
        subject = await make_subject()
        created = {(await make_question(subject["id"]))["id"] for _ in range(5)}

        seen = []
        page = 1
        while True:
            response = await client.get(f"/api/questions?limit=2&page={page}", headers=student.headers)
            body = response.json()
            assert len(body["data"]) <= 2
            assert body["pagination"]["totalPages"] == math.ceil(5 / 2)
            seen.extend(q["id"] for q in body["data"])
            if not body["pagination"]["hasNextPage"]:
                break
            page += 1

        assert sorted(seen) == sorted(created)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", ["page=0", "limit=0", "limit=101", "sort_order=sideways"])
    async def test_invalid_paging_parameters(self, client: AsyncClient, student, params):
        """Test out-of-range paging is a validation error"""
        response = await client.get(f"/api/subjects?{params}", headers=student.headers)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_empty_lists(self, client: AsyncClient, student):
        """Test empty collections report zero pages"""
        response = await client.get("/api/subjects", headers=student.headers)
        assert response.json()["pagination"]["totalPages"] == 0

        response = await client.get("/api/topics", headers=student.headers)
        assert response.status_code == 200
        assert response.json()["data"] == []
