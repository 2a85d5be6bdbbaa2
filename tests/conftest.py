# ============================================================================
# Test Configuration & Fixtures
# ============================================================================
import os

# Required settings must exist before the app module is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./exam_prep_test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

import itertools
from dataclasses import dataclass
from typing import AsyncGenerator, Dict
from uuid import UUID

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.core.security import create_access_token, get_password_hash
from app.main import create_app
from app.models.user import User, UserRole

PASSWORD = "password123"


@dataclass
class Account:
    id: UUID
    email: str
    role: UserRole
    headers: Dict[str, str]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Fresh SQLite database file per test"""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        JWT_SECRET_KEY="test-secret-key",
        ENVIRONMENT="test",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = create_app(settings)
    context = application.state.context
    await context.startup()
    yield application
    await context.shutdown()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def create_account(app: FastAPI, role: UserRole, email: str) -> Account:
    context = app.state.context
    async with context.database.session() as session:
        user = User(
            name=f"{role.value.title()} User",
            email=email,
            password_hash=get_password_hash(PASSWORD),
            role=role,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)

    token = create_access_token(context.settings, {"sub": str(user.id), "role": role.value})
    return Account(id=user.id, email=email, role=role, headers={"Authorization": f"Bearer {token}"})


@pytest.fixture
async def admin(app: FastAPI) -> Account:
    return await create_account(app, UserRole.ADMIN, "admin@example.com")


@pytest.fixture
async def teacher(app: FastAPI) -> Account:
    return await create_account(app, UserRole.TEACHER, "teacher@example.com")


@pytest.fixture
async def other_teacher(app: FastAPI) -> Account:
    return await create_account(app, UserRole.TEACHER, "teacher2@example.com")


@pytest.fixture
async def student(app: FastAPI) -> Account:
    return await create_account(app, UserRole.STUDENT, "student@example.com")


@pytest.fixture
async def other_student(app: FastAPI) -> Account:
    return await create_account(app, UserRole.STUDENT, "student2@example.com")


# ============================================================================
# Resource factories (created through the API)
# ============================================================================
@pytest.fixture
def make_subject(client: AsyncClient, admin: Account):
    counter = itertools.count(1)

    async def _make(**overrides) -> dict:
        n = next(counter)
        payload = {
            "name": f"Subject {n}",
            "code": f"SUB{n:03d}",
            "category": "sciences",
            "exam_types": ["BAC"],
            "countries": ["CM"],
            "education_levels": ["secondary"],
        }
        payload.update(overrides)
        response = await client.post("/api/subjects", json=payload, headers=admin.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_question(client: AsyncClient, teacher: Account):
    async def _make(subject_id: str, account: Account = None, **overrides) -> dict:
        payload = {
            "content": "What is the derivative of x squared?",
            "format": "multiple_choice",
            "options": [
                {"text": "2x", "is_correct": True},
                {"text": "x", "is_correct": False},
            ],
            "correct_answer": "2x",
            "difficulty": "beginner",
            "points": 2,
            "subject_id": subject_id,
            "tags": ["calculus"],
        }
        payload.update(overrides)
        headers = (account or teacher).headers
        response = await client.post("/api/questions", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_quiz(client: AsyncClient, teacher: Account):
    async def _make(subject_id: str, **overrides) -> dict:
        payload = {
            "title": "Calculus basics",
            "subject_id": subject_id,
            "total_points": 20,
        }
        payload.update(overrides)
        response = await client.post("/api/quizzes", json=payload, headers=teacher.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
