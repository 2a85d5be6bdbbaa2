# ============================================================================
# Quiz Endpoints
# ============================================================================
"""
Quiz CRUD plus retake eligibility, statistics, explicit analytics refresh
and bulk updates.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import ADMIN_ONLY, STAFF, query_params, require_roles
from app.api.v1.resources import ResourceDescriptor, register_resource, run_operation
from app.core.database import get_db
from app.models.user import User
from app.schemas.assessment import (
    QuizBulkUpdate,
    QuizCreate,
    QuizDetailQuery,
    QuizListQuery,
    QuizUpdate,
)
from app.schemas.common import LimitQuery
from app.services.assessment import QuizService

router = APIRouter(prefix="/quizzes", tags=["quizzes"])

descriptor = ResourceDescriptor(
    name="quiz",
    plural="quizzes",
    service=QuizService,
    create_schema=QuizCreate,
    update_schema=QuizUpdate,
    list_query=QuizListQuery,
    operations=("list", "create", "update", "delete"),
    roles={"create": STAFF, "update": STAFF, "delete": ADMIN_ONLY},
)


@router.get("/popular")
async def popular_quizzes(
    actor: User = Depends(require_roles()),
    query: LimitQuery = Depends(query_params(LimitQuery)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation(
        "get_popular_quizzes", None, actor, QuizService(db).get_popular_quizzes(query.limit)
    )


@router.patch("/bulk")
async def bulk_update_quizzes(
    data: QuizBulkUpdate,
    actor: User = Depends(require_roles(*STAFF)),
    db: AsyncSession = Depends(get_db)
):
    """Apply one patch to many quizzes; reports matched and modified counts."""
    service = QuizService(db)
    return await run_operation(
        "bulk_update_quizzes", None, actor,
        service.bulk_update_quizzes(data.quiz_ids, data.update)
    )


@router.get("/subject/{subject_id}")
async def quizzes_by_subject(
    subject_id: UUID,
    actor: User = Depends(require_roles()),
    query: QuizListQuery = Depends(query_params(QuizListQuery)),
    db: AsyncSession = Depends(get_db)
):
    service = QuizService(db)
    return await run_operation(
        "list_quizzes_by_subject", subject_id, actor,
        service.list_quizzes_by_subject(subject_id, query)
    )


@router.get("/{quiz_id}")
async def get_quiz(
    quiz_id: UUID,
    actor: User = Depends(require_roles()),
    query: QuizDetailQuery = Depends(query_params(QuizDetailQuery)),
    db: AsyncSession = Depends(get_db)
):
    service = QuizService(db)
    return await run_operation(
        "get_quiz", quiz_id, actor, service.get_quiz(quiz_id, include_questions=query.include_questions)
    )


@router.get("/{quiz_id}/eligibility")
async def quiz_eligibility(
    quiz_id: UUID,
    actor: User = Depends(require_roles()),
    db: AsyncSession = Depends(get_db)
):
    """Whether the signed-in user may start another attempt."""
    return await run_operation(
        "can_user_take_quiz", quiz_id, actor, QuizService(db).can_user_take_quiz(quiz_id, actor.id)
    )


@router.get("/{quiz_id}/statistics")
async def quiz_statistics(
    quiz_id: UUID,
    actor: User = Depends(require_roles()),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation(
        "get_quiz_statistics", quiz_id, actor, QuizService(db).get_quiz_statistics(quiz_id)
    )


@router.post("/{quiz_id}/analytics")
async def refresh_quiz_analytics(
    quiz_id: UUID,
    actor: User = Depends(require_roles(*STAFF)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation(
        "update_quiz_analytics", quiz_id, actor, QuizService(db).update_quiz_analytics(quiz_id)
    )


register_resource(router, descriptor)
