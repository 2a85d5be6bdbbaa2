# ============================================================================
# Quiz Result Endpoints
# ============================================================================
"""
Students submit attempts and read their own results; teachers and admins
can read everyone's.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import query_params, require_roles
from app.api.v1.resources import ResourceDescriptor, register_resource, run_operation
from app.core.database import get_db
from app.models.user import User
from app.schemas.assessment import QuizResultCreate, QuizResultListQuery
from app.services.assessment import QuizResultService

router = APIRouter(prefix="/quiz-results", tags=["quiz-results"])

descriptor = ResourceDescriptor(
    name="quiz_result",
    plural="quiz_results",
    service=QuizResultService,
    create_schema=QuizResultCreate,
    operations=("create",),
    method_names={"create": "submit_result"},
)


@router.get("")
async def list_quiz_results(
    actor: User = Depends(require_roles()),
    query: QuizResultListQuery = Depends(query_params(QuizResultListQuery)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("list_results", None, actor, QuizResultService(db).list_results(query, actor))


@router.get("/{result_id}")
async def get_quiz_result(
    result_id: UUID,
    actor: User = Depends(require_roles()),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("get_result", result_id, actor, QuizResultService(db).get_result(result_id, actor))


register_resource(router, descriptor)
