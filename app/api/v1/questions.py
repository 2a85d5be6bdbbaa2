# ============================================================================
# Question Endpoints
# ============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import ADMIN_ONLY, STAFF, require_roles
from app.api.v1.resources import ResourceDescriptor, register_resource, run_operation
from app.core.database import get_db
from app.models.user import User
from app.schemas.curriculum import QuestionCreate, QuestionListQuery, QuestionUpdate, QuestionVerify
from app.services.assessment import QuestionService

router = APIRouter(prefix="/questions", tags=["questions"])

descriptor = ResourceDescriptor(
    name="question",
    plural="questions",
    service=QuestionService,
    create_schema=QuestionCreate,
    update_schema=QuestionUpdate,
    list_query=QuestionListQuery,
    roles={"create": STAFF, "update": STAFF, "delete": ADMIN_ONLY},
    owner_checked=frozenset({"update"}),
)


@router.post("/{question_id}/verify")
async def verify_question(
    question_id: UUID,
    data: QuestionVerify,
    actor: User = Depends(require_roles(*ADMIN_ONLY)),
    db: AsyncSession = Depends(get_db)
):
    """Mark a question as reviewed, with a quality score and optional feedback."""
    service = QuestionService(db)
    return await run_operation(
        "verify_question", question_id, actor,
        service.verify_question(question_id, actor, data.quality_score, data.feedback)
    )


register_resource(router, descriptor)
