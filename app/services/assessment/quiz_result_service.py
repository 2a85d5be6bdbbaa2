# ============================================================================
# Quiz Result Service
# ============================================================================
from uuid import UUID
from sqlalchemy import select
import logging

from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.assessment import Quiz, QuizResult
from app.models.user import User, UserRole
from app.schemas.assessment import QuizResultCreate, QuizResultListQuery
from app.schemas.common import to_record
from app.schemas.responses import ServiceResponse
from app.services.assessment.quiz_service import QuizService
from app.services.base import BaseService, serialize

logger = logging.getLogger(__name__)


class QuizResultService(BaseService):
    """
    Recording quiz attempts.

    A submission is checked against the quiz retake policy before it is
    stored. Quiz analytics are not touched here; they are refreshed through
    ``QuizService.update_quiz_analytics``.
    """
    model = QuizResult
    not_found_message = "Quiz result not found"

    @staticmethod
    def _can_see_all(actor: User) -> bool:
        return actor.role in (UserRole.TEACHER, UserRole.ADMIN)

    async def submit_result(self, data: QuizResultCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)

        quiz = await self.db.get(Quiz, payload["quiz_id"])
        if quiz is None or not quiz.is_active:
            raise NotFoundError("Quiz not found")

        if payload["score"] > quiz.total_points:
            raise BadRequestError(
                f"Score cannot exceed the quiz total of {quiz.total_points} points"
            )

        eligibility = await QuizService(self.db).eligibility(quiz, actor.id)
        if not eligibility["can_take"]:
            logger.info(f"Quiz attempt refused: user {actor.id} quiz {quiz.id}")
            raise ForbiddenError(eligibility["reason"])

        result = QuizResult(**payload, user_id=actor.id)
        self.db.add(result)
        await self._commit()
        await self.db.refresh(result)

        logger.info(f"Quiz result recorded: quiz {quiz.id} user {actor.id} score {result.score}")
        return ServiceResponse(
            status_code=201,
            data=serialize(result),
            message="Quiz result submitted successfully"
        )

    async def get_result(self, result_id: UUID, actor: User) -> ServiceResponse:
        result = await self._get_or_404(result_id)
        if result.user_id != actor.id and not self._can_see_all(actor):
            raise ForbiddenError("You can only view your own quiz results")
        return ServiceResponse(data=serialize(result), message="Quiz result retrieved successfully")

    async def list_results(self, query: QuizResultListQuery, actor: User) -> ServiceResponse:
        stmt = select(QuizResult)

        if query.quiz_id:
            stmt = stmt.where(QuizResult.quiz_id == query.quiz_id)
        if self._can_see_all(actor):
            if query.user_id:
                stmt = stmt.where(QuizResult.user_id == query.user_id)
        else:
            stmt = stmt.where(QuizResult.user_id == actor.id)

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        results, pagination = await self._paginate(stmt, query.page, query.limit)

        return ServiceResponse(
            data=[serialize(r) for r in results],
            message="Quiz results retrieved successfully",
            pagination=pagination
        )
