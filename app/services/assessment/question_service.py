# ============================================================================
# Question Service
# ============================================================================
from typing import Optional
from uuid import UUID
from sqlalchemy import select
import logging

from app.core.database import utcnow
from app.core.exceptions import BadRequestError
from app.models.curriculum import Question, Subject, Topic
from app.models.user import User
from app.schemas.common import to_record
from app.schemas.curriculum import QuestionCreate, QuestionListQuery, QuestionUpdate
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService, json_search, search_clause, serialize
from app.services.lifecycle import retire

logger = logging.getLogger(__name__)


class QuestionService(BaseService):
    """
    Question bank management.

    Questions are created by teachers or admins, edited by their author or an
    admin, and verified once by an admin. Verification is one-way: a verified
    question cannot be verified again.
    """
    model = Question
    not_found_message = "Question not found"

    async def _to_dict(self, question: Question) -> dict:
        data = serialize(question, exclude=("verifier_id", "quality_score", "feedback", "verified_at"))
        data["verification"] = question.verification
        data["subject"] = await self._summary(
            Subject, question.subject_id, Subject.id, Subject.name, Subject.code
        )
        data["topic"] = await self._summary(Topic, question.topic_id, Topic.id, Topic.name)
        data["author"] = await self._summary(User, question.created_by, User.id, User.name, User.email)
        return data

    async def create_question(self, data: QuestionCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)
        await self._require(Subject, payload["subject_id"], "Subject not found")
        if payload.get("topic_id"):
            await self._require(Topic, payload["topic_id"], "Topic not found")

        question = Question(**payload, created_by=actor.id)
        self.db.add(question)
        await self._commit()
        await self.db.refresh(question)

        logger.info(f"Question created: {question.id} by {actor.id}")
        return ServiceResponse(
            status_code=201,
            data=await self._to_dict(question),
            message="Question created successfully"
        )

    async def list_questions(self, query: QuestionListQuery) -> ServiceResponse:
        stmt = select(Question)

        if query.subject_id:
            stmt = stmt.where(Question.subject_id == query.subject_id)
        if query.topic_id:
            stmt = stmt.where(Question.topic_id == query.topic_id)
        if query.difficulty:
            stmt = stmt.where(Question.difficulty == query.difficulty.value)
        if query.format:
            stmt = stmt.where(Question.format == query.format.value)
        if query.is_verified is not None:
            stmt = stmt.where(Question.is_verified == query.is_verified)
        if query.created_by:
            stmt = stmt.where(Question.created_by == query.created_by)
        if query.search:
            stmt = stmt.where(search_clause(
                query.search, Question.content, Question.explanation, json_search(Question.tags)
            ))

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        questions, pagination = await self._paginate(stmt, query.page, query.limit)

        return ServiceResponse(
            data=[serialize(q, exclude=("correct_answer",)) for q in questions],
            message="Questions retrieved successfully",
            pagination=pagination
        )

    async def get_question(self, question_id: UUID) -> ServiceResponse:
        question = await self._get_or_404(question_id)
        return ServiceResponse(data=await self._to_dict(question), message="Question retrieved successfully")

    async def update_question(self, question_id: UUID, data: QuestionUpdate) -> ServiceResponse:
        question = await self._get_or_404(question_id)
        updates = {k: v for k, v in to_record(data, exclude_unset=True).items() if v is not None}
        if updates.get("topic_id"):
            await self._require(Topic, updates["topic_id"], "Topic not found")

        for field, value in updates.items():
            setattr(question, field, value)

        await self._commit()
        await self.db.refresh(question)

        logger.info(f"Question updated: {question_id}")
        return ServiceResponse(data=await self._to_dict(question), message="Question updated successfully")

    async def delete_question(self, question_id: UUID) -> ServiceResponse:
        question = await self._get_or_404(question_id)
        outcome = await retire(self.db, question, has_dependents=False)
        await self._commit()

        logger.info(f"Question deleted: {question_id}")
        return ServiceResponse(
            data={"id": question_id, "outcome": outcome.value},
            message="Question deleted successfully"
        )

    async def verify_question(
        self,
        question_id: UUID,
        verifier: User,
        quality_score: float,
        feedback: Optional[str] = None
    ) -> ServiceResponse:
        question = await self._get_or_404(question_id)
        if question.is_verified:
            raise BadRequestError("Question is already verified")

        question.is_verified = True
        question.verifier_id = verifier.id
        question.quality_score = quality_score
        question.feedback = feedback
        question.verified_at = utcnow()

        await self._commit()
        await self.db.refresh(question)

        logger.info(f"Question {question_id} verified by {verifier.id} (score {quality_score})")
        return ServiceResponse(data=await self._to_dict(question), message="Question verified successfully")
