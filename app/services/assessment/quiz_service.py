# ============================================================================
# Quiz Service
# ============================================================================
"""
Quiz management, retake eligibility and analytics.

Quiz analytics are a snapshot: ``update_quiz_analytics`` recomputes them from
the quiz results and must be called explicitly after results are written.
``get_quiz_statistics`` always reads the results directly.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID
from sqlalchemy import func, or_, select, update
import logging
import math

from app.core.database import as_utc, utcnow
from app.core.exceptions import BadRequestError
from app.models.assessment import Quiz, QuizResult
from app.models.curriculum import Question, Subject, Topic
from app.models.user import User
from app.schemas.assessment import QuizBulkPatch, QuizCreate, QuizListQuery, QuizUpdate
from app.schemas.common import to_record
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService, json_search, search_clause, serialize
from app.services.lifecycle import DeleteOutcome, retire

logger = logging.getLogger(__name__)

RETAKE_COLUMNS = ("retake_allowed", "max_attempts", "cooldown_hours")
ANALYTICS_COLUMNS = ("total_attempts", "average_score", "average_time", "completion_rate")
PASS_PERCENT = 60

DISTRIBUTION_BUCKETS = [
    ("0-20%", 0, 20),
    ("21-40%", 20, 40),
    ("41-60%", 40, 60),
    ("61-80%", 60, 80),
    ("81-100%", 80, 100),
]


# ============================================================================
# Aggregation helpers
# ============================================================================
def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_analytics(results: Sequence[QuizResult]) -> Dict[str, Any]:
    """Attempts, rounded averages and completion rate (% of results with score > 0)"""
    total_attempts = len(results)
    if total_attempts == 0:
        return {
            "total_attempts": 0,
            "average_score": 0,
            "average_time": 0,
            "completion_rate": 0,
        }

    total_score = sum(r.score for r in results)
    total_time = sum(r.time_taken for r in results)
    completed = [r for r in results if r.score > 0]

    return {
        "total_attempts": total_attempts,
        "average_score": round_half_up(total_score / total_attempts),
        "average_time": round_half_up(total_time / total_attempts),
        "completion_rate": round_half_up(len(completed) / total_attempts * 100),
    }


def score_distribution(scores: Sequence[float], total_points: float) -> List[Dict[str, Any]]:
    """Five 20% buckets; a score lands in the bucket where ``min < score <= max``"""
    distribution = []
    for label, low, high in DISTRIBUTION_BUCKETS:
        lower = total_points * low / 100
        upper = total_points * high / 100
        distribution.append({
            "label": label,
            "count": sum(1 for score in scores if lower < score <= upper),
        })
    return distribution


def _question_count(data, payload: Dict[str, Any]) -> None:
    # question_ids wins over any total_questions sent with it
    if "question_ids" in data.model_fields_set and payload.get("question_ids") is not None:
        payload["total_questions"] = len(payload["question_ids"])


def _flatten(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map request fields onto quiz columns"""
    record = dict(payload)
    # A partial policy only touches the columns it names
    policy = record.pop("retake_policy", None) or {}
    for key, value in policy.items():
        record["retake_allowed" if key == "allowed" else key] = value
    for key in ("topic_ids", "question_ids"):
        if record.get(key) is not None:
            record[key] = [str(item) for item in record[key]]
    return record


class QuizService(BaseService):
    model = Quiz
    not_found_message = "Quiz not found"

    # =========================================================================
    # Serialization
    # =========================================================================
    async def _to_dict(self, quiz: Quiz, include_questions: bool = False) -> Dict[str, Any]:
        data = serialize(quiz, exclude=RETAKE_COLUMNS + ANALYTICS_COLUMNS + ("created_by",))
        data["retake_policy"] = quiz.retake_policy
        data["analytics"] = quiz.analytics
        data["subject"] = await self._summary(
            Subject, quiz.subject_id, Subject.id, Subject.name, Subject.code
        )
        data["topics"] = await self._summaries(Topic, quiz.topic_ids, Topic.id, Topic.name)
        data["created_by"] = await self._summary(User, quiz.created_by, User.id, User.name, User.email)

        if include_questions:
            data["questions"] = await self._summaries(
                Question, quiz.question_ids,
                Question.id, Question.content, Question.format,
                Question.options, Question.difficulty, Question.points
            )
        return data

    # =========================================================================
    # CRUD
    # =========================================================================
    async def create_quiz(self, data: QuizCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)
        _question_count(data, payload)
        if payload.get("total_questions") is None:
            payload["total_questions"] = len(payload.get("question_ids") or [])

        await self._require(Subject, payload["subject_id"], "Subject not found")

        quiz = Quiz(**_flatten(payload), created_by=actor.id)
        self.db.add(quiz)
        await self._commit()
        await self.db.refresh(quiz)

        logger.info(f"Quiz created successfully: {quiz.id}")
        return ServiceResponse(
            status_code=201,
            data=await self._to_dict(quiz),
            message="Quiz created successfully"
        )

    async def list_quizzes(self, query: QuizListQuery) -> ServiceResponse:
        stmt = select(Quiz).where(Quiz.is_active == query.is_active)

        if query.subject_id:
            stmt = stmt.where(Quiz.subject_id == query.subject_id)
        if query.level:
            stmt = stmt.where(Quiz.level == query.level)
        if query.difficulty:
            stmt = stmt.where(Quiz.difficulty == query.difficulty.value)
        if query.premium_only is not None:
            stmt = stmt.where(Quiz.premium_only == query.premium_only)
        if query.search:
            stmt = stmt.where(search_clause(
                query.search, Quiz.title, Quiz.description, json_search(Quiz.tags)
            ))

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        quizzes, pagination = await self._paginate(stmt, query.page, query.limit)

        logger.info(f"Retrieved {len(quizzes)} quizzes (total {pagination.totalCount})")
        return ServiceResponse(
            data=[await self._to_dict(q) for q in quizzes],
            message="Quizzes retrieved successfully",
            pagination=pagination
        )

    async def list_quizzes_by_subject(self, subject_id: UUID, query: QuizListQuery) -> ServiceResponse:
        scoped = query.model_copy(update={"subject_id": subject_id, "is_active": True})
        return await self.list_quizzes(scoped)

    async def get_quiz(self, quiz_id: UUID, include_questions: bool = False) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)
        return ServiceResponse(
            data=await self._to_dict(quiz, include_questions=include_questions),
            message="Quiz retrieved successfully"
        )

    async def update_quiz(self, quiz_id: UUID, data: QuizUpdate) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)

        payload = {k: v for k, v in to_record(data, exclude_unset=True).items() if v is not None}
        _question_count(data, payload)
        if payload.get("subject_id"):
            await self._require(Subject, payload["subject_id"], "Subject not found")

        for field, value in _flatten(payload).items():
            setattr(quiz, field, value)

        await self._commit()
        await self.db.refresh(quiz)

        logger.info(f"Quiz updated successfully: {quiz_id}")
        return ServiceResponse(data=await self._to_dict(quiz), message="Quiz updated successfully")

    async def delete_quiz(self, quiz_id: UUID) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)
        has_results = await self._exists(QuizResult, QuizResult.quiz_id == quiz_id)

        outcome = await retire(self.db, quiz, has_dependents=has_results)
        await self._commit()

        if outcome == DeleteOutcome.DEACTIVATED:
            logger.info(f"Quiz deactivated (has results): {quiz_id}")
            message = "Quiz deactivated successfully (has existing results)"
        else:
            logger.info(f"Quiz deleted successfully: {quiz_id}")
            message = "Quiz deleted successfully"

        return ServiceResponse(data={"id": quiz_id, "outcome": outcome.value}, message=message)

    async def get_popular_quizzes(self, limit: int = 10) -> ServiceResponse:
        result = await self.db.execute(Quiz.popular_query(limit))
        quizzes = result.scalars().all()
        return ServiceResponse(
            data=[await self._to_dict(q) for q in quizzes],
            message="Popular quizzes retrieved successfully"
        )

    # =========================================================================
    # Retake eligibility
    # =========================================================================
    async def eligibility(self, quiz: Quiz, user_id: UUID, now: Optional[datetime] = None) -> Dict[str, Any]:
        attempts_result = await self.db.execute(
            select(func.count(QuizResult.id))
            .where(QuizResult.quiz_id == quiz.id, QuizResult.user_id == user_id)
        )
        attempts = attempts_result.scalar() or 0

        if quiz.can_user_retake(attempts):
            return {
                "can_take": True,
                "attempts_used": attempts,
                "max_attempts": quiz.max_attempts,
            }

        # Attempts exhausted: the cap is hard, the cooldown time is informational
        next_retake_time = None
        if quiz.retake_allowed:
            last_result = await self.db.execute(
                select(func.max(QuizResult.created_at))
                .where(QuizResult.quiz_id == quiz.id, QuizResult.user_id == user_id)
            )
            last_attempt_at = last_result.scalar()
            if last_attempt_at is not None:
                candidate = quiz.get_next_retake_time(last_attempt_at)
                if candidate > as_utc(now or utcnow()):
                    next_retake_time = candidate

        return {
            "can_take": False,
            "reason": "Maximum attempts reached",
            "attempts_used": attempts,
            "max_attempts": quiz.max_attempts,
            "next_retake_time": next_retake_time,
        }

    async def can_user_take_quiz(self, quiz_id: UUID, user_id: UUID) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)
        return ServiceResponse(
            data=await self.eligibility(quiz, user_id),
            message="Quiz eligibility checked"
        )

    # =========================================================================
    # Analytics
    # =========================================================================
    async def _results_for(self, quiz_id: UUID) -> List[QuizResult]:
        result = await self.db.execute(select(QuizResult).where(QuizResult.quiz_id == quiz_id))
        return list(result.scalars().all())

    async def update_quiz_analytics(self, quiz_id: UUID) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)
        results = await self._results_for(quiz_id)

        if not results:
            return ServiceResponse(data=quiz.analytics, message="No results to aggregate")

        analytics = compute_analytics(results)
        for field, value in analytics.items():
            setattr(quiz, field, value)
        await self._commit()

        logger.info(f"Quiz analytics updated: {quiz_id} ({analytics['total_attempts']} attempts)")
        return ServiceResponse(data=analytics, message="Quiz analytics updated successfully")

    async def get_quiz_statistics(self, quiz_id: UUID) -> ServiceResponse:
        quiz = await self._get_or_404(quiz_id)
        results = await self._results_for(quiz_id)
        scores = [r.score for r in results]
        summary = compute_analytics(results)

        stats = {
            "total_attempts": summary["total_attempts"],
            "average_score": summary["average_score"],
            "average_time": summary["average_time"],
            "highest_score": max(scores) if scores else 0,
            "lowest_score": min(scores) if scores else 0,
            "pass_rate": (
                round_half_up(
                    sum(1 for s in scores if s >= quiz.total_points * PASS_PERCENT / 100) / len(scores) * 100
                )
                if scores else 0
            ),
            "score_distribution": score_distribution(scores, quiz.total_points),
        }
        return ServiceResponse(data=stats, message="Quiz statistics retrieved successfully")

    # =========================================================================
    # Bulk operations
    # =========================================================================
    async def bulk_update_quizzes(self, quiz_ids: List[UUID], patch: QuizBulkPatch) -> ServiceResponse:
        values = {k: v for k, v in to_record(patch, exclude_unset=True).items() if v is not None}
        if not values:
            raise BadRequestError("No fields to update")

        ids = list(dict.fromkeys(quiz_ids))
        matched_result = await self.db.execute(
            select(func.count(Quiz.id)).where(Quiz.id.in_(ids))
        )
        matched = matched_result.scalar() or 0

        # Rows already holding every value are matched but not modified
        differs = or_(*(getattr(Quiz, field).is_distinct_from(value) for field, value in values.items()))
        result = await self.db.execute(
            update(Quiz)
            .where(Quiz.id.in_(ids), differs)
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        modified = result.rowcount or 0
        await self._commit()

        logger.info(f"Bulk quiz update: matched={matched} modified={modified} fields={sorted(values)}")
        return ServiceResponse(
            data={"matchedCount": matched, "modifiedCount": modified},
            message="Bulk update completed successfully"
        )
