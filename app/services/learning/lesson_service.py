# ============================================================================
# Lesson Service
# ============================================================================
"""
Lessons for every subject type share one table; the per-subject structure
(introduction, concepts, exercises, source analysis, ...) lives in the
free-form ``content`` document. Ownership checks happen in the API layer
before any of these methods run.
"""
from uuid import UUID
from sqlalchemy import select
import logging

from app.models.curriculum import Lesson, Subject, Topic
from app.models.user import User
from app.schemas.common import to_record
from app.schemas.curriculum import LessonCreate, LessonListQuery, LessonUpdate
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService, search_clause, serialize
from app.services.lifecycle import retire

logger = logging.getLogger(__name__)


class LessonService(BaseService):
    model = Lesson
    not_found_message = "Lesson not found"

    async def _to_dict(self, lesson: Lesson) -> dict:
        data = serialize(lesson)
        data["subject"] = await self._summary(
            Subject, lesson.subject_id, Subject.id, Subject.name, Subject.code
        )
        data["topic"] = await self._summary(Topic, lesson.topic_id, Topic.id, Topic.name)
        data["author"] = await self._summary(User, lesson.created_by, User.id, User.name, User.email)
        return data

    async def create_lesson(self, data: LessonCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)
        await self._require(Subject, payload["subject_id"], "Subject not found")
        if payload.get("topic_id"):
            await self._require(Topic, payload["topic_id"], "Topic not found")

        lesson = Lesson(**payload, created_by=actor.id)
        self.db.add(lesson)
        await self._commit()
        await self.db.refresh(lesson)

        logger.info(f"Lesson created successfully: {lesson.id} ({lesson.subject_type})")
        return ServiceResponse(
            status_code=201,
            data=await self._to_dict(lesson),
            message="Lesson created successfully"
        )

    async def list_lessons(self, query: LessonListQuery) -> ServiceResponse:
        stmt = select(Lesson).where(Lesson.is_active == True)

        if query.subject_id:
            stmt = stmt.where(Lesson.subject_id == query.subject_id)
        if query.topic_id:
            stmt = stmt.where(Lesson.topic_id == query.topic_id)
        if query.subject_type:
            stmt = stmt.where(Lesson.subject_type == query.subject_type.value)
        if query.level:
            stmt = stmt.where(Lesson.level == query.level)
        if query.difficulty:
            stmt = stmt.where(Lesson.difficulty == query.difficulty.value)
        if query.premium_only is not None:
            stmt = stmt.where(Lesson.premium_only == query.premium_only)
        if query.offline_available is not None:
            stmt = stmt.where(Lesson.offline_available == query.offline_available)
        if query.search:
            stmt = stmt.where(search_clause(query.search, Lesson.title))

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        lessons, pagination = await self._paginate(stmt, query.page, query.limit)

        return ServiceResponse(
            data=[serialize(lesson, exclude=("content",)) for lesson in lessons],
            message="Lessons retrieved successfully",
            pagination=pagination
        )

    async def get_lesson(self, lesson_id: UUID) -> ServiceResponse:
        lesson = await self._get_or_404(lesson_id)
        return ServiceResponse(data=await self._to_dict(lesson), message="Lesson retrieved successfully")

    async def update_lesson(self, lesson_id: UUID, data: LessonUpdate) -> ServiceResponse:
        lesson = await self._get_or_404(lesson_id)
        updates = {k: v for k, v in to_record(data, exclude_unset=True).items() if v is not None}
        if updates.get("topic_id"):
            await self._require(Topic, updates["topic_id"], "Topic not found")

        for field, value in updates.items():
            setattr(lesson, field, value)

        await self._commit()
        await self.db.refresh(lesson)

        logger.info(f"Lesson updated successfully: {lesson_id}")
        return ServiceResponse(data=await self._to_dict(lesson), message="Lesson updated successfully")

    async def delete_lesson(self, lesson_id: UUID) -> ServiceResponse:
        lesson = await self._get_or_404(lesson_id)
        outcome = await retire(self.db, lesson, has_dependents=False)
        await self._commit()

        logger.info(f"Lesson deleted successfully: {lesson_id}")
        return ServiceResponse(
            data={"id": lesson_id, "outcome": outcome.value},
            message="Lesson deleted successfully"
        )
