# ============================================================================
# Topic Service
# ============================================================================
from uuid import UUID
from sqlalchemy import select
import logging

from app.models.curriculum import Lesson, Question, Subject, Topic
from app.models.user import User
from app.schemas.common import to_record
from app.schemas.curriculum import TopicCreate, TopicListQuery, TopicUpdate
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService, search_clause, serialize
from app.services.lifecycle import DeleteOutcome, retire

logger = logging.getLogger(__name__)


class TopicService(BaseService):
    model = Topic
    not_found_message = "Topic not found"

    async def _to_dict(self, topic: Topic) -> dict:
        data = serialize(topic)
        data["subject"] = await self._summary(
            Subject, topic.subject_id, Subject.id, Subject.name, Subject.code
        )
        return data

    async def create_topic(self, data: TopicCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)
        await self._require(Subject, payload["subject_id"], "Subject not found")

        topic = Topic(**payload)
        self.db.add(topic)
        await self._commit()
        await self.db.refresh(topic)

        logger.info(f"Created topic {topic.id} for subject {topic.subject_id} by {actor.id}")
        return ServiceResponse(
            status_code=201,
            data=await self._to_dict(topic),
            message="Topic created successfully"
        )

    async def list_topics(self, query: TopicListQuery) -> ServiceResponse:
        stmt = select(Topic)
        if query.subject_id:
            stmt = stmt.where(Topic.subject_id == query.subject_id)
        if query.is_active is not None:
            stmt = stmt.where(Topic.is_active == query.is_active)
        if query.search:
            stmt = stmt.where(search_clause(query.search, Topic.name, Topic.description))

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        topics, pagination = await self._paginate(stmt, query.page, query.limit)

        return ServiceResponse(
            data=[serialize(t) for t in topics],
            message="Topics retrieved successfully",
            pagination=pagination
        )

    async def get_topic(self, topic_id: UUID) -> ServiceResponse:
        topic = await self._get_or_404(topic_id)
        return ServiceResponse(data=await self._to_dict(topic), message="Topic retrieved successfully")

    async def update_topic(self, topic_id: UUID, data: TopicUpdate) -> ServiceResponse:
        topic = await self._get_or_404(topic_id)
        for field, value in to_record(data, exclude_unset=True).items():
            if value is not None:
                setattr(topic, field, value)

        await self._commit()
        await self.db.refresh(topic)

        logger.info(f"Updated topic {topic_id}")
        return ServiceResponse(data=await self._to_dict(topic), message="Topic updated successfully")

    async def delete_topic(self, topic_id: UUID) -> ServiceResponse:
        topic = await self._get_or_404(topic_id)
        referenced = (
            await self._exists(Lesson, Lesson.topic_id == topic_id)
            or await self._exists(Question, Question.topic_id == topic_id)
        )
        outcome = await retire(self.db, topic, has_dependents=referenced)
        await self._commit()

        if outcome == DeleteOutcome.DEACTIVATED:
            logger.info(f"Topic deactivated (referenced by content): {topic_id}")
            message = "Topic deactivated successfully (referenced by lessons or questions)"
        else:
            logger.info(f"Topic deleted: {topic_id}")
            message = "Topic deleted successfully"

        return ServiceResponse(data={"id": topic_id, "outcome": outcome.value}, message=message)
