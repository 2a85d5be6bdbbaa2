# ============================================================================
# Subject Service
# ============================================================================
"""
Subjects are the root of the catalogue. Name (case-insensitive) and code
(uppercase) are unique across every subject ever created, including
deactivated ones, and a subject is never physically removed.
"""
from typing import Any, Dict, Optional
from sqlalchemy import func, select
from uuid import UUID
import logging

from app.core.exceptions import BadRequestError, ConflictError
from app.core.database import json_array_contains
from app.models.curriculum import Subject
from app.models.user import User
from app.schemas.common import to_record
from app.schemas.curriculum import (
    SubjectCreate, SubjectListQuery, SubjectSearchQuery, SubjectUpdate
)
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService, search_clause, serialize
from app.services.lifecycle import retire

logger = logging.getLogger(__name__)

CODE_TAKEN = "A subject with this code already exists"
NAME_TAKEN = "A subject with this name already exists"


def subject_to_dict(subject: Subject) -> Dict[str, Any]:
    data = serialize(subject, exclude=Subject.STAT_FIELDS)
    data["stats"] = subject.stats
    return data


def _mark_inactive(subject: Subject) -> None:
    subject.is_active = False
    subject.status = "inactive"


class SubjectService(BaseService):
    model = Subject
    not_found_message = "Subject not found"

    # =========================================================================
    # Uniqueness
    # =========================================================================
    async def _ensure_unique(
        self,
        code: Optional[str] = None,
        name: Optional[str] = None,
        exclude_id: Optional[UUID] = None
    ) -> None:
        if code:
            conditions = [Subject.code == code.upper()]
            if exclude_id:
                conditions.append(Subject.id != exclude_id)
            if await self._exists(Subject, *conditions):
                raise ConflictError(CODE_TAKEN)

        if name:
            conditions = [func.lower(Subject.name) == name.strip().lower()]
            if exclude_id:
                conditions.append(Subject.id != exclude_id)
            if await self._exists(Subject, *conditions):
                raise ConflictError(NAME_TAKEN)

    # =========================================================================
    # CRUD
    # =========================================================================
    async def create_subject(self, data: SubjectCreate, actor: User) -> ServiceResponse:
        payload = to_record(data)
        await self._ensure_unique(code=payload["code"], name=payload["name"])

        subject = Subject(**payload, created_by=actor.id)
        self.db.add(subject)
        await self._commit("A subject with this name or code already exists")
        await self.db.refresh(subject)

        logger.info(f"Created subject: {subject.name} ({subject.code})")
        return ServiceResponse(
            status_code=201,
            data=subject_to_dict(subject),
            message="Subject created successfully"
        )

    async def list_subjects(self, query: SubjectListQuery) -> ServiceResponse:
        stmt = select(Subject).where(Subject.status == "active")

        if query.category:
            stmt = stmt.where(Subject.category == query.category.value)
        if query.exam_type:
            stmt = stmt.where(json_array_contains(Subject.exam_types, query.exam_type))
        if query.country:
            stmt = stmt.where(json_array_contains(Subject.countries, query.country))
        if query.education_level:
            stmt = stmt.where(json_array_contains(Subject.education_levels, query.education_level))
        if query.series:
            stmt = stmt.where(json_array_contains(Subject.series, query.series))
        if query.is_active is not None:
            stmt = stmt.where(Subject.is_active == query.is_active)
        if query.is_premium is not None:
            stmt = stmt.where(Subject.is_premium == query.is_premium)
        if query.is_featured is not None:
            stmt = stmt.where(Subject.is_featured == query.is_featured)

        if query.search:
            stmt = stmt.where(
                search_clause(query.search, Subject.name, Subject.description, Subject.code)
            )

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        subjects, pagination = await self._paginate(stmt, query.page, query.limit)

        logger.info(f"Retrieved {len(subjects)} subjects (total {pagination.totalCount})")
        return ServiceResponse(
            data=[subject_to_dict(s) for s in subjects],
            message="Subjects retrieved successfully",
            pagination=pagination
        )

    async def get_subject(self, subject_id: UUID) -> ServiceResponse:
        subject = await self._get_or_404(subject_id)
        return ServiceResponse(data=subject_to_dict(subject), message="Subject retrieved successfully")

    async def update_subject(self, subject_id: UUID, data: SubjectUpdate) -> ServiceResponse:
        subject = await self._get_or_404(subject_id)
        updates = {k: v for k, v in to_record(data, exclude_unset=True).items() if v is not None}

        # Only re-check the fields that actually change
        new_code = updates.get("code") if updates.get("code") != subject.code else None
        new_name = updates.get("name") if updates.get("name") != subject.name else None
        await self._ensure_unique(code=new_code, name=new_name, exclude_id=subject.id)

        for field, value in updates.items():
            setattr(subject, field, value)

        await self._commit("A subject with this name or code already exists")
        await self.db.refresh(subject)

        logger.info(f"Updated subject {subject_id}: {sorted(updates)}")
        return ServiceResponse(data=subject_to_dict(subject), message="Subject updated successfully")

    async def delete_subject(self, subject_id: UUID) -> ServiceResponse:
        """Soft delete: subjects are only ever deactivated"""
        subject = await self._get_or_404(subject_id)
        outcome = await retire(self.db, subject, has_dependents=True, on_deactivate=_mark_inactive)
        await self._commit()

        logger.info(f"Deactivated subject {subject_id}")
        return ServiceResponse(
            data={"id": subject.id, "outcome": outcome.value},
            message="Subject deleted successfully"
        )

    # =========================================================================
    # Catalogue queries
    # =========================================================================
    async def _run(self, stmt) -> list:
        result = await self.db.execute(stmt)
        return [subject_to_dict(s) for s in result.scalars().all()]

    async def get_featured(self, limit: int = 6) -> ServiceResponse:
        subjects = await self._run(Subject.featured_query(limit))
        return ServiceResponse(data=subjects, message="Featured subjects retrieved successfully")

    async def get_popular(self, limit: int = 10) -> ServiceResponse:
        subjects = await self._run(Subject.popular_query(limit))
        return ServiceResponse(data=subjects, message="Popular subjects retrieved successfully")

    async def get_by_education_and_country(
        self,
        education_level: Optional[str],
        country: Optional[str]
    ) -> ServiceResponse:
        if not education_level or not country:
            raise BadRequestError("Education level and country are required")

        subjects = await self._run(Subject.by_education_and_country_query(education_level, country))
        return ServiceResponse(data=subjects, message="Subjects retrieved successfully")

    async def get_by_exam_type(
        self,
        exam_type: Optional[str],
        education_level: Optional[str] = None
    ) -> ServiceResponse:
        if not exam_type:
            raise BadRequestError("Exam type is required")

        subjects = await self._run(Subject.by_exam_type_query(exam_type, education_level))
        return ServiceResponse(data=subjects, message="Subjects retrieved successfully")

    async def search_subjects(self, query: SubjectSearchQuery) -> ServiceResponse:
        term = (query.q or "").strip()
        if len(term) < 2:
            raise BadRequestError("Search term must contain at least 2 characters")

        stmt = select(Subject).where(
            search_clause(term, Subject.name, Subject.description, Subject.code),
            Subject.is_active == True,
            Subject.status == "active",
        )
        if query.category:
            stmt = stmt.where(Subject.category == query.category.value)
        if query.exam_type:
            stmt = stmt.where(json_array_contains(Subject.exam_types, query.exam_type))
        if query.country:
            stmt = stmt.where(json_array_contains(Subject.countries, query.country))
        if query.education_level:
            stmt = stmt.where(json_array_contains(Subject.education_levels, query.education_level))
        if query.is_premium is not None:
            stmt = stmt.where(Subject.is_premium == query.is_premium)

        stmt = stmt.order_by(Subject.total_students.desc(), Subject.name).limit(20)
        subjects = await self._run(stmt)
        return ServiceResponse(data=subjects, message="Search completed successfully")

    # =========================================================================
    # Statistics
    # =========================================================================
    async def update_stats(self, subject_id: UUID, field: str, increment: int = 1) -> ServiceResponse:
        subject = await self._get_or_404(subject_id)
        try:
            subject.update_stats(field, increment)
        except ValueError as e:
            raise BadRequestError(str(e))
        await self._commit()
        await self.db.refresh(subject)

        logger.info(f"Subject {subject_id} stats: {field} {increment:+d}")
        return ServiceResponse(data=subject_to_dict(subject), message="Subject stats updated successfully")

    async def add_student(self, subject_id: UUID) -> ServiceResponse:
        subject = await self._get_or_404(subject_id)
        subject.add_student()
        await self._commit()
        await self.db.refresh(subject)

        return ServiceResponse(data=subject_to_dict(subject), message="Student added to subject")
