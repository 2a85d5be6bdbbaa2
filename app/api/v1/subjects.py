# ============================================================================
# Subject Endpoints
# ============================================================================
"""
Subject catalogue: CRUD plus featured/popular listings, search, lookups by
exam type or education level and country, and enrolment counters.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.api.deps import ADMIN_ONLY, STAFF, query_params, require_roles
from app.api.v1.resources import ResourceDescriptor, register_resource, run_operation
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import LimitQuery
from app.schemas.curriculum import (
    FeaturedSubjectsQuery,
    SubjectCreate,
    SubjectExamTypeQuery,
    SubjectListQuery,
    SubjectSearchQuery,
    SubjectStatsUpdate,
    SubjectUpdate,
)
from app.services.learning import SubjectService

router = APIRouter(prefix="/subjects", tags=["subjects"])

descriptor = ResourceDescriptor(
    name="subject",
    plural="subjects",
    service=SubjectService,
    create_schema=SubjectCreate,
    update_schema=SubjectUpdate,
    list_query=SubjectListQuery,
    roles={"create": STAFF, "update": STAFF, "delete": ADMIN_ONLY},
)


@router.get("/featured")
async def featured_subjects(
    actor: User = Depends(require_roles()),
    query: FeaturedSubjectsQuery = Depends(query_params(FeaturedSubjectsQuery)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("get_featured", None, actor, SubjectService(db).get_featured(query.limit))


@router.get("/popular")
async def popular_subjects(
    actor: User = Depends(require_roles()),
    query: LimitQuery = Depends(query_params(LimitQuery)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("get_popular", None, actor, SubjectService(db).get_popular(query.limit))


@router.get("/search")
async def search_subjects(
    actor: User = Depends(require_roles()),
    query: SubjectSearchQuery = Depends(query_params(SubjectSearchQuery)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("search_subjects", None, actor, SubjectService(db).search_subjects(query))


@router.get("/by-exam-type/{exam_type}")
async def subjects_by_exam_type(
    exam_type: str,
    actor: User = Depends(require_roles()),
    query: SubjectExamTypeQuery = Depends(query_params(SubjectExamTypeQuery)),
    db: AsyncSession = Depends(get_db)
):
    service = SubjectService(db)
    return await run_operation(
        "get_by_exam_type", exam_type, actor,
        service.get_by_exam_type(exam_type, query.education_level)
    )


@router.get("/by-education/{education_level}/{country}")
async def subjects_by_education(
    education_level: str,
    country: str,
    actor: User = Depends(require_roles()),
    db: AsyncSession = Depends(get_db)
):
    service = SubjectService(db)
    return await run_operation(
        "get_by_education_and_country", f"{education_level}/{country}", actor,
        service.get_by_education_and_country(education_level, country)
    )


@router.patch("/{subject_id}/stats")
async def update_subject_stats(
    subject_id: UUID,
    data: SubjectStatsUpdate,
    actor: User = Depends(require_roles(*STAFF)),
    db: AsyncSession = Depends(get_db)
):
    service = SubjectService(db)
    return await run_operation(
        "update_stats", subject_id, actor,
        service.update_stats(subject_id, data.field, data.increment)
    )


@router.post("/{subject_id}/students")
async def add_subject_student(
    subject_id: UUID,
    actor: User = Depends(require_roles(*STAFF)),
    db: AsyncSession = Depends(get_db)
):
    return await run_operation("add_student", subject_id, actor, SubjectService(db).add_student(subject_id))


register_resource(router, descriptor)
