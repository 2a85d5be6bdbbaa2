# ============================================================================
# Lesson Endpoints
# ============================================================================
"""
Lessons can be edited or removed by their author or by an admin.
"""
from fastapi import APIRouter

from app.api.deps import STAFF
from app.api.v1.resources import ResourceDescriptor, register_resource
from app.schemas.curriculum import LessonCreate, LessonListQuery, LessonUpdate
from app.services.learning import LessonService

router = APIRouter(prefix="/lessons", tags=["lessons"])

descriptor = ResourceDescriptor(
    name="lesson",
    plural="lessons",
    service=LessonService,
    create_schema=LessonCreate,
    update_schema=LessonUpdate,
    list_query=LessonListQuery,
    roles={"create": STAFF, "update": STAFF, "delete": STAFF},
    owner_checked=frozenset({"update", "delete"}),
)

register_resource(router, descriptor)
