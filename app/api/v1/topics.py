# ============================================================================
# Topic Endpoints
# ============================================================================
from fastapi import APIRouter

from app.api.deps import ADMIN_ONLY, STAFF
from app.api.v1.resources import ResourceDescriptor, register_resource
from app.schemas.curriculum import TopicCreate, TopicListQuery, TopicUpdate
from app.services.learning import TopicService

router = APIRouter(prefix="/topics", tags=["topics"])

descriptor = ResourceDescriptor(
    name="topic",
    plural="topics",
    service=TopicService,
    create_schema=TopicCreate,
    update_schema=TopicUpdate,
    list_query=TopicListQuery,
    roles={"create": STAFF, "update": STAFF, "delete": ADMIN_ONLY},
)

register_resource(router, descriptor)
