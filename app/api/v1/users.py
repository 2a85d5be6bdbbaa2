# ============================================================================
# User Management Endpoints
# ============================================================================
from fastapi import APIRouter

from app.api.deps import ADMIN_ONLY
from app.api.v1.resources import ResourceDescriptor, register_resource
from app.schemas.user import UserListQuery, UserUpdate
from app.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])

# Accounts are created through /auth/register and never hard-deleted
descriptor = ResourceDescriptor(
    name="user",
    plural="users",
    service=UserService,
    update_schema=UserUpdate,
    list_query=UserListQuery,
    operations=("list", "get", "update", "delete"),
    roles={op: ADMIN_ONLY for op in ("list", "get", "update", "delete")},
    method_names={"delete": "deactivate_user"},
)

register_resource(router, descriptor)
