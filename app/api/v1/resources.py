# ============================================================================
# Resource Routing
# ============================================================================
"""
Generic CRUD routes driven by a per-resource descriptor.

Every resource exposes the same list/get/create/update/delete shape and
differs only in its service, its schemas and which roles may call what.
``register_resource`` reads a ``ResourceDescriptor`` and adds those routes
to a router; resource modules add their extra routes before calling it so
that fixed paths like ``/popular`` win over ``/{item_id}``.
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, FrozenSet, Mapping, Optional, Tuple, Type
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
import logging

from app.api.deps import ensure_owner_or_admin, query_params, require_roles
from app.core.database import get_db
from app.core.exceptions import APIException
from app.models.user import User, UserRole
from app.schemas.responses import ServiceResponse
from app.services.base import BaseService

logger = logging.getLogger(__name__)

CRUD_OPERATIONS = ("list", "get", "create", "update", "delete")


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    plural: str
    service: Type[BaseService]
    create_schema: Optional[Type[BaseModel]] = None
    update_schema: Optional[Type[BaseModel]] = None
    list_query: Optional[Type[BaseModel]] = None
    operations: Tuple[str, ...] = CRUD_OPERATIONS
    # operation -> allowed roles; an operation not listed is open to any signed-in user
    roles: Mapping[str, Tuple[UserRole, ...]] = field(default_factory=dict)
    owner_checked: FrozenSet[str] = frozenset()
    owner_field: str = "created_by"
    method_names: Mapping[str, str] = field(default_factory=dict)

    def roles_for(self, operation: str) -> Tuple[UserRole, ...]:
        return tuple(self.roles.get(operation, ()))

    def method(self, operation: str) -> str:
        """Service method implementing ``operation``, e.g. ``list_subjects``"""
        if operation in self.method_names:
            return self.method_names[operation]
        if operation == "list":
            return f"list_{self.plural}"
        return f"{operation}_{self.name}"


# ============================================================================
# Response Handling
# ============================================================================
def envelope(result: ServiceResponse) -> JSONResponse:
    content: Dict[str, Any] = {
        "message": result.message,
        "data": jsonable_encoder(result.data),
    }
    if result.pagination is not None:
        content["pagination"] = result.pagination.model_dump()
    return JSONResponse(status_code=result.status_code, content=content)


async def run_operation(
    operation: str,
    resource_id: Optional[Any],
    actor: Optional[User],
    call: Awaitable[ServiceResponse]
) -> JSONResponse:
    """Await one service call and wrap its result in the success envelope."""
    try:
        result = await call
    except APIException as e:
        logger.warning(
            f"{operation} failed: resource={resource_id} "
            f"actor={actor.id if actor else None} -> {e.status_code} {e.detail}"
        )
        raise
    return envelope(result)


async def _owned_call(
    descriptor: ResourceDescriptor,
    service: BaseService,
    operation: str,
    actor: User,
    item_id: UUID,
    *args
) -> ServiceResponse:
    if operation in descriptor.owner_checked:
        owner_id = await service.owner_of(item_id, descriptor.owner_field)
        ensure_owner_or_admin(actor, owner_id)
    return await getattr(service, descriptor.method(operation))(item_id, *args)


# ============================================================================
# Route Builders
# ============================================================================
def _add_list(router: APIRouter, d: ResourceDescriptor) -> None:
    async def list_items(
        actor: User = Depends(require_roles(*d.roles_for("list"))),
        query: BaseModel = Depends(query_params(d.list_query)),
        db: AsyncSession = Depends(get_db)
    ):
        service = d.service(db)
        return await run_operation(
            d.method("list"), None, actor, getattr(service, d.method("list"))(query)
        )

    router.add_api_route("", list_items, methods=["GET"], summary=f"List {d.plural}")


def _add_get(router: APIRouter, d: ResourceDescriptor) -> None:
    async def get_item(
        item_id: UUID,
        actor: User = Depends(require_roles(*d.roles_for("get"))),
        db: AsyncSession = Depends(get_db)
    ):
        service = d.service(db)
        return await run_operation(
            d.method("get"), item_id, actor, getattr(service, d.method("get"))(item_id)
        )

    router.add_api_route("/{item_id}", get_item, methods=["GET"], summary=f"Get {d.name}")


def _add_create(router: APIRouter, d: ResourceDescriptor) -> None:
    create_schema = d.create_schema

    async def create_item(
        data: create_schema,
        actor: User = Depends(require_roles(*d.roles_for("create"))),
        db: AsyncSession = Depends(get_db)
    ):
        service = d.service(db)
        return await run_operation(
            d.method("create"), None, actor, getattr(service, d.method("create"))(data, actor)
        )

    router.add_api_route(
        "", create_item, methods=["POST"], status_code=201, summary=f"Create {d.name}"
    )


def _add_update(router: APIRouter, d: ResourceDescriptor) -> None:
    update_schema = d.update_schema

    async def update_item(
        item_id: UUID,
        data: update_schema,
        actor: User = Depends(require_roles(*d.roles_for("update"))),
        db: AsyncSession = Depends(get_db)
    ):
        service = d.service(db)
        return await run_operation(
            d.method("update"), item_id, actor,
            _owned_call(d, service, "update", actor, item_id, data)
        )

    router.add_api_route("/{item_id}", update_item, methods=["PUT"], summary=f"Update {d.name}")


def _add_delete(router: APIRouter, d: ResourceDescriptor) -> None:
    async def delete_item(
        item_id: UUID,
        actor: User = Depends(require_roles(*d.roles_for("delete"))),
        db: AsyncSession = Depends(get_db)
    ):
        service = d.service(db)
        return await run_operation(
            d.method("delete"), item_id, actor,
            _owned_call(d, service, "delete", actor, item_id)
        )

    router.add_api_route("/{item_id}", delete_item, methods=["DELETE"], summary=f"Delete {d.name}")


ROUTE_BUILDERS = {
    "list": _add_list,
    "get": _add_get,
    "create": _add_create,
    "update": _add_update,
    "delete": _add_delete,
}


def register_resource(router: APIRouter, descriptor: ResourceDescriptor) -> APIRouter:
    for operation in descriptor.operations:
        ROUTE_BUILDERS[operation](router, descriptor)
    return router
