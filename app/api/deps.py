# ============================================================================
# API Dependencies
# ============================================================================
from typing import Type, TypeVar
from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError
from uuid import UUID
import logging
import redis.asyncio as redis

from app.core.security import get_current_user
from app.core.exceptions import (
    ForbiddenError,
    RateLimitExceeded,
    ValidationFailed,
    format_validation_errors,
)
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

QueryModel = TypeVar("QueryModel", bound=BaseModel)

STAFF = (UserRole.TEACHER, UserRole.ADMIN)
ADMIN_ONLY = (UserRole.ADMIN,)


# ============================================================================
# Role Dependencies
# ============================================================================
def require_roles(*roles: UserRole):
    """Dependency to require one of ``roles``; no roles means any signed-in user"""
    async def check_role(current_user: User = Depends(get_current_user)) -> User:
        if roles and current_user.role not in roles:
            logger.info(
                f"Access denied for {current_user.id} ({current_user.role.value}); "
                f"requires {[r.value for r in roles]}"
            )
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return check_role


def ensure_owner_or_admin(actor: User, owner_id: UUID) -> None:
    if actor.role == UserRole.ADMIN or owner_id == actor.id:
        return
    raise ForbiddenError("You can only modify resources you created")


# ============================================================================
# Query String Validation
# ============================================================================
def query_params(model: Type[QueryModel]):
    """Validate the whole query string against ``model``.

    Unknown parameters are rejected and every violation is reported, the
    same way request bodies are.
    """
    async def parse(request: Request) -> QueryModel:
        try:
            return model.model_validate(dict(request.query_params))
        except ValidationError as e:
            raise ValidationFailed(format_validation_errors(e.errors()))

    return parse


# ============================================================================
# Rate Limiting
# ============================================================================
async def rate_limit(request: Request) -> None:
    """Fixed-window request limit per client address, when Redis is available"""
    context = request.app.state.context
    if context.cache is None:
        return

    settings = context.settings
    client = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client}"

    try:
        allowed, remaining = await context.cache.check_rate_limit(
            key, settings.RATE_LIMIT_REQUESTS, window=settings.RATE_LIMIT_WINDOW_SECONDS
        )
    except redis.RedisError as e:
        logger.warning(f"Rate limit check skipped, Redis unavailable: {e}")
        return

    if not allowed:
        logger.warning(f"Rate limit exceeded for {client}")
        raise RateLimitExceeded(retry_after=settings.RATE_LIMIT_WINDOW_SECONDS)
