# ============================================================================
# Delete Lifecycle
# ============================================================================
"""
Active -> Deleted | Deactivated.

A record with dependent historical records (quiz results, lessons pointing
at a topic, ...) is deactivated so those references stay valid; anything
else is removed for good.
"""
from enum import Enum
from typing import Callable, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    DEACTIVATED = "deactivated"


def deactivate(entity: Base) -> None:
    entity.is_active = False


async def retire(
    db: AsyncSession,
    entity: Base,
    has_dependents: bool,
    on_deactivate: Optional[Callable[[Base], None]] = None
) -> DeleteOutcome:
    """Delete or deactivate ``entity``; the caller commits."""
    if has_dependents:
        (on_deactivate or deactivate)(entity)
        return DeleteOutcome.DEACTIVATED

    await db.delete(entity)
    return DeleteOutcome.DELETED
