# ============================================================================
# Service Base
# ============================================================================
"""
Helpers shared by every resource service: lookups that fail with NotFound,
commits that turn integrity violations into Conflict, sorting, free-text
search and offset pagination.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import String, cast, func, or_, select
import json
import logging

from app.core.database import Base, like_escape
from app.core.exceptions import ConflictError, InternalError, NotFoundError
from app.schemas.responses import Pagination

logger = logging.getLogger(__name__)


def serialize(entity: Base, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Column values of ``entity`` as a plain dict"""
    skip = set(exclude)
    return {
        column.key: getattr(entity, column.key)
        for column in entity.__table__.columns
        if column.key not in skip
    }


def _like_pattern(term: str) -> str:
    return f"%{like_escape(term)}%"


def search_clause(term: str, *columns):
    """Case-insensitive substring match of ``term`` over any of ``columns``"""
    term = term.strip()
    # JSON columns store non-ASCII text as \uXXXX escapes
    patterns = {_like_pattern(term), _like_pattern(json.dumps(term)[1:-1])}
    return or_(*(
        column.ilike(pattern, escape="\\")
        for column in columns
        for pattern in sorted(patterns)
    ))


def json_search(column):
    """Expose a JSON list column to ``search_clause``"""
    return cast(column, String)


class BaseService:
    model: Type[Base] = None
    not_found_message = "Resource not found"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_or_404(self, entity_id, message: Optional[str] = None):
        entity = await self.db.get(self.model, entity_id)
        if entity is None:
            logger.warning(f"{self.model.__name__} not found: {entity_id}")
            raise NotFoundError(message or self.not_found_message)
        return entity

    async def owner_of(self, entity_id, owner_field: str = "created_by"):
        """Id of the user owning ``entity_id``; NotFound when it is gone"""
        column = getattr(self.model, owner_field)
        result = await self.db.execute(select(column).where(self.model.id == entity_id))
        row = result.first()
        if row is None:
            logger.warning(f"{self.model.__name__} not found: {entity_id}")
            raise NotFoundError(self.not_found_message)
        return row[0]

    async def _exists(self, model: Type[Base], *conditions) -> bool:
        result = await self.db.execute(select(model.id).where(*conditions).limit(1))
        return result.first() is not None

    async def _require(self, model: Type[Base], entity_id, message: str) -> None:
        """NotFound unless a row of ``model`` with ``entity_id`` exists"""
        if not await self._exists(model, model.id == entity_id):
            raise NotFoundError(message)

    async def _summary(self, model: Type[Base], entity_id, *columns) -> Optional[Dict[str, Any]]:
        """A display-safe subset of one related row, or None"""
        if entity_id is None:
            return None
        result = await self.db.execute(select(*columns).where(model.id == entity_id))
        row = result.first()
        return dict(row._mapping) if row else None

    async def _summaries(self, model: Type[Base], entity_ids, *columns) -> List[Dict[str, Any]]:
        """Same as ``_summary`` for a list of ids, keeping their order"""
        ids = [UUID(str(i)) for i in entity_ids or []]
        if not ids:
            return []
        result = await self.db.execute(select(*columns).where(model.id.in_(ids)))
        rows = {row.id: dict(row._mapping) for row in result.all()}
        return [rows[i] for i in ids if i in rows]

    async def _commit(self, conflict_message: str = "Resource already exists") -> None:
        """Commit, relying on unique indexes as the final word on duplicates"""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Integrity violation on {self.model.__name__}: {e.orig}")
            raise ConflictError(conflict_message) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error on {self.model.__name__}: {e}")
            raise InternalError(cause=str(e)) from e

    def _apply_sort(self, query, sort_by: str, sort_order: str):
        column = getattr(self.model, sort_by)
        ordered = column.desc() if sort_order == "desc" else column.asc()
        # id as tiebreaker keeps pages stable
        return query.order_by(ordered, self.model.id)

    async def _paginate(self, query, page: int, limit: int) -> Tuple[List[Any], Pagination]:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        offset = (page - 1) * limit
        result = await self.db.execute(query.offset(offset).limit(limit))
        items = list(result.scalars().all())

        return items, Pagination.build(page, limit, total)
