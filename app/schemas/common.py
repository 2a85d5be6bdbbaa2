# ============================================================================
# Shared Schemas
# ============================================================================
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from enum import Enum

class DifficultyEnum(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class SortOrderEnum(str, Enum):
    ASC = "asc"
    DESC = "desc"

class ListQuery(BaseModel):
    """Pagination, sorting and free-text search shared by every list endpoint.

    Subclasses narrow ``sort_by`` to the columns they allow and add their own
    filters; unknown query parameters are rejected.
    """
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    sort_order: SortOrderEnum = SortOrderEnum.ASC
    search: Optional[str] = Field(None, min_length=1, max_length=100)

    class Config:
        extra = "forbid"

class LimitQuery(BaseModel):
    limit: int = Field(10, ge=1, le=50)

    class Config:
        extra = "forbid"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value

def to_record(schema: BaseModel, **kwargs) -> Dict[str, Any]:
    """``model_dump`` with enum members reduced to their plain values"""
    return {key: _plain(value) for key, value in schema.model_dump(**kwargs).items()}
