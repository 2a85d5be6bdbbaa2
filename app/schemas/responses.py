# ============================================================================
# Common Response Schemas
# ============================================================================
import math
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime

class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    hasNextPage: bool
    hasPrevPage: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            currentPage=page,
            totalPages=total_pages,
            totalCount=total,
            hasNextPage=page < total_pages,
            hasPrevPage=page > 1,
        )

class ServiceResponse(BaseModel):
    """Result of one service operation, mapped 1:1 onto the HTTP response."""
    status_code: int = 200
    data: Any = None
    message: str = "Success"
    pagination: Optional[Pagination] = None

class ErrorResponse(BaseModel):
    message: str
    status: str = "error"
    code: str
    errors: Optional[List[Dict[str, Any]]] = None

class HealthCheckResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
    environment: str
    models: List[str]
