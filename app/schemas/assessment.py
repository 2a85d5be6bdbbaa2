# ============================================================================
# Assessment Schemas
# ============================================================================
from pydantic import BaseModel, Field
from typing import Optional, List, Any, Literal
from uuid import UUID

from app.schemas.common import DifficultyEnum, ListQuery, SortOrderEnum

class RetakePolicy(BaseModel):
    allowed: bool = True
    max_attempts: int = Field(3, ge=1, le=100)
    cooldown_hours: int = Field(24, ge=0, le=24 * 365)

    class Config:
        extra = "forbid"

class QuizCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    subject_id: UUID
    topic_ids: List[UUID] = Field(default_factory=list)
    question_ids: List[UUID] = Field(default_factory=list)
    level: Optional[str] = Field(None, max_length=30)
    difficulty: DifficultyEnum = DifficultyEnum.INTERMEDIATE
    total_questions: Optional[int] = Field(None, ge=0)
    total_points: int = Field(..., ge=1, le=10000)
    time_limit: Optional[int] = Field(None, ge=1, le=600)
    passing_score: int = Field(60, ge=0, le=100)
    tags: List[str] = Field(default_factory=list)
    premium_only: bool = False
    retake_policy: RetakePolicy = Field(default_factory=RetakePolicy)

    class Config:
        extra = "forbid"

class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    subject_id: Optional[UUID] = None
    topic_ids: Optional[List[UUID]] = None
    question_ids: Optional[List[UUID]] = None
    level: Optional[str] = Field(None, max_length=30)
    difficulty: Optional[DifficultyEnum] = None
    total_questions: Optional[int] = Field(None, ge=0)
    total_points: Optional[int] = Field(None, ge=1, le=10000)
    time_limit: Optional[int] = Field(None, ge=1, le=600)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    tags: Optional[List[str]] = None
    premium_only: Optional[bool] = None
    retake_policy: Optional[RetakePolicy] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

class QuizBulkPatch(BaseModel):
    """Scalar fields that can be applied to many quizzes at once"""
    is_active: Optional[bool] = None
    premium_only: Optional[bool] = None
    level: Optional[str] = Field(None, max_length=30)
    difficulty: Optional[DifficultyEnum] = None
    time_limit: Optional[int] = Field(None, ge=1, le=600)
    passing_score: Optional[int] = Field(None, ge=0, le=100)

    class Config:
        extra = "forbid"

class QuizBulkUpdate(BaseModel):
    quiz_ids: List[UUID] = Field(..., min_length=1, max_length=500)
    update: QuizBulkPatch

    class Config:
        extra = "forbid"

class QuizListQuery(ListQuery):
    sort_order: SortOrderEnum = SortOrderEnum.DESC
    sort_by: Literal["created_at", "title", "total_attempts", "average_score"] = "created_at"
    subject_id: Optional[UUID] = None
    level: Optional[str] = None
    difficulty: Optional[DifficultyEnum] = None
    premium_only: Optional[bool] = None
    is_active: bool = True

class QuizDetailQuery(BaseModel):
    include_questions: bool = False

    class Config:
        extra = "forbid"

class QuizResultCreate(BaseModel):
    quiz_id: UUID
    score: float = Field(..., ge=0)
    time_taken: int = Field(..., ge=0, description="Seconds spent on the quiz")
    answers: List[Any] = Field(default_factory=list)

    class Config:
        extra = "forbid"

class QuizResultListQuery(ListQuery):
    limit: int = Field(20, ge=1, le=100)
    sort_order: SortOrderEnum = SortOrderEnum.DESC
    sort_by: Literal["created_at", "score", "time_taken"] = "created_at"
    quiz_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
