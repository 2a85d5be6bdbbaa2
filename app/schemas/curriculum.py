# ============================================================================
# Curriculum Schemas
# ============================================================================
"""
Request schemas for subjects, topics, lessons and questions.

``*Create`` models require what the resource cannot exist without,
``*Update`` models make every field optional and reject unknown fields,
``*ListQuery`` models describe the accepted query string of list endpoints.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any, Literal
from uuid import UUID
from enum import Enum

from app.schemas.common import DifficultyEnum, LimitQuery, ListQuery, SortOrderEnum


# ============================================================================
# Enums
# ============================================================================
class SubjectCategoryEnum(str, Enum):
    SCIENCES = "sciences"
    MATHEMATICS = "mathematics"
    LANGUAGES = "languages"
    HUMANITIES = "humanities"
    ARTS = "arts"
    TECHNOLOGY = "technology"
    OTHER = "other"

class SubjectStatusEnum(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class LessonSubjectTypeEnum(str, Enum):
    MATHEMATICS = "mathematics"
    PHYSICS = "physics"
    CHEMISTRY = "chemistry"
    BIOLOGY = "biology"
    ENGLISH = "english"
    FRENCH = "french"
    HISTORY = "history"
    GEOGRAPHY = "geography"
    PHILOSOPHY = "philosophy"

class InteractivityLevelEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class QuestionFormatEnum(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    ESSAY = "essay"
    FILL_BLANK = "fill_blank"

StatField = Literal["total_students", "total_lessons", "total_quizzes", "total_questions"]

CODE_PATTERN = r"^[A-Za-z0-9_-]+$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


# ============================================================================
# Subject Schemas
# ============================================================================
class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    code: str = Field(..., min_length=2, max_length=20, pattern=CODE_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)
    category: SubjectCategoryEnum
    exam_types: List[str] = Field(default_factory=list)
    countries: List[str] = Field(default_factory=list)
    education_levels: List[str] = Field(default_factory=list)
    series: List[str] = Field(default_factory=list)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    is_premium: bool = False
    is_featured: bool = False

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.upper()

class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    code: Optional[str] = Field(None, min_length=2, max_length=20, pattern=CODE_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[SubjectCategoryEnum] = None
    exam_types: Optional[List[str]] = None
    countries: Optional[List[str]] = None
    education_levels: Optional[List[str]] = None
    series: Optional[List[str]] = None
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    is_active: Optional[bool] = None
    is_premium: Optional[bool] = None
    is_featured: Optional[bool] = None
    status: Optional[SubjectStatusEnum] = None

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

class SubjectListQuery(ListQuery):
    sort_by: Literal["name", "code", "created_at", "total_students"] = "name"
    category: Optional[SubjectCategoryEnum] = None
    exam_type: Optional[str] = None
    country: Optional[str] = None
    education_level: Optional[str] = None
    series: Optional[str] = None
    is_active: Optional[bool] = None
    is_premium: Optional[bool] = None
    is_featured: Optional[bool] = None

class SubjectSearchQuery(BaseModel):
    q: str = Field(..., max_length=100)
    category: Optional[SubjectCategoryEnum] = None
    exam_type: Optional[str] = None
    country: Optional[str] = None
    education_level: Optional[str] = None
    is_premium: Optional[bool] = None

    class Config:
        extra = "forbid"

class FeaturedSubjectsQuery(LimitQuery):
    limit: int = Field(6, ge=1, le=50)

class SubjectExamTypeQuery(BaseModel):
    education_level: Optional[str] = None

    class Config:
        extra = "forbid"

class SubjectStatsUpdate(BaseModel):
    field: StatField
    increment: int = Field(1, ge=-1000, le=1000)

    class Config:
        extra = "forbid"


# ============================================================================
# Topic Schemas
# ============================================================================
class TopicCreate(BaseModel):
    subject_id: UUID
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    order_index: int = Field(0, ge=0)

    class Config:
        extra = "forbid"

class TopicUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

class TopicListQuery(ListQuery):
    limit: int = Field(20, ge=1, le=100)
    sort_by: Literal["order_index", "name", "created_at"] = "order_index"
    subject_id: Optional[UUID] = None
    is_active: Optional[bool] = None


# ============================================================================
# Lesson Schemas
# ============================================================================
class LessonCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    subject_id: UUID
    topic_id: Optional[UUID] = None
    subject_type: LessonSubjectTypeEnum
    content: Dict[str, Any] = Field(default_factory=dict)
    level: Optional[str] = Field(None, max_length=30)
    difficulty: DifficultyEnum = DifficultyEnum.BEGINNER
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    premium_only: bool = False
    offline_available: bool = False
    interactivity_level: InteractivityLevelEnum = InteractivityLevelEnum.MEDIUM

    class Config:
        extra = "forbid"

class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    topic_id: Optional[UUID] = None
    content: Optional[Dict[str, Any]] = None
    level: Optional[str] = Field(None, max_length=30)
    difficulty: Optional[DifficultyEnum] = None
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    premium_only: Optional[bool] = None
    offline_available: Optional[bool] = None
    interactivity_level: Optional[InteractivityLevelEnum] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

class LessonListQuery(ListQuery):
    limit: int = Field(20, ge=1, le=100)
    sort_order: SortOrderEnum = SortOrderEnum.DESC
    sort_by: Literal["created_at", "title", "duration_minutes"] = "created_at"
    subject_id: Optional[UUID] = None
    topic_id: Optional[UUID] = None
    subject_type: Optional[LessonSubjectTypeEnum] = None
    level: Optional[str] = None
    difficulty: Optional[DifficultyEnum] = None
    premium_only: Optional[bool] = None
    offline_available: Optional[bool] = None


# ============================================================================
# Question Schemas
# ============================================================================
class QuestionOption(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    is_correct: bool = False

class QuestionCreate(BaseModel):
    content: str = Field(..., min_length=5, max_length=5000)
    format: QuestionFormatEnum
    options: List[QuestionOption] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(None, max_length=2000)
    explanation: Optional[str] = Field(None, max_length=5000)
    difficulty: DifficultyEnum
    points: int = Field(1, ge=1, le=100)
    subject_id: UUID
    topic_id: Optional[UUID] = None
    tags: List[str] = Field(default_factory=list)

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def check_options(self):
        if self.format == QuestionFormatEnum.MULTIPLE_CHOICE:
            if len(self.options) < 2:
                raise ValueError("multiple_choice questions need at least 2 options")
            if not any(option.is_correct for option in self.options):
                raise ValueError("multiple_choice questions need a correct option")
        return self

class QuestionUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=5, max_length=5000)
    format: Optional[QuestionFormatEnum] = None
    options: Optional[List[QuestionOption]] = None
    correct_answer: Optional[str] = Field(None, max_length=2000)
    explanation: Optional[str] = Field(None, max_length=5000)
    difficulty: Optional[DifficultyEnum] = None
    points: Optional[int] = Field(None, ge=1, le=100)
    topic_id: Optional[UUID] = None
    tags: Optional[List[str]] = None

    class Config:
        extra = "forbid"

class QuestionListQuery(ListQuery):
    limit: int = Field(20, ge=1, le=100)
    sort_order: SortOrderEnum = SortOrderEnum.DESC
    sort_by: Literal["created_at", "difficulty", "points"] = "created_at"
    subject_id: Optional[UUID] = None
    topic_id: Optional[UUID] = None
    difficulty: Optional[DifficultyEnum] = None
    format: Optional[QuestionFormatEnum] = None
    is_verified: Optional[bool] = None
    created_by: Optional[UUID] = None

class QuestionVerify(BaseModel):
    quality_score: float = Field(..., ge=0, le=10)
    feedback: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"
