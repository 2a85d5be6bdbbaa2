# ============================================================================
# User Schemas
# ============================================================================
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from enum import Enum

from app.schemas.common import ListQuery, SortOrderEnum

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

class UserRoleEnum(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=72)
    role: Literal["student", "teacher"] = "student"

    class Config:
        extra = "forbid"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()

class UserLogin(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    role: Optional[UserRoleEnum] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v

class UserListQuery(ListQuery):
    limit: int = Field(20, ge=1, le=100)
    sort_order: SortOrderEnum = SortOrderEnum.DESC
    sort_by: Literal["created_at", "name", "email", "last_login"] = "created_at"
    role: Optional[UserRoleEnum] = None
    is_active: Optional[bool] = None
