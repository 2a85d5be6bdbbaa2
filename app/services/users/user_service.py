# ============================================================================
# User Service
# ============================================================================
"""
Registration, login and admin user management.

Emails are stored lowercased and are unique across all accounts, including
deactivated ones. Accounts are never deleted; ``deactivate_user`` flips
``is_active`` so existing content keeps its author.
"""
from datetime import timedelta
from typing import Any, Dict
from uuid import UUID
from sqlalchemy import select
import logging

from app.config import Settings
from app.core.database import utcnow
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.common import to_record
from app.schemas.responses import ServiceResponse
from app.schemas.user import UserListQuery, UserRegister, UserUpdate
from app.services.base import BaseService, search_clause, serialize
from app.services.lifecycle import deactivate

logger = logging.getLogger(__name__)


def user_to_dict(user: User) -> Dict[str, Any]:
    data = serialize(user, exclude=("password_hash",))
    data["role"] = user.role.value
    return data


class UserService(BaseService):
    model = User
    not_found_message = "User not found"

    async def _email_taken(self, email: str) -> bool:
        return await self._exists(User, User.email == email)

    async def register(self, data: UserRegister) -> ServiceResponse:
        if await self._email_taken(data.email):
            raise ConflictError("Email already registered")

        user = User(
            name=data.name.strip(),
            email=data.email,
            password_hash=get_password_hash(data.password),
            role=UserRole(data.role),
            is_active=True
        )
        self.db.add(user)
        await self._commit("Email already registered")
        await self.db.refresh(user)

        logger.info(f"User registered: {user.id} ({user.role.value})")
        return ServiceResponse(
            status_code=201,
            data=user_to_dict(user),
            message="User registered successfully"
        )

    async def authenticate(self, settings: Settings, email: str, password: str) -> ServiceResponse:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for {email}")
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        user.last_login = utcnow()
        await self._commit()
        await self.db.refresh(user)

        access_token = create_access_token(
            settings,
            data={"sub": str(user.id), "role": user.role.value},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        return ServiceResponse(
            data={
                "access_token": access_token,
                "token_type": "bearer",
                "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
                "user": user_to_dict(user),
            },
            message="Login successful"
        )

    async def get_user(self, user_id: UUID) -> ServiceResponse:
        user = await self._get_or_404(user_id)
        return ServiceResponse(data=user_to_dict(user), message="User retrieved successfully")

    async def list_users(self, query: UserListQuery) -> ServiceResponse:
        stmt = select(User)
        if query.role:
            stmt = stmt.where(User.role == UserRole(query.role.value))
        if query.is_active is not None:
            stmt = stmt.where(User.is_active == query.is_active)
        if query.search:
            stmt = stmt.where(search_clause(query.search, User.name, User.email))

        stmt = self._apply_sort(stmt, query.sort_by, query.sort_order)
        users, pagination = await self._paginate(stmt, query.page, query.limit)

        return ServiceResponse(
            data=[user_to_dict(u) for u in users],
            message="Users retrieved successfully",
            pagination=pagination
        )

    async def update_user(self, user_id: UUID, data: UserUpdate) -> ServiceResponse:
        user = await self._get_or_404(user_id)
        updates = {k: v for k, v in to_record(data, exclude_unset=True).items() if v is not None}

        if "email" in updates and updates["email"] != user.email:
            if await self._email_taken(updates["email"]):
                raise ConflictError("Email already registered")
        if "role" in updates:
            updates["role"] = UserRole(updates["role"])

        for field, value in updates.items():
            setattr(user, field, value)

        await self._commit("Email already registered")
        await self.db.refresh(user)

        logger.info(f"User updated: {user_id} fields={sorted(updates)}")
        return ServiceResponse(data=user_to_dict(user), message="User updated successfully")

    async def deactivate_user(self, user_id: UUID) -> ServiceResponse:
        user = await self._get_or_404(user_id)
        deactivate(user)
        await self._commit()

        logger.info(f"User deactivated: {user_id}")
        return ServiceResponse(data=user_to_dict(user), message="User deactivated successfully")
