# ============================================================================
# Authentication Endpoints
# ============================================================================
"""
Email/password registration and login issuing JWT bearer tokens, and the
current user's profile.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.api.v1.resources import envelope, run_operation
from app.core.database import get_db
from app.models.user import User
from app.schemas.responses import ServiceResponse
from app.schemas.user import UserLogin, UserRegister
from app.services.users import UserService
from app.services.users.user_service import user_to_dict

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", status_code=201)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new student or teacher account.

    Email must be unique across all users. Admin accounts are created with
    ``scripts/create_admin.py``.
    """
    return await run_operation("register", data.email, None, UserService(db).register(data))


@router.post("/login")
async def login(
    data: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email and password for an access token."""
    settings = request.app.state.context.settings
    service = UserService(db)
    return await run_operation(
        "login", data.email, None, service.authenticate(settings, data.email, data.password)
    )


@router.get("/me")
async def get_current_user_profile(current_user: User = Depends(require_roles())):
    return envelope(ServiceResponse(data=user_to_dict(current_user), message="Profile retrieved successfully"))
