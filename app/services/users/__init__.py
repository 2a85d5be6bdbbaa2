from app.services.users.user_service import UserService

__all__ = ["UserService"]
