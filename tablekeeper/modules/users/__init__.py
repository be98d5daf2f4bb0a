"""Users module - user accounts and profiles."""

from .models import User, UserRole
from .repository import UserRepository
from .schemas import PublicUserResponse, UserResponse, UserUpdate
from .service import UserService

__all__ = [
    "PublicUserResponse",
    "User",
    "UserRepository",
    "UserResponse",
    "UserRole",
    "UserService",
    "UserUpdate",
]
