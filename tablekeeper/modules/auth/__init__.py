"""Authentication module - Argon2id passwords, JWT access and rotating refresh tokens."""

from .models import RefreshToken
from .schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from .service import AuthenticatedUser, AuthService
from .store import RefreshTokenStore, RotationResult, purge_expired_tokens

__all__ = [
    # Models
    "RefreshToken",
    # Schemas
    "ChangePasswordRequest",
    "DeleteAccountRequest",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    # Service
    "AuthService",
    "AuthenticatedUser",
    # Store
    "RefreshTokenStore",
    "RotationResult",
    "purge_expired_tokens",
]
