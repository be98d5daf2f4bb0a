"""
Каталог доменных исключений.

Каждое исключение наследуется от категории из shared.errors, которая
задаёт HTTP статус; код ошибки и сообщение по умолчанию выводятся
из имени класса и docstring.
"""

from tablekeeper.shared.errors import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    BusinessRuleViolationError,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)

__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "BusinessRuleViolationError",
    "ConflictError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ValidationError",
    # 400
    "WeakPasswordError",
    "ForeignKeyViolationError",
    # 401
    "InvalidCredentialsError",
    "UnauthenticatedError",
    "TokenInvalidError",
    "TokenExpiredError",
    "RefreshTokenNotFoundError",
    "RefreshTokenAlreadyUsedError",
    "RefreshTokenRevokedError",
    "RefreshTokenExpiredError",
    # 403
    "ForbiddenError",
    "IncorrectPasswordError",
    # 404
    "UserNotFoundError",
    "TableNotFoundError",
    "TableRequestNotFoundError",
    "SessionNotFoundError",
    "SessionIntentNotFoundError",
    "MembershipNotFoundError",
    # 409
    "UsernameAlreadyTakenError",
    "EmailAlreadyTakenError",
    "UserAlreadyMemberOfTableError",
    "UserSessionIntentAlreadyExistsError",
    # 422
    "CannotJoinOwnTableError",
    "AlreadyMemberError",
    "PendingRequestAlreadyExistsError",
    "RequestAlreadyProcessedError",
    "TableNotAcceptingPlayersError",
    "TableFullError",
    "SessionNotEditableError",
    "SessionNotOpenForIntentsError",
    "GameMasterCannotLeaveError",
    # 500
    "InvalidHashFormatError",
    "UnknownConstraintError",
]


# ==================== 400 ====================


class WeakPasswordError(ValidationError):
    """Password does not satisfy the password policy."""

    code = "WEAK_PASSWORD"


class ForeignKeyViolationError(BadRequestError):
    """Referenced record does not exist."""


# ==================== 401 ====================


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""


class UnauthenticatedError(AuthenticationError):
    """Authentication required."""


class TokenInvalidError(AuthenticationError):
    """Invalid token."""


class TokenExpiredError(AuthenticationError):
    """Token has expired."""


class RefreshTokenNotFoundError(AuthenticationError):
    """Refresh token not found."""


class RefreshTokenAlreadyUsedError(AuthenticationError):
    """Refresh token has already been used."""


class RefreshTokenRevokedError(AuthenticationError):
    """Refresh token has been revoked."""


class RefreshTokenExpiredError(AuthenticationError):
    """Refresh token has expired."""


# ==================== 403 ====================


class ForbiddenError(AuthorizationError):
    """You do not have permission to perform this action."""


class IncorrectPasswordError(AuthorizationError):
    """Current password is incorrect."""


# ==================== 404 ====================


class UserNotFoundError(NotFoundError):
    """User not found."""


class TableNotFoundError(NotFoundError):
    """Table not found."""


class TableRequestNotFoundError(NotFoundError):
    """Table request not found."""


class SessionNotFoundError(NotFoundError):
    """Session not found."""


class SessionIntentNotFoundError(NotFoundError):
    """Session intent not found."""


class MembershipNotFoundError(NotFoundError):
    """User is not a member of this table."""


# ==================== 409 ====================


class UsernameAlreadyTakenError(ConflictError):
    """Username is already taken."""


class EmailAlreadyTakenError(ConflictError):
    """Email is already registered."""


class UserAlreadyMemberOfTableError(ConflictError):
    """User is already a member of this table."""


class UserSessionIntentAlreadyExistsError(ConflictError):
    """Intent for this session already exists."""


# ==================== 422 ====================


class CannotJoinOwnTableError(BusinessRuleViolationError):
    """Game master cannot request to join their own table."""


class AlreadyMemberError(BusinessRuleViolationError):
    """User is already a member of this table."""


class PendingRequestAlreadyExistsError(BusinessRuleViolationError):
    """A pending request for this table already exists."""


class RequestAlreadyProcessedError(BusinessRuleViolationError):
    """Request has already been processed."""


class TableNotAcceptingPlayersError(BusinessRuleViolationError):
    """Table is not accepting new players."""


class TableFullError(BusinessRuleViolationError):
    """All player slots of this table are taken."""


class SessionNotEditableError(BusinessRuleViolationError):
    """Session is completed or cancelled and cannot be changed."""


class SessionNotOpenForIntentsError(BusinessRuleViolationError):
    """Intents can only be declared for scheduled sessions."""


class GameMasterCannotLeaveError(BusinessRuleViolationError):
    """Game master cannot leave their own table."""


# ==================== 500 ====================


class InvalidHashFormatError(AppError):
    """Stored password hash is malformed."""


class UnknownConstraintError(AppError):
    """Database constraint violation."""
