"""
FastAPI зависимости (dependencies).
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tablekeeper.shared.schemas import PaginationParams

from .authorization import AuthorizationGate, gate
from .config import Settings
from .database import get_db
from .exceptions import UnauthenticatedError
from .security import Claims, PasswordHasher, TokenIssuer

# Схема только для OpenAPI (кнопка Authorize); проверку делает ClaimsMiddleware
bearer_scheme = HTTPBearer(auto_error=False)


# ==================== Database ====================

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


# ==================== Application components ====================


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    """TokenIssuer, созданный при сборке приложения."""
    return request.app.state.token_issuer


def get_password_hasher(request: Request) -> PasswordHasher:
    """PasswordHasher с пулом потоков приложения."""
    return request.app.state.password_hasher


def get_gate() -> AuthorizationGate:
    return gate


AppSettings = Annotated[Settings, Depends(get_settings_from_app)]
Issuer = Annotated[TokenIssuer, Depends(get_token_issuer)]
Hasher = Annotated[PasswordHasher, Depends(get_password_hasher)]
Gate = Annotated[AuthorizationGate, Depends(get_gate)]


# ==================== Authentication ====================


def get_claims(request: Request, _: object = Depends(bearer_scheme)) -> Claims:
    """
    Claims, проверенные ClaimsMiddleware.

    Raises:
        UnauthenticatedError: Маршрут не закрыт middleware (ошибка конфигурации)
            или запрос пришёл без токена.
    """
    claims = getattr(request.state, "claims", None)
    if claims is None:
        raise UnauthenticatedError()
    return claims


def get_current_user_id(claims: Claims = Depends(get_claims)) -> UUID:
    """ID текущего пользователя (claim sub)."""
    return claims.sub


CurrentClaims = Annotated[Claims, Depends(get_claims)]
CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]


# ==================== Pagination ====================


def get_pagination(page: int = 1, page_size: int = 20) -> PaginationParams:
    """Параметры пагинации из query (page_size ограничен 100)."""
    return PaginationParams(page=max(1, page), page_size=min(max(1, page_size), 100))


Pagination = Annotated[PaginationParams, Depends(get_pagination)]
