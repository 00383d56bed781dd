"""
Event Finance Manager - FastAPI Dependencies

Shared dependencies for authentication, database sessions and permissions.

This module provides dependency injection for:
1. Current user authentication (bearer header or access_token cookie)
2. Demo-mode detection
3. Per-request capability resolution
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.config import Settings, get_settings
from eventfinance.database import get_async_session
from eventfinance.models.user import User
from eventfinance.utils.error_handling import AuthenticationException, AuthorizationException
from eventfinance.utils.permissions import BudgetPermissions, resolve_permissions
from eventfinance.utils.security import verify_access_token


# HTTP Bearer token security
security = HTTPBearer(auto_error=False)

_TRUTHY = {"1", "true", "yes", "on"}


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Token can be provided via:
    1. Authorization: Bearer <token> header
    2. access_token cookie

    Raises:
        AuthenticationException: If token is missing, invalid or names no user
        AuthorizationException: If the account is deactivated
    """
    if credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise AuthenticationException("Not authenticated")

    payload = verify_access_token(token)
    if not payload:
        raise AuthenticationException("Invalid or expired token")

    user_id = payload.get("sub")
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        raise AuthenticationException("Invalid user ID in token")

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationException("User not found")

    if not user.is_active:
        raise AuthorizationException("User account is deactivated")

    return user


def is_demo_mode(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Whether this request runs in demo mode.

    The global flag always wins; otherwise a session may opt in through the
    demo_mode cookie or X-Demo-Mode header when allow_demo_sessions is on.
    """
    if settings.demo_mode:
        return True
    if not settings.allow_demo_sessions:
        return False
    flag = request.headers.get("X-Demo-Mode") or request.cookies.get("demo_mode") or ""
    return flag.strip().lower() in _TRUTHY


async def get_permissions(
    current_user: User = Depends(get_current_user),
    demo_mode: bool = Depends(is_demo_mode),
    settings: Settings = Depends(get_settings),
) -> BudgetPermissions:
    """Resolve the caller's capabilities once per request."""
    return resolve_permissions(current_user.role, demo_mode, settings)
