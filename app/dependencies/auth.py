"""
Authentication dependencies for FastAPI
"""
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.db.session import get_db
from app.models.user import User
from app.utils.auth import decode_access_token

security = HTTPBearer(auto_error=False)  # Don't auto-raise error, check cookie first


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials:
        return credentials.credentials
    # Fallback to httpOnly cookie
    return request.cookies.get("access_token")


def _resolve_user(token: str, db: Session) -> User:
    payload = decode_access_token(token)

    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError("Invalid token")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token
    Supports both Authorization header and httpOnly cookie
    """
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError("Not authenticated")

    user = _resolve_user(token, db)
    # Used by the rate limiter key function
    request.state.user_id = user.id
    return user


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Require admin role
    """
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user


def get_notifier(request: Request):
    """Notification dispatcher built during application startup"""
    return request.app.state.notifier
