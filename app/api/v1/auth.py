"""
Authentication endpoints for AX TEAM API
"""
from fastapi import APIRouter, Depends, status, Response, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from app.db.session import get_db
from app.dependencies.auth import get_current_user
from app.middleware.rate_limit import limiter, REGISTER_LIMIT, LOGIN_LIMIT
from app.models.user import User, UserRole
from app.schemas.auth import UserLogin, UserRegister, UserResponse, ProfileUpdate, PasswordChange
from app.utils.auth import verify_password, get_password_hash, create_user_token

router = APIRouter()
logger = logging.getLogger(__name__)


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,  # Prevents JavaScript access (XSS protection)
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def _token_payload(user: User, token: str) -> dict:
    return {
        "token": token,
        "token_type": "bearer",
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
    }


def _authenticate(db: Session, credentials: UserLogin) -> User:
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated. Please contact support.")
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    user_data: UserRegister,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Register a new customer account
    """
    existing_user = db.query(User).filter(
        or_(User.email == user_data.email, User.phone == user_data.phone)
    ).first()
    if existing_user:
        field = "email" if existing_user.email == user_data.email else "phone"
        raise ValidationError(f"User with this {field} already exists")

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role=UserRole.USER,
        is_active=True,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info(f"New user registered: {new_user.email}")

    token = create_user_token(new_user)
    _set_auth_cookie(response, token)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": _token_payload(new_user, token),
    }


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    response: Response,
    db: Session = Depends(get_db)
):
    user = _authenticate(db, credentials)
    user.last_login = datetime.utcnow()
    db.commit()

    token = create_user_token(user)
    _set_auth_cookie(response, token)
    return {
        "success": True,
        "message": "Login successful",
        "data": _token_payload(user, token),
    }


@router.post("/admin-login")
@limiter.limit(LOGIN_LIMIT)
async def admin_login(
    request: Request,
    credentials: UserLogin,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Login restricted to admin accounts
    """
    user = _authenticate(db, credentials)
    if user.role != UserRole.ADMIN:
        logger.warning(f"Non-admin admin-login attempt: {user.email}")
        raise AuthorizationError("Access denied. Admin privileges required.")

    user.last_login = datetime.utcnow()
    db.commit()

    token = create_user_token(user)
    _set_auth_cookie(response, token)
    return {
        "success": True,
        "message": "Admin login successful",
        "data": _token_payload(user, token),
    }


@router.get("/me")
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "data": {"user": UserResponse.model_validate(current_user).model_dump(mode="json")},
    }


@router.put("/profile")
async def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if update.phone and update.phone != current_user.phone:
        taken = db.query(User).filter(User.phone == update.phone, User.id != current_user.id).first()
        if taken:
            raise ValidationError("Phone number already in use")
        current_user.phone = update.phone
    if update.name:
        current_user.name = update.name.strip()

    db.commit()
    db.refresh(current_user)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {"user": UserResponse.model_validate(current_user).model_dump(mode="json")},
    }


@router.put("/change-password")
async def change_password(
    passwords: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not verify_password(passwords.current_password, current_user.password_hash):
        raise ValidationError("Current password is incorrect")

    current_user.password_hash = get_password_hash(passwords.new_password)
    db.commit()
    logger.info(f"Password changed for user {current_user.id}")
    return {"success": True, "message": "Password changed successfully"}


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(key="access_token", path="/")
    return {"success": True, "message": "Logged out successfully"}
