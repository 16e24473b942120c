"""Create the initial admin user (idempotent)"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent.parent))

import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.db.session import SessionLocal
from app.models.user import User, UserRole
from app.utils.auth import get_password_hash

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str = None, password: str = None, phone: str = None) -> User:
    """
    Return the bootstrap admin, creating it when missing.

    An existing account with the same email is promoted to admin and
    reactivated; its password is left untouched.
    """
    email = (email or settings.BOOTSTRAP_ADMIN_EMAIL).lower()
    password = password or settings.BOOTSTRAP_ADMIN_PASSWORD
    phone = phone or settings.BOOTSTRAP_ADMIN_PHONE

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        if existing.role != UserRole.ADMIN or not existing.is_active:
            existing.role = UserRole.ADMIN
            existing.is_active = True
            db.commit()
            db.refresh(existing)
            logger.info(f"Existing user {email} promoted to admin")
        else:
            logger.info(f"Admin user {email} already exists")
        return existing

    # Phone is unique; don't let the bootstrap admin collide with a customer
    if db.query(User).filter(User.phone == phone).first():
        phone = None

    admin = User(
        name="AX TEAM Admin",
        email=email,
        phone=phone,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN,
        is_active=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Admin user {email} created (id {admin.id})")
    return admin


def create_admin_user():
    db: Session = SessionLocal()
    try:
        admin = ensure_admin(db)
        print("✅ Admin user ready")
        print(f"   Email: {admin.email}")
        print(f"   Role: {admin.role.value}")
        print(f"   ID: {admin.id}")
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_admin_user()
