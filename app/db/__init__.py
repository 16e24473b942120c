"""Database package"""
from app.db.session import get_db, engine, SessionLocal, init_db
from app.models.base import Base

__all__ = ["get_db", "engine", "SessionLocal", "init_db", "Base"]
