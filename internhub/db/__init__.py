"""Database package — async SQLAlchemy engine, session factory, Base."""
from internhub.db.base import Base, build_engine, build_session_factory, get_db

__all__ = ["Base", "build_engine", "build_session_factory", "get_db"]
