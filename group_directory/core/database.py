"""
Database configuration and setup for SQLAlchemy.

This module handles database connection management, session creation,
and provides the foundation for every group directory query.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from typing import Optional

from group_directory.config.settings import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    For SQLite, we need check_same_thread=False to allow multiple threads.
    """
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if "sqlite" in database_url else {},
        echo=echo
    )


# Create SQLAlchemy engine
engine = build_engine(settings.database_url, echo=settings.debug)

# Create SessionLocal class for database sessions
# Each instance will be a database session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all SQLAlchemy models
# All models will inherit from this base class
Base = declarative_base()


def create_tables(bind: Optional[Engine] = None):
    """
    Create all database tables.

    This function creates all tables defined by SQLAlchemy models
    that inherit from Base. Used for initial database setup.
    """
    # Models register themselves on Base.metadata at import time
    import group_directory.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind: Optional[Engine] = None):
    """
    Drop all database tables.

    This function drops all tables defined by SQLAlchemy models.
    Useful for testing or resetting the database.
    """
    import group_directory.models  # noqa: F401
    Base.metadata.drop_all(bind=bind or engine)
