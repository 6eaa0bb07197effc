"""
Database initialization helper.
"""

from menu_service.db import Base, get_engine


def init_db() -> None:
    """
    Create database tables for all registered models.
    """
    Base.metadata.create_all(bind=get_engine())
