"""
Database initialization helpers.

Models are imported here so their tables get registered on Base.metadata.
"""

from sqlalchemy.engine import Engine

from stopmotion.models.base import Base
from stopmotion.models import image, project, user  # noqa: F401


def init_db(engine: Engine) -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=engine)
