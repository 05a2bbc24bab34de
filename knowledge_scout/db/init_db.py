"""
Database initialization and seeding.
"""
import logging
from urllib.parse import quote_plus

from sqlalchemy.orm import Session

from knowledge_scout.core.config import settings
from knowledge_scout.core.security import get_password_hash
from knowledge_scout.models.user import User

logger = logging.getLogger(__name__)


def default_avatar(name: str) -> str:
    """Generated initials avatar for a user without one."""
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}&background=0ea5e9&color=fff"


def ensure_demo_user(db: Session) -> User:
    """
    Create the demo account if it does not exist yet.

    Args:
        db: Database session

    Returns:
        The demo user
    """
    demo = db.query(User).filter(User.email == settings.DEMO_USER_EMAIL).first()
    if demo:
        return demo

    demo = User(
        email=settings.DEMO_USER_EMAIL,
        name=settings.DEMO_USER_NAME,
        hashed_password=get_password_hash(settings.DEMO_USER_PASSWORD),
        avatar=default_avatar(settings.DEMO_USER_NAME),
    )
    db.add(demo)
    db.commit()
    db.refresh(demo)
    logger.info(f"Demo user created successfully: {settings.DEMO_USER_EMAIL}")
    return demo


def init_db(db: Session) -> None:
    """
    Initialize database with default data.

    Args:
        db: Database session
    """
    if settings.SEED_DEMO_USER:
        ensure_demo_user(db)
