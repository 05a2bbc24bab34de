"""
Script to initialize the database with tables and seed data.
"""
import logging

from knowledge_scout.db.base import SessionLocal, engine
from knowledge_scout.db.init_db import init_db
from knowledge_scout.models import Base

logger = logging.getLogger("init_db")


def init() -> None:
    """Initialize database."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    logger.info("Seeding initial data...")
    db = SessionLocal()
    try:
        init_db(db)
        logger.info("Initial data seeded")
    finally:
        db.close()

    logger.info("Database initialization complete!")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(levelname)s:\t%(name)s\t%(message)s')
    init()
