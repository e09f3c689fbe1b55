# captionhub/db/init_db.py
from sqlalchemy.orm import Session

from captionhub.core.logging import logger
from captionhub.core.security import create_api_key
from captionhub.db import base  # noqa: F401  registers every model
from captionhub.db.session import Base, SessionLocal, engine
from captionhub.models.user import User
from captionhub.models.api_key import ApiKey


def init_db(db: Session) -> None:
    """Seed an admin user and a regular user, each with an API key"""
    if db.query(User).first():
        logger.info("Database already contains data, skipping initialization")
        return

    logger.info("Creating initial data")

    created = []
    for email, name, is_admin in (
        ("admin@example.com", "Admin User", True),
        ("user@example.com", "Regular User", False),
    ):
        user = User(email=email, name=name, is_active=True, is_admin=is_admin)
        db.add(user)
        db.flush()  # Flush to get user ID

        api_key = ApiKey(
            key=create_api_key(),
            name=f"{name} API Key",
            is_active=True,
            user_id=user.id
        )
        db.add(api_key)
        created.append((user, api_key))

    db.commit()

    for user, api_key in created:
        logger.info(f"Created user: {user.email} with API key: {api_key.key}")
    logger.info("Initial data created successfully")


def setup_database() -> None:
    """Create missing tables and seed the first users"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
