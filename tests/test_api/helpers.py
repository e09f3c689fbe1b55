# tests/test_api/helpers.py
import uuid

from captionhub.core.security import create_api_key
from captionhub.db.session import SessionLocal
from captionhub.models.api_key import ApiKey
from captionhub.models.user import User


def create_user_with_key(is_admin=False, is_active=True):
    """Create a user and return the headers that authenticate as them."""
    db = SessionLocal()
    try:
        user = User(
            email=f"{uuid.uuid4().hex[:12]}@example.com",
            name="Test User",
            is_active=is_active,
            is_admin=is_admin,
        )
        db.add(user)
        db.flush()
        api_key = ApiKey(key=create_api_key(), name="test key", is_active=True, user_id=user.id)
        db.add(api_key)
        db.commit()
        return user.id, {"X-API-Key": api_key.key}
    finally:
        db.close()
