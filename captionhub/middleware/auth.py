# captionhub/middleware/auth.py
from typing import Optional

from fastapi import HTTPException, Depends, status
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy.orm import Session

from captionhub.db.session import get_db
from captionhub.models.api_key import ApiKey
from captionhub.models.dataset import Dataset
from captionhub.models.user import User
from captionhub.core.logging import logger

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def resolve_api_key(key: str, db: Session) -> User:
    """
    Map a raw key to its active owner, recording the key's last use.

    Raises a 401 for unknown, inactive or expired keys and for keys whose
    user has been deactivated.
    """
    api_key = db.query(ApiKey).filter(ApiKey.key == key).first()
    if not api_key:
        logger.warning(f"Invalid API Key attempt: {key[:5]}...")
        raise _unauthorized("Invalid API Key")

    log = logger.bind(api_key_id=api_key.id)
    if not api_key.is_active:
        log.warning("Inactive API Key used")
        raise _unauthorized("API Key is inactive")
    if api_key.is_expired():
        log.warning("Expired API Key used")
        raise _unauthorized("API Key has expired")

    user = api_key.user
    if not user or not user.is_active:
        log.warning("API Key belongs to a missing or inactive user")
        raise _unauthorized("User is inactive")

    api_key.touch()
    db.commit()
    return user


async def get_current_user(
    api_key_header: str = Depends(API_KEY_HEADER), db: Session = Depends(get_db)
) -> User:
    """
    Resolve the user behind the X-API-Key header; 401 when absent or invalid
    """
    if not api_key_header:
        logger.warning("API Key missing from request")
        raise _unauthorized("API Key is missing")
    return resolve_api_key(api_key_header, db)


async def get_optional_user(
    api_key_header: str = Depends(API_KEY_HEADER), db: Session = Depends(get_db)
) -> Optional[User]:
    if not api_key_header:
        return None
    return resolve_api_key(api_key_header, db)


def can_view_dataset(dataset: Dataset, user: Optional[User]) -> bool:
    if dataset.is_public:
        return True
    return user is not None and (user.is_admin or dataset.user_id == user.id)


def can_modify_dataset(dataset: Dataset, user: User) -> bool:
    return user.is_admin or dataset.user_id == user.id
