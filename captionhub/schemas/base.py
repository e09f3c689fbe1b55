# captionhub/schemas/base.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class TimestampMixin(BaseModel):
    """Timestamp fields for database models"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    class Config:
        from_attributes = True
