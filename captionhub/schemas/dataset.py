# captionhub/schemas/dataset.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from captionhub.models.dataset_activity import ActivityType
from captionhub.schemas.base import BaseSchema, TimestampMixin


class DatasetBase(BaseModel):
    name: str
    description: Optional[str] = None
    is_public: bool = True


class DatasetCreate(DatasetBase):
    pass


class Dataset(DatasetBase, TimestampMixin, BaseSchema):
    id: int
    user_id: int


class DatasetActivity(BaseSchema):
    id: int
    activity_type: ActivityType
    user_id: int
    dataset_id: int
    file_name: Optional[str] = None
    image_count: Optional[int] = None
    file_format: Optional[str] = None
    created_at: Optional[datetime] = None
