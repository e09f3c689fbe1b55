# captionhub/schemas/image.py
from pydantic import BaseModel
from typing import Optional, List
from captionhub.schemas.base import BaseSchema, TimestampMixin


class DatasetImage(TimestampMixin, BaseSchema):
    id: int
    dataset_id: int
    img_key: str
    row_number: int
    filename: str
    url: str
    width: int
    height: int
    prompt: str
    coco_image_id: Optional[int] = None
    additional_captions: Optional[List[str]] = None
    license: Optional[str] = None
    flickr_url: Optional[str] = None


class DatasetImagePage(BaseModel):
    data: List[DatasetImage]
    total: int
    page: int
    last_page: int
