# captionhub/ingestion/records.py
"""
Record types for dataset ingestion.

Raw* models mirror one entry of an uploaded file and are validated when the
file is decoded. ImageDraft is what a parser hands to normalization, and
ImageRecord is the canonical, immutable result that gets persisted.
"""
import enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class DatasetFormat(str, enum.Enum):
    COCO = "coco"
    CSV = "csv"
    UNRECOGNIZED = "unrecognized"


COCOId = Union[int, str]


class RawCOCOImage(BaseModel):
    id: COCOId
    file_name: Optional[str] = None
    coco_url: Optional[str] = None
    flickr_url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    license: Optional[COCOId] = None

    class Config:
        extra = "ignore"


class RawCOCOAnnotation(BaseModel):
    id: Optional[COCOId] = None
    image_id: COCOId
    caption: Optional[str] = None

    class Config:
        extra = "ignore"


class RawCOCOLicense(BaseModel):
    id: COCOId
    name: str
    url: Optional[str] = None

    class Config:
        extra = "ignore"


class RawCSVRow(BaseModel):
    line_number: int
    values: Dict[str, Optional[str]]

    def get(self, column: str) -> str:
        return (self.values.get(column) or "").strip()


class ImageDraft(BaseModel):
    """A parsed image that has not been normalized yet."""
    source_ref: str
    image_key: Optional[str] = None
    external_image_id: Optional[int] = None
    filename: str
    primary_url: str
    secondary_url: Optional[str] = None
    width: int = 0
    height: int = 0
    caption: str
    additional_captions: List[str] = Field(default_factory=list)
    license: Optional[str] = None


class ImageRecord(BaseModel):
    """Canonical, format-agnostic image with captions, ready to persist."""
    external_image_id: Optional[int] = None
    image_key: str = Field(min_length=1)
    order_index: int = Field(ge=1)
    filename: str
    primary_url: str = Field(min_length=1)
    secondary_url: Optional[str] = None
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    caption: str = Field(min_length=1)
    additional_captions: List[str] = Field(default_factory=list)
    license: Optional[str] = None

    class Config:
        frozen = True

    @property
    def has_training_dimensions(self) -> bool:
        """Known, even width and height; zero or odd sizes only warrant a warning."""
        return (
            self.width > 0 and self.height > 0
            and self.width % 2 == 0 and self.height % 2 == 0
        )
