# captionhub/schemas/ingest.py
from pydantic import BaseModel
from typing import List


class SkippedRecord(BaseModel):
    source_ref: str
    reason: str


class IngestResponse(BaseModel):
    """Result of a dataset upload, as reported back to the uploader."""
    dataset_id: int
    message: str
    inserted_count: int
    detected_format: str
    skipped_count: int = 0
    skipped_sample: List[SkippedRecord] = []
    dimension_warnings: int = 0
