# captionhub/ingestion/errors.py
"""
Failure types raised by the ingestion pipeline.

Every fatal failure derives from IngestionError so callers can catch the
whole family once and map it to a response. Soft skips are not exceptions;
they are collected as SoftSkip values by a SkipLog.
"""
from typing import List, NamedTuple, Optional

from captionhub.core.config import settings


class IngestionError(Exception):
    """Base class for fatal ingestion failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StructuralFormatError(IngestionError):
    """The payload cannot be parsed as the detected format at all."""


class EmptyResultError(IngestionError):
    """The payload parsed but no usable record survived filtering."""


class DuplicateImageKeyError(IngestionError):
    """Two records in one batch supplied the same image key."""

    def __init__(self, image_key: str, first_ref: str, second_ref: str):
        super().__init__(
            f"duplicate image key {image_key!r}: supplied by {first_ref} and {second_ref}"
        )
        self.image_key = image_key


class PersistenceError(IngestionError):
    """The sink failed while replacing a dataset's images."""


class DatasetNotFoundError(IngestionError):
    """The target dataset does not exist."""

    def __init__(self, dataset_id):
        super().__init__(f"dataset {dataset_id} not found")
        self.dataset_id = dataset_id


class IngestionInProgressError(IngestionError):
    """Another upload currently holds the dataset."""

    def __init__(self, dataset_id):
        super().__init__(f"another upload to dataset {dataset_id} is still in progress")
        self.dataset_id = dataset_id


class SoftSkip(NamedTuple):
    source_ref: str
    reason: str


class SkipLog:
    """
    Collects soft skips for one batch.

    Only the first `sample_size` entries are kept; `count` keeps growing so
    a huge upload with many bad rows stays bounded in memory.
    """

    def __init__(self, sample_size: Optional[int] = None):
        if sample_size is None:
            sample_size = settings.INGEST_SKIP_SAMPLE_SIZE
        self.sample_size = sample_size
        self.count = 0
        self.sample: List[SoftSkip] = []

    def add(self, source_ref: str, reason: str) -> bool:
        """Record a skip. Returns True while the entry still fits in the sample."""
        self.count += 1
        if len(self.sample) < self.sample_size:
            self.sample.append(SoftSkip(source_ref, reason))
            return True
        return False

    def __len__(self) -> int:
        return self.count

    def __bool__(self) -> bool:
        return self.count > 0
