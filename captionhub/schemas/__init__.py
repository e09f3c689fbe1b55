# Import schemas in correct order to avoid circular imports
from captionhub.schemas.base import BaseSchema, TimestampMixin
from captionhub.schemas.dataset import DatasetBase, DatasetCreate, Dataset, DatasetActivity
from captionhub.schemas.image import DatasetImage, DatasetImagePage
from captionhub.schemas.ingest import IngestResponse, SkippedRecord
