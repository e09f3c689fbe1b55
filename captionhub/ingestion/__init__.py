# captionhub/ingestion/__init__.py
"""
Dataset ingestion: turn an uploaded CSV or COCO caption file into a
dataset's complete image set.
"""
from captionhub.ingestion.coco import parse_coco
from captionhub.ingestion.csv_parser import iter_csv_records, parse_csv
from captionhub.ingestion.errors import (
    DatasetNotFoundError,
    DuplicateImageKeyError,
    EmptyResultError,
    IngestionError,
    IngestionInProgressError,
    PersistenceError,
    SkipLog,
    SoftSkip,
    StructuralFormatError,
)
from captionhub.ingestion.orchestrator import IngestResult, IngestionService, ingest_upload, ingestion_service
from captionhub.ingestion.records import DatasetFormat, ImageRecord
from captionhub.ingestion.sink import ImageSink, SQLAlchemyImageSink
from captionhub.ingestion.sniffer import detect_format, sniff_stream
