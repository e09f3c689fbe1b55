# captionhub/ingestion/orchestrator.py
import itertools
import threading
from contextlib import contextmanager
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Union

from pydantic import BaseModel

from captionhub.core.config import settings
from captionhub.core.logging import logger
from captionhub.core.security import generate_image_key
from captionhub.db.session import SessionLocal
from captionhub.ingestion.coco import parse_coco
from captionhub.ingestion.csv_parser import iter_csv_records
from captionhub.ingestion.errors import (
    EmptyResultError,
    IngestionError,
    IngestionInProgressError,
    SkipLog,
    SoftSkip,
    StructuralFormatError,
)
from captionhub.ingestion.records import DatasetFormat, ImageRecord
from captionhub.ingestion.sink import ImageSink, SQLAlchemyImageSink
from captionhub.ingestion.sniffer import detect_format, sniff_stream

Payload = Union[bytes, BinaryIO]


class IngestResult(BaseModel):
    inserted_count: int
    detected_format: DatasetFormat
    skipped_count: int = 0
    skipped_sample: List[SoftSkip] = []
    dimension_warnings: int = 0
    message: str


class DatasetLockRegistry:
    """One exclusive lock per dataset, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def _lock_for(self, dataset_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(dataset_id)
            if lock is None:
                lock = self._locks[dataset_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, dataset_id: int, timeout: float):
        lock = self._lock_for(dataset_id)
        if not lock.acquire(timeout=timeout if timeout > 0 else -1):
            raise IngestionInProgressError(dataset_id)
        try:
            yield
        finally:
            lock.release()


class _DimensionTally:
    """Passes records through, counting sizes a trainer would complain about."""

    def __init__(self, records: Iterable[ImageRecord]):
        self._records = records
        self.warnings = 0

    def __iter__(self) -> Iterator[ImageRecord]:
        for record in self._records:
            if not record.has_training_dimensions:
                self.warnings += 1
            yield record


def summarize(inserted: int, fmt: DatasetFormat, skipped: int) -> str:
    message = f"ingested {inserted} images"
    if skipped:
        if fmt is DatasetFormat.COCO:
            message += f"; {skipped} images skipped (no URL/caption)"
        else:
            message += f"; {skipped} rows skipped (missing or invalid fields)"
    return message


class IngestionService:
    """
    Replace-on-upload for dataset images.

    Detects the upload's format, parses and normalizes it, and hands the
    records to the sink for an all-or-nothing replacement. Uploads to the
    same dataset are serialized. Nothing is deleted unless parsing got far
    enough to produce at least one record.
    """

    def __init__(
        self,
        sink: ImageSink,
        key_factory: Callable[[], str] = generate_image_key,
        lock_timeout: Optional[float] = None,
        locks: Optional[DatasetLockRegistry] = None,
    ):
        self.sink = sink
        self.key_factory = key_factory
        self.lock_timeout = settings.INGEST_LOCK_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout
        self.locks = locks or DatasetLockRegistry()

    def ingest_upload(
        self, dataset_id: int, payload: Payload, filename: Optional[str] = None
    ) -> IngestResult:
        log = logger.bind(dataset_id=dataset_id, file_name=filename)
        with self.locks.hold(dataset_id, self.lock_timeout):
            try:
                fmt, data = self._sniff(payload)
                log = log.bind(format=fmt.value)
                skips = SkipLog()
                records = self._parse(fmt, data, skips)
                tally = _DimensionTally(records)
                inserted = self.sink.replace_all_images(dataset_id, tally)
            except IngestionError as e:
                log.bind(error_type=type(e).__name__).warning(f"Upload rejected: {e.message}")
                raise

        result = IngestResult(
            inserted_count=inserted,
            detected_format=fmt,
            skipped_count=skips.count,
            skipped_sample=skips.sample,
            dimension_warnings=tally.warnings,
            message=summarize(inserted, fmt, skips.count),
        )
        if tally.warnings:
            log.warning(f"{tally.warnings} images have zero or odd dimensions")
        log.bind(inserted=inserted, skipped=skips.count).info(result.message)
        return result

    def _sniff(self, payload: Payload):
        if isinstance(payload, (bytes, bytearray)):
            data = bytes(payload)
            return detect_format(data), data
        try:
            return sniff_stream(payload)
        except OSError as e:
            raise StructuralFormatError(f"Error reading upload: {e}") from e

    def _parse(self, fmt: DatasetFormat, data: Payload, skips: SkipLog) -> Iterable[ImageRecord]:
        if fmt is DatasetFormat.UNRECOGNIZED:
            raise StructuralFormatError("Uploaded file is empty")
        if fmt is DatasetFormat.COCO:
            return parse_coco(data, skips, self.key_factory)

        records = iter_csv_records(data, skips, self.key_factory)
        # Pull one record before the sink starts deleting, so a bad header
        # or a file without usable rows leaves the old images untouched.
        first = next(records, None)
        if first is None:
            raise EmptyResultError("no valid rows in CSV upload")
        return itertools.chain([first], records)


# Create a singleton instance
ingestion_service = IngestionService(SQLAlchemyImageSink(SessionLocal))


def ingest_upload(
    dataset_id: int,
    payload: Payload,
    filename: Optional[str] = None,
    sink: Optional[ImageSink] = None,
) -> IngestResult:
    """Detect, parse and atomically store an upload for a dataset."""
    service = ingestion_service if sink is None else IngestionService(sink, locks=ingestion_service.locks)
    return service.ingest_upload(dataset_id, payload, filename=filename)
