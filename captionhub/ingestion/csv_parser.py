# captionhub/ingestion/csv_parser.py
import csv
import io
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

from captionhub.core.logging import logger
from captionhub.core.security import generate_image_key
from captionhub.ingestion.errors import SkipLog, StructuralFormatError
from captionhub.ingestion.normalize import normalize, record_skip
from captionhub.ingestion.records import ImageDraft, ImageRecord, RawCSVRow

REQUIRED_COLUMNS = ("filename", "url", "width", "height", "prompt")
KEY_COLUMN = "img_key"

EMPTY_CSV_MESSAGE = "no valid rows: every row was missing a required field"

CSVSource = Union[bytes, BinaryIO]


def _open_text(source: CSVSource) -> io.TextIOWrapper:
    raw = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    # newline="" lets the csv module handle quoted line breaks
    return io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")


def _parse_dimension(value: str) -> Optional[int]:
    try:
        number = int(value)
    except ValueError:
        return None
    return number if number >= 0 else None


def _iter_rows(text: io.TextIOWrapper) -> Iterator[RawCSVRow]:
    reader = csv.DictReader(text)
    try:
        header = reader.fieldnames
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise StructuralFormatError(f"Error processing CSV file: {e}") from e

    if not header:
        raise StructuralFormatError("CSV file is empty")
    reader.fieldnames = [(name or "").strip() for name in header]
    missing = [col for col in REQUIRED_COLUMNS if col not in reader.fieldnames]
    if missing:
        raise StructuralFormatError(f"CSV file is missing required column(s): {', '.join(missing)}")

    line_number = 0
    while True:
        try:
            values = next(reader)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StructuralFormatError(
                f"Error processing CSV file after row {line_number}: {e}"
            ) from e
        line_number += 1
        # DictReader collects surplus cells under the None key
        values.pop(None, None)
        yield RawCSVRow(line_number=line_number, values=values)


def iter_csv_drafts(source: CSVSource, skips: SkipLog) -> Iterator[ImageDraft]:
    text = _open_text(source)
    try:
        for row in _iter_rows(text):
            source_ref = f"row {row.line_number}"

            missing = [col for col in REQUIRED_COLUMNS if not row.get(col)]
            if missing:
                record_skip(skips, source_ref, f"missing required field(s): {', '.join(missing)}")
                continue

            width = _parse_dimension(row.get("width"))
            height = _parse_dimension(row.get("height"))
            if width is None or height is None:
                record_skip(skips, source_ref, "invalid width/height")
                continue

            yield ImageDraft(
                source_ref=source_ref,
                image_key=row.get(KEY_COLUMN) or None,
                filename=row.get("filename"),
                primary_url=row.get("url"),
                width=width,
                height=height,
                caption=row.get("prompt"),
            )
    finally:
        # leave the caller's stream open
        text.detach()


def iter_csv_records(
    source: CSVSource,
    skips: Optional[SkipLog] = None,
    key_factory: Callable[[], str] = generate_image_key,
) -> Iterator[ImageRecord]:
    """
    Lazily parse CSV rows into ImageRecords.

    Rows are read one at a time so an upload of any size is processed in
    bounded memory. The header must name the columns filename, url, width,
    height and prompt; an img_key column is used when present. Rows with a
    blank required field or a non-integer size are soft-skipped.

    Raises StructuralFormatError for an unreadable stream or a bad header,
    and EmptyResultError once the file ends without an accepted row.
    """
    skips = skips if skips is not None else SkipLog()
    return normalize(
        iter_csv_drafts(source, skips),
        skips,
        key_factory=key_factory,
        empty_message=EMPTY_CSV_MESSAGE,
    )


def parse_csv(
    source: CSVSource,
    skips: Optional[SkipLog] = None,
    key_factory: Callable[[], str] = generate_image_key,
) -> List[ImageRecord]:
    skips = skips if skips is not None else SkipLog()
    records = list(iter_csv_records(source, skips, key_factory))
    logger.info(f"Parsed CSV: {len(records)} rows accepted, {skips.count} skipped")
    return records
