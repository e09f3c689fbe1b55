# captionhub/ingestion/coco.py
"""
COCO caption JSON parsing.

Expects the captions flavour of the format: top-level `images` and
`annotations` arrays, plus an optional `licenses` array. Each annotation
holds a `caption` for the image named by its `image_id`; an image may have
several.
"""
import json
from typing import Any, Callable, Dict, Iterator, List, Optional

from pydantic import ValidationError

from captionhub.core.logging import logger
from captionhub.core.security import generate_image_key
from captionhub.ingestion.errors import SkipLog, StructuralFormatError
from captionhub.ingestion.normalize import filename_from_url, normalize, record_skip
from captionhub.ingestion.records import (
    COCOId,
    ImageDraft,
    ImageRecord,
    RawCOCOAnnotation,
    RawCOCOImage,
    RawCOCOLicense,
)

EMPTY_COCO_MESSAGE = "no valid images: every image was missing a URL or caption"


def load_coco_document(data: bytes) -> Dict[str, Any]:
    """Decode the upload and check the top-level COCO shape."""
    try:
        document = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as e:
        raise StructuralFormatError("Invalid JSON format in COCO file") from e

    if not isinstance(document, dict):
        raise StructuralFormatError("Invalid COCO format: top-level value must be an object")
    if not isinstance(document.get("images"), list):
        raise StructuralFormatError('Invalid COCO format: missing or invalid "images" array')
    if not isinstance(document.get("annotations"), list):
        raise StructuralFormatError('Invalid COCO format: missing or invalid "annotations" array')
    return document


def build_license_lookup(entries: Any) -> Dict[COCOId, str]:
    lookup: Dict[COCOId, str] = {}
    if not isinstance(entries, list):
        return lookup
    for entry in entries:
        try:
            lic = RawCOCOLicense.model_validate(entry)
        except ValidationError:
            logger.bind(entry=str(entry)[:200]).warning("Ignoring malformed license entry")
            continue
        lookup[lic.id] = lic.name
    return lookup


def group_captions(entries: List[Any]) -> Dict[COCOId, List[str]]:
    """image_id -> captions in annotation order, dropping blank captions."""
    grouped: Dict[COCOId, List[str]] = {}
    for entry in entries:
        try:
            ann = RawCOCOAnnotation.model_validate(entry)
        except ValidationError:
            logger.bind(entry=str(entry)[:200]).warning("Skipping malformed annotation")
            continue
        if not ann.caption or not ann.caption.strip():
            logger.bind(annotation_id=ann.id).warning("Skipping annotation without caption")
            continue
        grouped.setdefault(ann.image_id, []).append(ann.caption)
    return grouped


def _external_id(image_id: COCOId) -> Optional[int]:
    if isinstance(image_id, int):
        return image_id
    try:
        return int(image_id)
    except ValueError:
        return None


def iter_coco_drafts(document: Dict[str, Any], skips: SkipLog) -> Iterator[ImageDraft]:
    licenses = build_license_lookup(document.get("licenses"))
    captions_by_image = group_captions(document["annotations"])

    for position, entry in enumerate(document["images"], start=1):
        try:
            image = RawCOCOImage.model_validate(entry)
        except ValidationError as e:
            record_skip(skips, f"image #{position}", f"invalid image entry ({e.error_count()} errors)")
            continue

        source_ref = f"image {image.id}"
        url = image.coco_url or image.flickr_url
        if not url:
            record_skip(skips, source_ref, "missing URL")
            continue

        captions = captions_by_image.get(image.id)
        if not captions:
            record_skip(skips, source_ref, "no captions")
            continue

        license_name = None
        if image.license is not None:
            license_name = licenses.get(image.license, str(image.license))

        first_caption, *additional_captions = captions
        yield ImageDraft(
            source_ref=source_ref,
            external_image_id=_external_id(image.id),
            filename=image.file_name or filename_from_url(url),
            primary_url=url,
            secondary_url=image.flickr_url,
            width=image.width or 0,
            height=image.height or 0,
            caption=first_caption,
            additional_captions=additional_captions,
            license=license_name,
        )


def parse_coco(
    data: bytes,
    skips: Optional[SkipLog] = None,
    key_factory: Callable[[], str] = generate_image_key,
) -> List[ImageRecord]:
    """
    Parse a COCO caption document into ImageRecords.

    Images without a URL or without any caption are skipped; the first
    caption becomes the record's caption and the rest its additional
    captions. Every record gets a freshly generated key.

    Raises StructuralFormatError for undecodable or mis-shaped JSON and
    EmptyResultError when no image survives.
    """
    skips = skips if skips is not None else SkipLog()
    document = load_coco_document(data)
    records = list(
        normalize(
            iter_coco_drafts(document, skips),
            skips,
            key_factory=key_factory,
            empty_message=EMPTY_COCO_MESSAGE,
        )
    )

    if skips:
        logger.bind(skipped_image_refs=[s.source_ref for s in skips.sample]).info(
            f"Skipped {skips.count} images without URLs or captions"
        )
    logger.info(f"Parsed COCO JSON: {len(records)} images, {skips.count} skipped")
    return records
