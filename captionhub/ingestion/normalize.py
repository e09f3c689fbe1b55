# captionhub/ingestion/normalize.py
from typing import Callable, Dict, Iterable, Iterator, Optional
from urllib.parse import urlsplit

from captionhub.core.logging import logger
from captionhub.core.security import generate_image_key
from captionhub.ingestion.errors import DuplicateImageKeyError, EmptyResultError, SkipLog
from captionhub.ingestion.records import ImageDraft, ImageRecord

UNKNOWN_FILENAME = "unknown"


def filename_from_url(url: str) -> str:
    """Last `/`-delimited segment of the URL path, or "unknown"."""
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    return path.rsplit("/", 1)[-1] or UNKNOWN_FILENAME


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize(
    drafts: Iterable[ImageDraft],
    skips: SkipLog,
    *,
    key_factory: Callable[[], str] = generate_image_key,
    empty_message: str = "no valid images in upload",
) -> Iterator[ImageRecord]:
    """
    Turn parser drafts into ImageRecords, lazily and in source order.

    Drafts that break a record constraint are soft-skipped into `skips`. The
    survivors get contiguous order indexes starting at 1 and unique keys.
    A key supplied twice by the source fails the batch, while a generated
    key that happens to collide is simply drawn again.

    Raises EmptyResultError once the drafts are exhausted without a single
    record having been produced.
    """
    seen_keys: Dict[str, str] = {}
    order_index = 0

    for draft in drafts:
        caption = _clean(draft.caption)
        primary_url = _clean(draft.primary_url)
        if not primary_url:
            record_skip(skips, draft.source_ref, "missing URL")
            continue
        if not caption:
            record_skip(skips, draft.source_ref, "empty caption")
            continue
        if draft.width < 0 or draft.height < 0:
            record_skip(skips, draft.source_ref, "negative width/height")
            continue

        supplied_key = _clean(draft.image_key)
        if supplied_key is not None:
            if supplied_key in seen_keys:
                raise DuplicateImageKeyError(supplied_key, seen_keys[supplied_key], draft.source_ref)
            image_key = supplied_key
        else:
            image_key = key_factory()
            while image_key in seen_keys:
                image_key = key_factory()
        seen_keys[image_key] = draft.source_ref

        order_index += 1
        yield ImageRecord(
            external_image_id=draft.external_image_id,
            image_key=image_key,
            order_index=order_index,
            filename=_clean(draft.filename) or filename_from_url(primary_url),
            primary_url=primary_url,
            secondary_url=_clean(draft.secondary_url),
            width=draft.width,
            height=draft.height,
            caption=caption,
            additional_captions=[c for c in (_clean(c) for c in draft.additional_captions) if c],
            license=_clean(draft.license),
        )

    if order_index == 0:
        raise EmptyResultError(empty_message)


def record_skip(skips: SkipLog, source_ref: str, reason: str) -> None:
    if skips.add(source_ref, reason):
        logger.warning(f"Skipping {source_ref}: {reason}")
