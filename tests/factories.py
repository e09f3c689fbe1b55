# tests/factories.py
import itertools
import json

from captionhub.ingestion.records import ImageRecord


def counting_keys(prefix="key"):
    """Deterministic key factory: key-1, key-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def make_record(order_index, image_key=None, **overrides):
    fields = dict(
        image_key=image_key or f"img-{order_index}",
        order_index=order_index,
        filename=f"{order_index}.jpg",
        primary_url=f"http://x/{order_index}.jpg",
        width=512,
        height=512,
        caption=f"caption {order_index}",
    )
    fields.update(overrides)
    return ImageRecord(**fields)


def coco_payload(images, annotations, licenses=None):
    document = {"images": images, "annotations": annotations}
    if licenses is not None:
        document["licenses"] = licenses
    return json.dumps(document).encode("utf-8")


def csv_payload(*lines):
    return ("\n".join(lines) + "\n").encode("utf-8")
