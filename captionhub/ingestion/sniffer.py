# captionhub/ingestion/sniffer.py
import io
import json
from typing import BinaryIO, Optional, Tuple, Union

from captionhub.core.config import settings
from captionhub.ingestion.records import DatasetFormat

_BOM = b"\xef\xbb\xbf"
_WHITESPACE = b" \t\r\n"


def detect_format(data: bytes) -> DatasetFormat:
    """
    Classify an upload as COCO JSON or CSV.

    A payload is COCO when it decodes to a JSON object holding both an
    `images` and an `annotations` array. Anything else is treated as CSV and
    left for the CSV parser to reject. Never raises.
    """
    if not data:
        return DatasetFormat.UNRECOGNIZED
    try:
        decoded = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError):
        return DatasetFormat.CSV

    if (
        isinstance(decoded, dict)
        and isinstance(decoded.get("images"), list)
        and isinstance(decoded.get("annotations"), list)
    ):
        return DatasetFormat.COCO
    return DatasetFormat.CSV


class PrefixedStream(io.RawIOBase):
    """Binary stream that replays an already-read prefix before the rest of `stream`."""

    def __init__(self, prefix: bytes, stream: BinaryIO):
        self._prefix = prefix
        self._stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._prefix:
            n = min(len(buffer), len(self._prefix))
            buffer[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        chunk = self._stream.read(len(buffer))
        if not chunk:
            return 0
        buffer[:len(chunk)] = chunk
        return len(chunk)


def _first_significant_byte(prefix: bytes) -> Optional[int]:
    stripped = prefix[len(_BOM):] if prefix.startswith(_BOM) else prefix
    stripped = stripped.lstrip(_WHITESPACE)
    return stripped[0] if stripped else None


def sniff_stream(
    stream: BinaryIO, prefix_size: Optional[int] = None
) -> Tuple[DatasetFormat, Union[bytes, BinaryIO]]:
    """
    Classify a binary stream without giving up on streaming for CSV.

    Returns the detected format and the payload to hand to the parser: a
    stream replaying the whole upload for CSV, or the fully buffered bytes
    when the upload might be a JSON object.
    """
    prefix_size = prefix_size or settings.SNIFF_PREFIX_BYTES
    prefix = stream.read(prefix_size)
    # A prefix that is only whitespace says nothing yet; keep reading.
    while prefix and _first_significant_byte(prefix) is None:
        more = stream.read(prefix_size)
        if not more:
            break
        prefix += more

    if not prefix or _first_significant_byte(prefix) is None:
        return (DatasetFormat.UNRECOGNIZED if not prefix else DatasetFormat.CSV), prefix

    if _first_significant_byte(prefix) != ord("{"):
        return DatasetFormat.CSV, io.BufferedReader(PrefixedStream(prefix, stream))

    data = prefix + stream.read()
    return detect_format(data), data
