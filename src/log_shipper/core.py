# src/log_shipper/core.py

"""
Core payload-shaping pipeline for the CloudConnexa log shipper.

Objects arrive as gzip-compressed JSON Lines. This module turns an object's
byte stream into a sequence of log lines no larger than `MAX_SINGLE` bytes,
groups those lines into bundles bounded by `MAX_PAYLOAD` bytes, and finally
cuts each bundle into sub-bundles of at most `LOG_MAX_ENTRIES` entries; each
sub-bundle becomes exactly one HTTP request.

Everything is streamed line by line so an object is never held in memory as
a whole; only the lines already accepted into bundles are kept.
"""

import gzip
import io
import logging
import re
import zlib
from contextlib import closing
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator

from botocore.exceptions import BotoCoreError

from .exceptions import DecompressError, ObjectReadError, UnsupportedObjectKeyError

logger = logging.getLogger(__name__)

MAX_PAYLOAD = 5_000_000
MAX_SINGLE = 1_000_000
LOG_MAX_ENTRIES = 1000

OBJECT_KEY_PREFIX = "CloudConnexa"
OBJECT_TYPE_PATTERN = re.compile(r".*\.([^.]*)\.([^.]*)")
JSONL_TYPE = "jsonl"
GZ_TYPE = "gz"


@dataclass(frozen=True, slots=True)
class LogLine:
    """One entry-sized piece of a log line and its UTF-8 byte length."""

    message: str
    size: int

    @classmethod
    def from_text(cls, text: str) -> "LogLine":
        return cls(text, len(text.encode("utf-8")))


# --- Key admission ---
def infer_object_type(key: str) -> tuple[str, str]:
    """
    Applies the prefix filter and type inference to an object key.

    Returns the (kind, codec) suffix pair, which is always ("jsonl", "gz")
    for an accepted key; raises UnsupportedObjectKeyError otherwise.
    """
    if not key.startswith(OBJECT_KEY_PREFIX):
        raise UnsupportedObjectKeyError(key, "Unable to infer prefix")

    match = OBJECT_TYPE_PATTERN.fullmatch(key)
    if match is None:
        raise UnsupportedObjectKeyError(key, "Unable to infer type")

    kind, codec = match.group(1), match.group(2)
    if kind != JSONL_TYPE:
        raise UnsupportedObjectKeyError(key, "Skipping not jsonl type")
    if codec != GZ_TYPE:
        raise UnsupportedObjectKeyError(key, "Skipping not gz type")
    return kind, codec


# --- Gzip line stream ---
def split_line(text: str, limit: int = MAX_SINGLE) -> list[LogLine]:
    """
    Splits *text* into fragments of at most *limit* UTF-8 bytes.

    Fragments are cut at exactly *limit* bytes unless that would split a
    multi-byte character, in which case the cut moves back to the start of
    that character. Joining the fragments yields *text* again.
    """
    # A UTF-8 character takes up to 4 bytes; a smaller limit cannot always advance.
    if limit < 4:
        raise ValueError(f"limit must be at least 4 bytes, got {limit}")
    encoded = text.encode("utf-8")
    total = len(encoded)
    if total <= limit:
        return [LogLine(text, total)]

    fragments: list[LogLine] = []
    start = 0
    while start < total:
        end = min(start + limit, total)
        # 0b10xxxxxx marks a UTF-8 continuation byte.
        while end < total and (encoded[end] & 0xC0) == 0x80:
            end -= 1
        fragments.append(LogLine(encoded[start:end].decode("utf-8"), end - start))
        start = end
    return fragments


def iter_log_lines(
    stream: BinaryIO, bucket: str = "", key: str = ""
) -> Iterator[LogLine]:
    """
    Decompresses *stream* and yields its lines, fragmenting any line larger
    than MAX_SINGLE bytes. Line terminators ("\\n", "\\r\\n", "\\r") are
    stripped; empty lines are kept as empty entries.

    The stream and its gzip/text wrappers are closed when the generator is
    exhausted, closed early, or fails.
    """
    split_count = 0
    line_count = 0
    try:
        with closing(stream), gzip.GzipFile(fileobj=stream, mode="rb") as gz, io.TextIOWrapper(
            gz, encoding="utf-8", errors="replace", newline=None
        ) as text:
            for raw_line in text:
                line = raw_line[:-1] if raw_line.endswith("\n") else raw_line
                fragments = split_line(line)
                line_count += 1
                if len(fragments) > 1:
                    split_count += 1
                    logger.debug(
                        "Split oversize line into fragments.",
                        extra={"key": key, "fragments": len(fragments)},
                    )
                yield from fragments
    except BotoCoreError as e:
        raise ObjectReadError(bucket, key, str(e)) from e
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressError(bucket, key, str(e)) from e

    logger.debug(
        "Finished reading object.",
        extra={"key": key, "lines": line_count, "split_lines": split_count},
    )


# --- Batching ---
def partition_bundle(bundle: list[LogLine], size: int = LOG_MAX_ENTRIES) -> Iterator[list[LogLine]]:
    """Yields consecutive slices of *bundle* holding at most *size* entries."""
    for start in range(0, len(bundle), size):
        yield bundle[start : start + size]


class PayloadBatcher:
    """
    Groups log lines into bundles whose byte count stays under MAX_PAYLOAD.

    When a line would push the running count over the ceiling, a new bundle
    is opened and the count restarts at zero; the line that triggered the
    rollover goes into the new bundle without being counted. A bundle can
    therefore carry up to MAX_PAYLOAD + MAX_SINGLE bytes.
    """

    def __init__(self, max_payload: int = MAX_PAYLOAD, max_entries: int = LOG_MAX_ENTRIES):
        self._max_payload = max_payload
        self._max_entries = max_entries
        self._bundles: list[list[LogLine]] = [[]]
        self._size = 0
        self.line_count = 0

    def add(self, line: LogLine) -> None:
        self._size += line.size
        if self._size > self._max_payload:
            self._bundles.append([])
            self._size = 0
        self._bundles[-1].append(line)
        self.line_count += 1

    def extend(self, lines: Iterable[LogLine]) -> None:
        for line in lines:
            self.add(line)

    @property
    def bundles(self) -> list[list[LogLine]]:
        """The byte-bounded bundles collected so far, including empty ones."""
        return self._bundles

    def sub_bundles(self) -> Iterator[list[LogLine]]:
        """Yields every non-empty request-sized sub-bundle in emission order."""
        for bundle in self._bundles:
            yield from partition_bundle(bundle, self._max_entries)
