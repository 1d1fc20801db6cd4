"""
Large object streaming.

BLOB and CLOB values are not inlined into INSERT statements. They are copied
chunk by chunk into their own files while a CRC-32 of the written bytes is
computed on the fly, so memory use does not depend on the object size.
"""

import logging
import zlib
from collections.abc import Callable
from contextlib import AbstractContextManager, closing
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_BYTE_CHUNK_SIZE = 1 << 13
DEFAULT_CHAR_CHUNK_SIZE = 1 << 12


class LobKind(str, Enum):
    """Kind of an externalized large object."""

    BINARY = "binary"
    CHARACTER = "character"

    @property
    def extension(self) -> str:
        return "blob" if self is LobKind.BINARY else "clob"


class LobStream:
    """
    Readable large object handed over by the source.

    Wraps any object with ``read(size)`` (and optionally ``close()``); the
    subclasses fix the kind and how chunks become bytes.
    """

    kind: LobKind

    def __init__(self, raw: Any):
        self._raw = raw
        self._closed = False

    def read(self, size: int):
        return self._raw.read(size)

    def encode_chunk(self, chunk) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._raw, "close", None)
        if close is not None:
            close()

    @property
    def closed(self) -> bool:
        return self._closed


class BinaryLobStream(LobStream):
    """Binary large object; chunks are written unchanged."""

    kind = LobKind.BINARY

    def encode_chunk(self, chunk: bytes) -> bytes:
        return bytes(chunk)


class CharacterLobStream(LobStream):
    """Character large object; chunks are written as UTF-8."""

    kind = LobKind.CHARACTER

    def encode_chunk(self, chunk: str) -> bytes:
        return chunk.encode("utf-8")


@dataclass(frozen=True)
class LobTransfer:
    """Outcome of one externalized large object."""

    bytes_written: int
    crc32: int


class LargeObjectStreamer:
    """
    Copies large objects into sinks in fixed-size chunks.

    One instance belongs to one table export; instances are never shared
    between concurrently exported tables.
    """

    def __init__(
        self,
        byte_chunk_size: int = DEFAULT_BYTE_CHUNK_SIZE,
        char_chunk_size: int = DEFAULT_CHAR_CHUNK_SIZE,
    ):
        if byte_chunk_size <= 0 or char_chunk_size <= 0:
            raise ValueError("Chunk sizes must be positive")
        self.byte_chunk_size = byte_chunk_size
        self.char_chunk_size = char_chunk_size

    def chunk_size_for(self, kind: LobKind) -> int:
        return self.byte_chunk_size if kind is LobKind.BINARY else self.char_chunk_size

    def stream(
        self,
        source: LobStream,
        open_sink: Callable[[], AbstractContextManager[BinaryIO]],
    ) -> LobTransfer:
        """
        Copy ``source`` into a freshly opened sink

        The source is closed and the sink finalized on every exit path,
        including a failure while opening the sink.

        Args:
            source: Large object to copy
            open_sink: Opens the destination file or archive entry

        Returns:
            Number of bytes written and their CRC-32
        """
        chunk_size = self.chunk_size_for(source.kind)
        crc = 0
        written = 0
        chunks = 0

        with closing(source), open_sink() as sink:
            while True:
                chunk = source.read(chunk_size)
                if not chunk:
                    break
                data = source.encode_chunk(chunk)
                sink.write(data)
                crc = zlib.crc32(data, crc)
                written += len(data)
                chunks += 1

        logger.debug(f"Streamed {source.kind.value} object: {written} bytes in {chunks} chunks")
        return LobTransfer(bytes_written=written, crc32=crc)
