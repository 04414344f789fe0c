"""Streaming reader for the LZ4 frame format."""

from __future__ import annotations

import struct

import lz4.block

from .checksum import XxHash32, xxh32
from .errors import (
    BlockTooBigError,
    ContentChecksumError,
    ContentLengthError,
    DecompressionError,
    DictionaryNotSupportedError,
    BlockChecksumError,
)
from .header import (
    BLOCK_INFO_SIZE,
    LZ4F_LEGACY_MAGIC_NUMBER,
    MAGIC_NUMBER_SIZE,
    MIN_FRAME_INFO_SIZE,
    BlockInfo,
    BlockKind,
    BlockMode,
    FrameInfo,
    read_frame_info_size,
)

WINDOW_SIZE = 64 * 1024
_CHECKSUM_SIZE = 4


class FrameDecoder:
    """Decompresses LZ4 frames read from an underlying binary reader.

    A read that reaches the end mark of a frame reports end of data; reading
    again continues with the next concatenated frame, if any.
    """

    def __init__(self, reader) -> None:
        self._reader = reader
        self._frame_info: FrameInfo | None = None
        self._content_hasher = XxHash32(0)
        self._content_len = 0
        self._history = b""
        self._dst = b""
        self._dst_start = 0

    def reader(self):
        """Return the underlying reader."""
        return self._reader

    # -- low level input -------------------------------------------------

    def _read_some(self, count: int) -> bytes:
        chunk = self._reader.read(count)
        return bytes(chunk) if chunk else b""

    def _read_exact(self, count: int) -> bytes:
        parts = []
        remaining = count
        while remaining:
            chunk = self._read_some(remaining)
            if not chunk:
                raise EOFError("failed to fill whole buffer")
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def _read_checksum(self) -> int:
        (value,) = struct.unpack("<I", self._read_exact(_CHECKSUM_SIZE))
        return value

    # -- frame handling --------------------------------------------------

    def _read_frame_info(self) -> bool:
        buffer = self._read_some(MAGIC_NUMBER_SIZE)
        if not buffer:
            return False
        if len(buffer) < MAGIC_NUMBER_SIZE:
            buffer += self._read_exact(MAGIC_NUMBER_SIZE - len(buffer))

        (magic,) = struct.unpack("<I", buffer)
        if magic != LZ4F_LEGACY_MAGIC_NUMBER:
            wanted = MIN_FRAME_INFO_SIZE - MAGIC_NUMBER_SIZE
            rest = self._read_some(wanted)
            if not rest:
                return False
            if len(rest) < wanted:
                rest += self._read_exact(wanted - len(rest))
            buffer += rest

        required = read_frame_info_size(buffer)
        if required not in (MIN_FRAME_INFO_SIZE, MAGIC_NUMBER_SIZE):
            buffer += self._read_exact(required - MIN_FRAME_INFO_SIZE)

        frame_info = FrameInfo.from_bytes(buffer[:required])
        if frame_info.dict_id is not None:
            raise DictionaryNotSupportedError()

        self._frame_info = frame_info
        self._content_hasher = XxHash32(0)
        self._content_len = 0
        self._history = b""
        self._dst = b""
        self._dst_start = 0
        return True

    def _check_block_checksum(self, data: bytes) -> None:
        expected = self._read_checksum()
        if xxh32(data, 0) != expected:
            raise BlockChecksumError()

    def _decompress(self, payload: bytes, max_block_size: int, linked: bool) -> bytes:
        try:
            if linked and self._history:
                return lz4.block.decompress(
                    payload, uncompressed_size=max_block_size, dict=self._history
                )
            return lz4.block.decompress(payload, uncompressed_size=max_block_size)
        except lz4.block.LZ4BlockError as exc:
            raise DecompressionError(str(exc)) from exc

    def _read_block(self) -> int:
        frame_info = self._frame_info
        max_block_size = frame_info.block_size.size()
        linked = frame_info.block_mode is BlockMode.LINKED

        header = self._read_some(BLOCK_INFO_SIZE)
        if len(header) < BLOCK_INFO_SIZE:
            if header:
                try:
                    header += self._read_exact(BLOCK_INFO_SIZE - len(header))
                except EOFError:
                    return 0
            else:
                return 0
        block_info = BlockInfo.from_bytes(header)

        if block_info.kind is BlockKind.END_MARK:
            expected = frame_info.content_size
            if expected is not None and self._content_len != expected:
                raise ContentLengthError(expected, self._content_len)
            if frame_info.content_checksum:
                expected_checksum = self._read_checksum()
                if self._content_hasher.intdigest() != expected_checksum:
                    raise ContentChecksumError()
            self._frame_info = None
            return 0

        if block_info.length > max_block_size:
            raise BlockTooBigError()
        payload = self._read_exact(block_info.length)
        if frame_info.block_checksums:
            self._check_block_checksum(payload)

        if block_info.kind is BlockKind.UNCOMPRESSED:
            output = payload
        else:
            output = self._decompress(payload, max_block_size, linked)

        self._content_len += len(output)
        if frame_info.content_checksum:
            self._content_hasher.update(output)
        if linked:
            self._history = (self._history + output)[-WINDOW_SIZE:]

        self._dst = output
        self._dst_start = 0
        return len(output)

    def _read_more(self) -> int:
        if self._frame_info is None and not self._read_frame_info():
            return 0
        return self._read_block()

    def _pending(self) -> int:
        return len(self._dst) - self._dst_start

    # -- public reading interface ----------------------------------------

    def fill_buf(self) -> bytes:
        """Return the decompressed bytes not yet consumed, fetching a block if none."""
        if not self._pending():
            self._read_more()
        return self._dst[self._dst_start :]

    def consume(self, amount: int) -> None:
        """Mark ``amount`` bytes returned by :meth:`fill_buf` as consumed."""
        if amount < 0 or amount > self._pending():
            raise ValueError(
                f"cannot consume {amount} bytes, only {self._pending()} available"
            )
        self._dst_start += amount

    def readinto(self, buffer) -> int:
        """Fill ``buffer`` with up to its length of decompressed bytes."""
        view = memoryview(buffer)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        with view:
            while True:
                pending = self._pending()
                if pending:
                    count = min(pending, len(view))
                    start = self._dst_start
                    view[:count] = self._dst[start : start + count]
                    self._dst_start += count
                    return count
                if not self._read_more():
                    return 0

    def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` decompressed bytes; all until end of frame if negative."""
        if size is None or size < 0:
            return self.read_to_end()
        while True:
            pending = self._pending()
            if pending:
                count = min(pending, size)
                start = self._dst_start
                self._dst_start += count
                return bytes(self._dst[start : start + count])
            if not self._read_more():
                return b""

    def read_to_end(self) -> bytes:
        """Return all decompressed bytes up to the end of the current frame."""
        parts = []
        while True:
            chunk = self.fill_buf()
            if not chunk:
                return b"".join(parts)
            parts.append(bytes(chunk))
            self.consume(len(chunk))

    def read_to_string(self) -> str:
        """Return the rest of the current frame decoded as UTF-8."""
        data = self.read_to_end()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("stream did not contain valid UTF-8") from exc

    def __repr__(self) -> str:
        return (
            f"FrameDecoder(reader={self._reader!r}, "
            f"current_frame_info={self._frame_info!r}, "
            f"content_len={self._content_len}, pending={self._pending()})"
        )