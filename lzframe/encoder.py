"""Streaming writer for the LZ4 frame format."""

from __future__ import annotations

import dataclasses

import lz4.block

from .checksum import XxHash32, xxh32
from .errors import CompressionError, ContentLengthError, Lz4FrameError
from .header import BlockInfo, BlockKind, BlockMode, BlockSize, FrameInfo

WINDOW_SIZE = 64 * 1024

_END_MARK = BlockInfo(BlockKind.END_MARK)


class FrameEncoder:
    """Compresses bytes written to it into LZ4 frames on an underlying writer.

    Input is buffered up to the frame's block size before a block is written.
    The stream must be completed with :meth:`finish` or :meth:`try_finish`,
    or by using :meth:`auto_finish`.
    """

    def __init__(self, writer, frame_info: FrameInfo | None = None) -> None:
        self._writer = writer
        self._frame_info = (
            dataclasses.replace(frame_info) if frame_info is not None else FrameInfo()
        )
        self._src = bytearray()
        self._history = b""
        self._content_hasher = XxHash32(0)
        self._content_len = 0
        self._is_frame_open = False
        self._data_to_frame_written = False

    def frame_info(self) -> FrameInfo:
        """Return the frame settings this encoder uses."""
        return self._frame_info

    def writer(self):
        """Return the underlying writer."""
        return self._writer

    def write(self, data) -> int:
        """Buffer and compress ``data``; return the number of bytes accepted."""
        view = memoryview(data)
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        total = len(view)
        if not self._is_frame_open and total:
            self._begin_frame(total)
        while view:
            max_fill = self._frame_info.block_size.size() - len(self._src)
            if max_fill == 0:
                self._write_block()
                continue
            self._src += view[:max_fill]
            view = view[max_fill:]
        return total

    def flush(self) -> None:
        """Compress and write any buffered input as a block."""
        if self._src:
            self._write_block()

    def try_finish(self) -> None:
        """Flush buffered input and close the current frame.

        If nothing was ever written, an empty frame is emitted. Calling it
        again without writing more data does nothing.
        """
        self.flush()
        if not self._is_frame_open:
            if self._data_to_frame_written:
                return
            self._begin_frame(0)
        self._end_frame()
        self._data_to_frame_written = True

    def finish(self):
        """Finish the stream and return the underlying writer."""
        self.try_finish()
        return self._writer

    def auto_finish(self) -> "AutoFinishEncoder":
        """Return a wrapper that finishes the stream when closed."""
        return AutoFinishEncoder(self)

    def _write_all(self, data) -> None:
        view = memoryview(data)
        while view:
            written = self._writer.write(view)
            if written is None:
                return
            if written <= 0:
                raise OSError("failed to write whole buffer")
            view = view[written:]

    def _begin_frame(self, buf_len: int) -> None:
        self._is_frame_open = True
        if self._frame_info.block_size is BlockSize.AUTO:
            self._frame_info.block_size = BlockSize.from_buf_length(buf_len)
        self._write_all(self._frame_info.to_bytes())
        self._content_len = 0
        self._src.clear()
        self._history = b""
        self._content_hasher = XxHash32(0)

    def _end_frame(self) -> None:
        self._is_frame_open = False
        expected = self._frame_info.content_size
        if expected is not None and expected != self._content_len:
            raise ContentLengthError(expected, self._content_len)
        self._write_all(_END_MARK.to_bytes())
        if self._frame_info.content_checksum:
            self._write_all(self._content_hasher.intdigest().to_bytes(4, "little"))

    def _write_block(self) -> None:
        src = bytes(self._src)
        self._src.clear()
        linked = self._frame_info.block_mode is BlockMode.LINKED
        try:
            if linked and self._history:
                compressed = lz4.block.compress(
                    src, store_size=False, dict=self._history
                )
            else:
                compressed = lz4.block.compress(src, store_size=False)
        except lz4.block.LZ4BlockError as exc:
            raise CompressionError(str(exc)) from exc

        if len(compressed) < len(src):
            info = BlockInfo(BlockKind.COMPRESSED, len(compressed))
            payload = compressed
        else:
            info = BlockInfo(BlockKind.UNCOMPRESSED, len(src))
            payload = src

        self._write_all(info.to_bytes())
        self._write_all(payload)
        if self._frame_info.block_checksums:
            self._write_all(xxh32(payload, 0).to_bytes(4, "little"))
        if self._frame_info.content_checksum:
            self._content_hasher.update(src)

        self._content_len += len(src)
        if linked:
            self._history = (self._history + src)[-WINDOW_SIZE:]

    def __repr__(self) -> str:
        return (
            f"FrameEncoder(writer={self._writer!r}, frame_info={self._frame_info!r}, "
            f"is_frame_open={self._is_frame_open}, content_len={self._content_len}, "
            f"buffered={len(self._src)})"
        )


class AutoFinishEncoder:
    """Wraps a :class:`FrameEncoder` and finishes the stream on close.

    Errors raised while finishing on close are ignored; call
    :meth:`FrameEncoder.finish` directly to see them.
    """

    def __init__(self, encoder: FrameEncoder) -> None:
        self._encoder: FrameEncoder | None = encoder

    def _active(self) -> FrameEncoder:
        if self._encoder is None:
            raise ValueError("write to a closed encoder")
        return self._encoder

    def write(self, data) -> int:
        """Write ``data`` through the wrapped encoder."""
        return self._active().write(data)

    def flush(self) -> None:
        """Flush the wrapped encoder."""
        self._active().flush()

    def close(self) -> None:
        """Finish the stream, ignoring any error."""
        encoder, self._encoder = self._encoder, None
        if encoder is not None:
            try:
                encoder.try_finish()
            except (Lz4FrameError, OSError):
                pass

    def __enter__(self) -> "AutoFinishEncoder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_encoder", None) is not None:
            self.close()