"""A bounded output cursor over a preallocated byte buffer."""

from __future__ import annotations

from .fastcpy import slice_copy


class SliceSink:
    """Writes bytes into a fixed-size region of a ``bytearray``.

    Bytes before :meth:`pos` count as written. Writing past the end of the
    region raises ``IndexError``; the buffer never grows.
    """

    def __init__(self, output: bytearray, pos: int) -> None:
        self._output = output
        self._offset = 0
        self._check_pos(pos)
        self._pos = pos

    @classmethod
    def _over(cls, buffer: bytearray, offset: int, pos: int) -> "SliceSink":
        """Create a sink over ``buffer[offset:]`` without copying it."""
        if offset < 0 or offset > len(buffer):
            raise IndexError(f"offset {offset} out of range for buffer of {len(buffer)}")
        sink = cls.__new__(cls)
        sink._output = buffer
        sink._offset = offset
        sink._check_pos(pos)
        sink._pos = pos
        return sink

    def _check_pos(self, pos: int) -> None:
        if pos < 0 or pos > self.capacity():
            raise IndexError(f"position {pos} out of range for capacity {self.capacity()}")

    def _require(self, start: int, count: int) -> None:
        if start < 0 or count < 0 or start + count > self.capacity():
            raise IndexError(
                f"range {start}..{start + count} exceeds sink capacity {self.capacity()}"
            )

    def pos(self) -> int:
        """Return the number of bytes written so far."""
        return self._pos

    def capacity(self) -> int:
        """Return the total size of the region the sink writes into."""
        return len(self._output) - self._offset

    def byte_at(self, pos: int) -> int:
        """Return the byte stored at ``pos`` within the region."""
        self._require(pos, 1)
        return self._output[self._offset + pos]

    def push(self, byte: int) -> None:
        """Append a single byte."""
        self._require(self._pos, 1)
        self._output[self._offset + self._pos] = byte
        self._pos += 1

    def extend_with_fill(self, byte: int, length: int) -> None:
        """Append ``length`` copies of ``byte``."""
        self._require(self._pos, length)
        start = self._offset + self._pos
        self._output[start : start + length] = bytes((byte,)) * length
        self._pos += length

    def extend_from_slice(self, data) -> None:
        """Append all of ``data``."""
        self.extend_from_slice_wild(data, len(data))

    def extend_from_slice_wild(self, data, copy_len: int) -> None:
        """Copy all of ``data`` but advance the position by ``copy_len`` only."""
        if copy_len < 0 or copy_len > len(data):
            raise ValueError(f"copy_len {copy_len} exceeds data length {len(data)}")
        self._require(self._pos, len(data))
        start = self._offset + self._pos
        with memoryview(self._output) as view, view[start : start + len(data)] as region:
            slice_copy(data, region)
        self._pos += copy_len

    def extend_from_within(self, start: int, wild_len: int, copy_len: int) -> None:
        """Copy ``wild_len`` bytes from ``start`` to the end; advance by ``copy_len``."""
        self._require(start, wild_len)
        self._require(self._pos, wild_len)
        src = self._offset + start
        dst = self._offset + self._pos
        self._output[dst : dst + wild_len] = self._output[src : src + wild_len]
        self._pos += copy_len

    def extend_from_within_overlapping(self, start: int, num_bytes: int) -> None:
        """Append ``num_bytes`` copied forward from ``start``, repeating as needed.

        The copy behaves as if done one byte at a time, so a source range that
        runs into the bytes being written repeats the pattern before ``pos``.
        """
        distance = self._pos - start
        if start < 0 or distance < 0:
            raise IndexError(f"start {start} lies beyond position {self._pos}")
        self._require(self._pos, num_bytes)
        if distance and num_bytes:
            base = self._offset
            pattern = bytes(self._output[base + start : base + self._pos])
            repeats = num_bytes // distance + 1
            dst = base + self._pos
            self._output[dst : dst + num_bytes] = (pattern * repeats)[:num_bytes]
        self._pos += num_bytes


def _resize(buffer: bytearray, size: int) -> None:
    if len(buffer) > size:
        del buffer[size:]
    else:
        buffer.extend(bytes(size - len(buffer)))


def vec_sink_for_compression(
    buffer: bytearray, offset: int, pos: int, required_capacity: int
) -> SliceSink:
    """Resize ``buffer`` to ``offset + required_capacity`` and return a sink over ``buffer[offset:]``."""
    _resize(buffer, offset + required_capacity)
    return SliceSink._over(buffer, offset, pos)


def vec_sink_for_decompression(
    buffer: bytearray, offset: int, pos: int, required_capacity: int
) -> SliceSink:
    """Resize ``buffer`` to ``offset + required_capacity`` and return a sink over ``buffer[offset:]``."""
    _resize(buffer, offset + required_capacity)
    return SliceSink._over(buffer, offset, pos)