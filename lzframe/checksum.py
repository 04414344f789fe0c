"""The 32-bit xxHash checksum used by the LZ4 frame format."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF
_P1 = 2654435761
_P2 = 2246822519
_P3 = 3266489917
_P4 = 668265263
_P5 = 374761393
_STRIPE = 16


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & _MASK


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK
    return (_rotl(acc, 13) * _P1) & _MASK


class XxHash32:
    """Streaming xxHash32 hasher."""

    def __init__(self, seed: int = 0) -> None:
        self._seed = seed & _MASK
        self._acc = [
            (self._seed + _P1 + _P2) & _MASK,
            (self._seed + _P2) & _MASK,
            self._seed,
            (self._seed - _P1) & _MASK,
        ]
        self._pending = b""
        self._total_len = 0

    def update(self, data) -> None:
        """Feed more bytes into the hash."""
        data = bytes(data)
        self._total_len += len(data)
        buffer = self._pending + data
        full = len(buffer) - len(buffer) % _STRIPE
        if full:
            v1, v2, v3, v4 = self._acc
            for l1, l2, l3, l4 in struct.iter_unpack("<4I", memoryview(buffer)[:full]):
                v1 = _round(v1, l1)
                v2 = _round(v2, l2)
                v3 = _round(v3, l3)
                v4 = _round(v4, l4)
            self._acc = [v1, v2, v3, v4]
        self._pending = buffer[full:]

    def intdigest(self) -> int:
        """Return the hash of everything fed so far as an integer."""
        if self._total_len >= _STRIPE:
            v1, v2, v3, v4 = self._acc
            h = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _MASK
        else:
            h = (self._seed + _P5) & _MASK
        h = (h + self._total_len) & _MASK

        tail = self._pending
        words = len(tail) - len(tail) % 4
        for (word,) in struct.iter_unpack("<I", tail[:words]):
            h = (h + word * _P3) & _MASK
            h = (_rotl(h, 17) * _P4) & _MASK
        for byte in tail[words:]:
            h = (h + byte * _P5) & _MASK
            h = (_rotl(h, 11) * _P1) & _MASK

        h ^= h >> 15
        h = (h * _P2) & _MASK
        h ^= h >> 13
        h = (h * _P3) & _MASK
        h ^= h >> 16
        return h


def xxh32(data, seed: int = 0) -> int:
    """Return the xxHash32 of ``data`` in one call."""
    hasher = XxHash32(seed)
    hasher.update(data)
    return hasher.intdigest()