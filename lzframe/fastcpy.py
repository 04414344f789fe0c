"""Copying a byte sequence into an equally long writable buffer."""

from __future__ import annotations


def slice_copy(src, dst) -> None:
    """Copy every byte of ``src`` into ``dst``, which must have the same length.

    ``dst`` may be a ``bytearray`` or a writable ``memoryview`` of bytes.
    Raises ``ValueError`` when the lengths differ.
    """
    src_len = len(src)
    dst_len = len(dst)
    if src_len != dst_len:
        raise ValueError(
            f"source slice length ({src_len}) does not match "
            f"destination slice length ({dst_len})"
        )
    if src_len:
        dst[:] = src