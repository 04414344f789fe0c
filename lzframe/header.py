"""LZ4 frame descriptor and block header encoding."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from .checksum import xxh32
from .errors import (
    HeaderChecksumError,
    InvalidBlockInfoError,
    ReservedBitsSetError,
    SkippableFrameError,
    UnsupportedBlocksizeError,
    UnsupportedVersionError,
    WrongMagicNumberError,
)

_FLG_RESERVED_MASK = 0b00000010
_FLG_VERSION_MASK = 0b11000000
_FLG_SUPPORTED_VERSION_BITS = 0b01000000

_FLG_INDEPENDENT_BLOCKS = 0b00100000
_FLG_BLOCK_CHECKSUMS = 0b00010000
_FLG_CONTENT_SIZE = 0b00001000
_FLG_CONTENT_CHECKSUM = 0b00000100
_FLG_DICTIONARY_ID = 0b00000001

_BD_BLOCK_SIZE_MASK = 0b01110000
_BD_RESERVED_MASK = ~_BD_BLOCK_SIZE_MASK & 0xFF
_BD_BLOCK_SIZE_SHIFT = 4

BLOCK_UNCOMPRESSED_SIZE_BIT = 0x80000000

LZ4F_MAGIC_NUMBER = 0x184D2204
LZ4F_LEGACY_MAGIC_NUMBER = 0x184C2102
LZ4F_SKIPPABLE_MAGIC_RANGE = range(0x184D2A50, 0x184D2A5F + 1)

MAGIC_NUMBER_SIZE = 4
MIN_FRAME_INFO_SIZE = 7
MAX_FRAME_INFO_SIZE = 19
BLOCK_INFO_SIZE = 4


class BlockSize(enum.IntEnum):
    """Maximum uncompressed size of each block in a frame."""

    AUTO = 0
    MAX_64KB = 4
    MAX_256KB = 5
    MAX_1MB = 6
    MAX_4MB = 7
    MAX_8MB = 8

    @classmethod
    def from_buf_length(cls, buf_len: int) -> "BlockSize":
        """Pick a block size suited to a first write of ``buf_len`` bytes."""
        blocksize = cls.MAX_4MB
        for candidate in (cls.MAX_256KB, cls.MAX_64KB):
            if buf_len > candidate.size():
                return blocksize
            blocksize = candidate
        return cls.MAX_64KB

    def size(self) -> int:
        """Return the block size in bytes."""
        if self is BlockSize.AUTO:
            raise ValueError("BlockSize.AUTO has no fixed size")
        return _BLOCK_BYTES[self]


_BLOCK_BYTES = {
    BlockSize.MAX_64KB: 64 * 1024,
    BlockSize.MAX_256KB: 256 * 1024,
    BlockSize.MAX_1MB: 1024 * 1024,
    BlockSize.MAX_4MB: 4 * 1024 * 1024,
    BlockSize.MAX_8MB: 8 * 1024 * 1024,
}

_BLOCK_SIZE_CODES = {
    4: BlockSize.MAX_64KB,
    5: BlockSize.MAX_256KB,
    6: BlockSize.MAX_1MB,
    7: BlockSize.MAX_4MB,
}


class BlockMode(enum.Enum):
    """Whether blocks may refer back to data from earlier blocks."""

    INDEPENDENT = "independent"
    LINKED = "linked"


def _take(data: bytes, offset: int, count: int) -> bytes:
    chunk = data[offset : offset + count]
    if len(chunk) < count:
        raise EOFError("unexpected end of frame header")
    return chunk


@dataclass
class FrameInfo:
    """Settings describing an LZ4 frame."""

    content_size: int | None = None
    dict_id: int | None = None
    block_size: BlockSize = BlockSize.AUTO
    block_mode: BlockMode = BlockMode.INDEPENDENT
    block_checksums: bool = False
    content_checksum: bool = False
    legacy_frame: bool = False

    def write_size(self) -> int:
        """Return the number of bytes :meth:`to_bytes` produces."""
        required = MIN_FRAME_INFO_SIZE
        if self.content_size is not None:
            required += 8
        if self.dict_id is not None:
            required += 4
        return required

    def to_bytes(self) -> bytes:
        """Encode the magic number and frame descriptor."""
        flg = _FLG_SUPPORTED_VERSION_BITS
        if self.block_checksums:
            flg |= _FLG_BLOCK_CHECKSUMS
        if self.content_checksum:
            flg |= _FLG_CONTENT_CHECKSUM
        if self.block_mode is BlockMode.INDEPENDENT:
            flg |= _FLG_INDEPENDENT_BLOCKS
        bd = (int(self.block_size) << _BD_BLOCK_SIZE_SHIFT) & 0xFF

        optional = b""
        if self.content_size is not None:
            flg |= _FLG_CONTENT_SIZE
            optional += struct.pack("<Q", self.content_size)
        if self.dict_id is not None:
            flg |= _FLG_DICTIONARY_ID
            optional += struct.pack("<I", self.dict_id)

        descriptor = bytes((flg, bd)) + optional
        checksum = (xxh32(descriptor, 0) >> 8) & 0xFF
        return struct.pack("<I", LZ4F_MAGIC_NUMBER) + descriptor + bytes((checksum,))

    @classmethod
    def from_bytes(cls, data) -> "FrameInfo":
        """Decode a frame descriptor, magic number included."""
        data = bytes(data)
        (magic,) = struct.unpack("<I", _take(data, 0, 4))
        if magic == LZ4F_LEGACY_MAGIC_NUMBER:
            return cls(block_size=BlockSize.MAX_8MB, legacy_frame=True)
        if magic in LZ4F_SKIPPABLE_MAGIC_RANGE:
            (user_data_len,) = struct.unpack("<I", _take(data, 4, 4))
            raise SkippableFrameError(user_data_len)
        if magic != LZ4F_MAGIC_NUMBER:
            raise WrongMagicNumberError()

        flg, bd = _take(data, 4, 2)
        if flg & _FLG_VERSION_MASK != _FLG_SUPPORTED_VERSION_BITS:
            raise UnsupportedVersionError(flg & _FLG_VERSION_MASK)
        if flg & _FLG_RESERVED_MASK or bd & _BD_RESERVED_MASK:
            raise ReservedBitsSetError()

        block_mode = (
            BlockMode.INDEPENDENT if flg & _FLG_INDEPENDENT_BLOCKS else BlockMode.LINKED
        )
        code = (bd & _BD_BLOCK_SIZE_MASK) >> _BD_BLOCK_SIZE_SHIFT
        if code not in _BLOCK_SIZE_CODES:
            raise UnsupportedBlocksizeError(code)
        block_size = _BLOCK_SIZE_CODES[code]

        offset = 6
        content_size = None
        if flg & _FLG_CONTENT_SIZE:
            (content_size,) = struct.unpack("<Q", _take(data, offset, 8))
            offset += 8
        dict_id = None
        if flg & _FLG_DICTIONARY_ID:
            (dict_id,) = struct.unpack("<I", _take(data, offset, 4))
            offset += 4

        (expected,) = _take(data, offset, 1)
        if (xxh32(data[4:offset], 0) >> 8) & 0xFF != expected:
            raise HeaderChecksumError()

        return cls(
            content_size=content_size,
            dict_id=dict_id,
            block_size=block_size,
            block_mode=block_mode,
            block_checksums=bool(flg & _FLG_BLOCK_CHECKSUMS),
            content_checksum=bool(flg & _FLG_CONTENT_CHECKSUM),
            legacy_frame=False,
        )


def read_frame_info_size(data) -> int:
    """Return how many header bytes are needed, given at least the first four."""
    data = bytes(data)
    (magic,) = struct.unpack("<I", _take(data, 0, 4))
    if magic == LZ4F_LEGACY_MAGIC_NUMBER:
        return MAGIC_NUMBER_SIZE
    required = MIN_FRAME_INFO_SIZE
    if len(data) < required:
        return required
    if magic in LZ4F_SKIPPABLE_MAGIC_RANGE:
        return 8
    if magic != LZ4F_MAGIC_NUMBER:
        raise WrongMagicNumberError()
    if data[4] & _FLG_CONTENT_SIZE:
        required += 8
    if data[4] & _FLG_DICTIONARY_ID:
        required += 4
    return required


class BlockKind(enum.Enum):
    """The three kinds of block header."""

    COMPRESSED = "compressed"
    UNCOMPRESSED = "uncompressed"
    END_MARK = "end_mark"


@dataclass(frozen=True)
class BlockInfo:
    """A data block header: its kind and payload length."""

    kind: BlockKind
    length: int = 0

    @classmethod
    def from_bytes(cls, data) -> "BlockInfo":
        """Decode a four-byte block header."""
        (size,) = struct.unpack("<I", _take(bytes(data), 0, BLOCK_INFO_SIZE))
        if size == 0:
            return cls(BlockKind.END_MARK)
        if size & BLOCK_UNCOMPRESSED_SIZE_BIT:
            return cls(BlockKind.UNCOMPRESSED, size & ~BLOCK_UNCOMPRESSED_SIZE_BIT)
        return cls(BlockKind.COMPRESSED, size)

    def to_bytes(self) -> bytes:
        """Encode the block header as four bytes."""
        if self.kind is BlockKind.END_MARK:
            value = 0
        else:
            if self.kind is BlockKind.COMPRESSED and self.length == 0:
                raise InvalidBlockInfoError()
            if self.length < 0 or self.length & ~0x7FFFFFFF:
                raise InvalidBlockInfoError()
            value = self.length
            if self.kind is BlockKind.UNCOMPRESSED:
                value |= BLOCK_UNCOMPRESSED_SIZE_BIT
        return struct.pack("<I", value)