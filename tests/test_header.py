import struct

import pytest

from lzframe.errors import (
    HeaderChecksumError,
    InvalidBlockInfoError,
    ReservedBitsSetError,
    SkippableFrameError,
    UnsupportedBlocksizeError,
    UnsupportedVersionError,
    WrongMagicNumberError,
)
from lzframe.header import (
    BLOCK_UNCOMPRESSED_SIZE_BIT,
    LZ4F_LEGACY_MAGIC_NUMBER,
    LZ4F_MAGIC_NUMBER,
    MAGIC_NUMBER_SIZE,
    MAX_FRAME_INFO_SIZE,
    MIN_FRAME_INFO_SIZE,
    BlockInfo,
    BlockKind,
    BlockMode,
    BlockSize,
    FrameInfo,
    read_frame_info_size,
)


def test_block_sizes():
    assert BlockSize.MAX_64KB.size() == 64 * 1024
    assert BlockSize.MAX_256KB.size() == 256 * 1024
    assert BlockSize.MAX_1MB.size() == 1024 * 1024
    assert BlockSize.MAX_4MB.size() == 4 * 1024 * 1024
    assert BlockSize.MAX_8MB.size() == 8 * 1024 * 1024


def test_auto_has_no_size():
    with pytest.raises(ValueError):
        BlockSize.AUTO.size()


@pytest.mark.parametrize(
    "length, expected",
    [
        (0, BlockSize.MAX_64KB),
        (64 * 1024, BlockSize.MAX_64KB),
        (64 * 1024 + 1, BlockSize.MAX_256KB),
        (256 * 1024, BlockSize.MAX_256KB),
        (256 * 1024 + 1, BlockSize.MAX_4MB),
        (100 * 1024 * 1024, BlockSize.MAX_4MB),
    ],
)
def test_from_buf_length(length, expected):
    assert BlockSize.from_buf_length(length) is expected


def test_default_header_layout():
    data = FrameInfo(block_size=BlockSize.MAX_64KB).to_bytes()
    assert len(data) == MIN_FRAME_INFO_SIZE
    assert struct.unpack("<I", data[:4])[0] == LZ4F_MAGIC_NUMBER
    assert data[4] == 0b01000000 | 0b00100000
    assert data[5] == 4 << 4


def test_write_size_matches_output():
    info = FrameInfo(block_size=BlockSize.MAX_1MB, content_size=10, dict_id=5)
    assert info.write_size() == MAX_FRAME_INFO_SIZE
    assert len(info.to_bytes()) == info.write_size()
    assert FrameInfo(content_size=1).write_size() == MIN_FRAME_INFO_SIZE + 8


@pytest.mark.parametrize(
    "info",
    [
        FrameInfo(block_size=BlockSize.MAX_64KB),
        FrameInfo(block_size=BlockSize.MAX_256KB, block_mode=BlockMode.LINKED),
        FrameInfo(block_size=BlockSize.MAX_1MB, block_checksums=True),
        FrameInfo(block_size=BlockSize.MAX_4MB, content_checksum=True),
        FrameInfo(block_size=BlockSize.MAX_64KB, content_size=725),
        FrameInfo(block_size=BlockSize.MAX_64KB, content_size=2**64 - 1, dict_id=99),
    ],
)
def test_frame_info_round_trip(info):
    data = info.to_bytes()
    assert read_frame_info_size(data) == len(data)
    assert FrameInfo.from_bytes(data) == info


def test_legacy_frame():
    data = struct.pack("<I", LZ4F_LEGACY_MAGIC_NUMBER)
    assert read_frame_info_size(data) == MAGIC_NUMBER_SIZE
    info = FrameInfo.from_bytes(data)
    assert info.legacy_frame is True
    assert info.block_size is BlockSize.MAX_8MB


def test_skippable_frame():
    data = struct.pack("<II", 0x184D2A53, 1234)
    with pytest.raises(SkippableFrameError) as err:
        FrameInfo.from_bytes(data)
    assert err.value.user_data_len == 1234
    assert read_frame_info_size(data + b"\0") == 8


def test_wrong_magic():
    data = b"\x00\x01\x02\x03\x60\x40\x00"
    with pytest.raises(WrongMagicNumberError):
        FrameInfo.from_bytes(data)
    with pytest.raises(WrongMagicNumberError):
        read_frame_info_size(data)


def test_header_checksum_mismatch():
    data = bytearray(FrameInfo(block_size=BlockSize.MAX_64KB).to_bytes())
    data[-1] ^= 0xFF
    with pytest.raises(HeaderChecksumError):
        FrameInfo.from_bytes(data)


def test_unsupported_version():
    data = bytearray(FrameInfo(block_size=BlockSize.MAX_64KB).to_bytes())
    data[4] = (data[4] & 0x3F) | 0x80
    with pytest.raises(UnsupportedVersionError) as err:
        FrameInfo.from_bytes(data)
    assert err.value.version == 0x80


def test_reserved_bits():
    data = bytearray(FrameInfo(block_size=BlockSize.MAX_64KB).to_bytes())
    data[4] |= 0b10
    with pytest.raises(ReservedBitsSetError):
        FrameInfo.from_bytes(data)


def test_eight_mb_block_size_sets_reserved_bit():
    data = FrameInfo(block_size=BlockSize.MAX_8MB).to_bytes()
    with pytest.raises(ReservedBitsSetError):
        FrameInfo.from_bytes(data)


def test_unsupported_block_size_code():
    data = bytearray(FrameInfo(block_size=BlockSize.MAX_64KB).to_bytes())
    data[5] = 3 << 4
    with pytest.raises(UnsupportedBlocksizeError) as err:
        FrameInfo.from_bytes(data)
    assert err.value.code == 3


def test_truncated_header():
    data = FrameInfo(block_size=BlockSize.MAX_64KB, content_size=5).to_bytes()
    with pytest.raises(EOFError):
        FrameInfo.from_bytes(data[:-3])


def test_read_size_with_short_input():
    data = FrameInfo(block_size=BlockSize.MAX_64KB, content_size=5).to_bytes()
    assert read_frame_info_size(data[:4]) == MIN_FRAME_INFO_SIZE
    assert read_frame_info_size(data[:MIN_FRAME_INFO_SIZE]) == MIN_FRAME_INFO_SIZE + 8


def test_end_mark():
    assert BlockInfo(BlockKind.END_MARK).to_bytes() == b"\0\0\0\0"
    assert BlockInfo.from_bytes(b"\0\0\0\0").kind is BlockKind.END_MARK


@pytest.mark.parametrize(
    "info",
    [
        BlockInfo(BlockKind.COMPRESSED, 1),
        BlockInfo(BlockKind.COMPRESSED, 65536),
        BlockInfo(BlockKind.UNCOMPRESSED, 0),
        BlockInfo(BlockKind.UNCOMPRESSED, 0x7FFFFFFF),
    ],
)
def test_block_info_round_trip(info):
    assert BlockInfo.from_bytes(info.to_bytes()) == info


def test_uncompressed_sets_high_bit():
    raw = struct.unpack("<I", BlockInfo(BlockKind.UNCOMPRESSED, 10).to_bytes())[0]
    assert raw == 10 | BLOCK_UNCOMPRESSED_SIZE_BIT


@pytest.mark.parametrize(
    "info",
    [
        BlockInfo(BlockKind.COMPRESSED, 0),
        BlockInfo(BlockKind.COMPRESSED, BLOCK_UNCOMPRESSED_SIZE_BIT),
        BlockInfo(BlockKind.UNCOMPRESSED, BLOCK_UNCOMPRESSED_SIZE_BIT | 1),
    ],
)
def test_invalid_block_info(info):
    with pytest.raises(InvalidBlockInfoError):
        info.to_bytes()


def test_block_info_truncated():
    with pytest.raises(EOFError):
        BlockInfo.from_bytes(b"\x01\x00")