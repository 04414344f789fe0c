"""Errors raised while reading or writing LZ4 frames."""

from __future__ import annotations


class Lz4FrameError(Exception):
    """Base class for every LZ4 frame error."""


class _InvalidDataError(Lz4FrameError, ValueError):
    """An error caused by malformed or corrupted frame data."""


class CompressionError(Lz4FrameError):
    """Compressing a block failed."""


class DecompressionError(Lz4FrameError):
    """Decompressing a block failed."""


class UnsupportedBlocksizeError(_InvalidDataError):
    """The frame descriptor names a block size this format does not allow."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"UnsupportedBlocksize({code})")


class UnsupportedVersionError(_InvalidDataError):
    """The frame descriptor carries an unsupported version."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"UnsupportedVersion({version})")


class WrongMagicNumberError(_InvalidDataError):
    """The data does not start with an LZ4 frame magic number."""

    def __init__(self) -> None:
        super().__init__("WrongMagicNumber")


class ReservedBitsSetError(_InvalidDataError):
    """Reserved bits of the frame descriptor are set."""

    def __init__(self) -> None:
        super().__init__("ReservedBitsSet")


class InvalidBlockInfoError(_InvalidDataError):
    """A block header is malformed."""

    def __init__(self) -> None:
        super().__init__("InvalidBlockInfo")


class BlockTooBigError(_InvalidDataError):
    """A block is larger than the frame's maximum block size."""

    def __init__(self) -> None:
        super().__init__("BlockTooBig")


class HeaderChecksumError(_InvalidDataError):
    """The frame descriptor checksum does not match."""

    def __init__(self) -> None:
        super().__init__("HeaderChecksumError")


class BlockChecksumError(_InvalidDataError):
    """A block checksum does not match."""

    def __init__(self) -> None:
        super().__init__("BlockChecksumError")


class ContentChecksumError(_InvalidDataError):
    """The content checksum does not match."""

    def __init__(self) -> None:
        super().__init__("ContentChecksumError")


class SkippableFrameError(Lz4FrameError):
    """A skippable frame was found; its user data may be read and skipped."""

    def __init__(self, user_data_len: int) -> None:
        self.user_data_len = user_data_len
        super().__init__(f"SkippableFrame({user_data_len})")


class DictionaryNotSupportedError(Lz4FrameError):
    """The frame needs an external dictionary, which is not supported."""

    def __init__(self) -> None:
        super().__init__("DictionaryNotSupported")


class ContentLengthError(_InvalidDataError):
    """The amount of content differs from the size declared in the frame."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"ContentLengthError {{ expected: {expected}, actual: {actual} }}"
        )