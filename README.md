# lzframe

Streaming compression and decompression in the LZ4 frame format.

`lzframe` wraps any binary writer or reader. Data written to a
`FrameEncoder` comes out as LZ4 frames on the wrapped writer. Reading from a
`FrameDecoder` gives back the original bytes. Frames can use independent or
linked blocks, and can carry block checksums, a content checksum and the
content size. Legacy frames can be read as well.

The frame format, headers and xxHash32 checksums are handled by this package
itself. Each block's LZ4 payload is compressed and decompressed with the `lz4`
library's `lz4.block` module.

## Installation

```
pip install lzframe
```

## Compressing

```python
import io

from lzframe.encoder import FrameEncoder
from lzframe.header import BlockMode, FrameInfo

info = FrameInfo(block_mode=BlockMode.LINKED, content_checksum=True)
encoder = FrameEncoder(io.BytesIO(), info)
encoder.write(b"Hello people, what's up?" * 100)
compressed = encoder.finish().getvalue()
```

`FrameInfo` holds the frame settings:

- `block_size`: a `BlockSize` member (`MAX_64KB`, `MAX_256KB`, `MAX_1MB`,
  `MAX_4MB`). The default, `BlockSize.AUTO`, picks a size from the length of
  the first write.
- `block_mode`: `BlockMode.INDEPENDENT` (the default) or `BlockMode.LINKED`.
- `block_checksums` and `content_checksum`: add xxHash32 checksums.
- `content_size`: the total length of the content. If the amount of data
  written differs, finishing raises `ContentLengthError`.

The encoder keeps its own copy of the `FrameInfo` it is given. That copy is
returned by `frame_info()`. The wrapped writer is returned by `writer()`.

Input is buffered up to the block size. `flush()` writes out the buffered
input as a block. Every stream has to be finished with `finish()` or
`try_finish()`. These write the end mark and any content checksum. If nothing
was written, an empty frame is produced. If more data is written after
`try_finish()`, a second frame starts in the same output.

`auto_finish()` returns an `AutoFinishEncoder`. It works as a context manager
and finishes the frame when it is closed. Errors raised while finishing this
way are ignored.

```python
with FrameEncoder(io.BytesIO(), FrameInfo()).auto_finish() as out:
    out.write(b"some data")
```

## Decompressing

```python
from lzframe.decoder import FrameDecoder

decoder = FrameDecoder(io.BytesIO(compressed))
data = decoder.read_to_end()
```

Other ways to read are `read(size)`, `readinto(buffer)`, `fill_buf()` together
with `consume(amount)`, and `read_to_string()`, which decodes UTF-8. Reading
stops at the end mark of each frame. A later call continues with the next
concatenated frame. The wrapped reader is returned by `reader()`.

## Lower-level pieces

- `lzframe.header`: `FrameInfo.to_bytes()` and `FrameInfo.from_bytes()`
  encode and decode frame descriptors. `read_frame_info_size()` tells how many
  header bytes a descriptor needs. `BlockInfo` encodes and decodes the
  four-byte block headers.
- `lzframe.checksum`: `XxHash32` is a streaming hasher and `xxh32(data, seed)`
  hashes data in one call.
- `lzframe.sink`: `SliceSink` is a bounded write cursor over a `bytearray`.
- `lzframe.fastcpy`: `slice_copy(src, dst)` copies between buffers of equal
  length.

## Errors

Malformed or corrupted input raises a subclass of
`lzframe.errors.Lz4FrameError`. Examples are `WrongMagicNumberError`,
`HeaderChecksumError`, `BlockChecksumError`, `ContentChecksumError`,
`BlockTooBigError` and `ContentLengthError`. `ContentLengthError` carries
`expected` and `actual`. Failures inside block compression or decompression
raise `CompressionError` or `DecompressionError`. A stream that ends partway
through a block raises `EOFError`.

## What it does not do

- Frames that need an external dictionary are rejected with
  `DictionaryNotSupportedError`.
- Skippable frames are not skipped automatically. Reading one raises
  `SkippableFrameError`, which carries `user_data_len`.
- The encoder writes only the current frame format, never legacy frames.
- There is no command-line tool. The package is a library.

## Running the tests

```
pip install -e ".[test]"
pytest
```