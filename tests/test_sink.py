import pytest

from lzframe.sink import SliceSink, vec_sink_for_compression, vec_sink_for_decompression


def test_sink_slice():
    data = bytearray(5)
    sink = SliceSink(data, 1)
    assert sink.pos() == 1
    assert sink.capacity() == 5


def test_initial_position_out_of_bounds():
    with pytest.raises(IndexError):
        SliceSink(bytearray(3), 4)


def test_push_and_byte_at():
    data = bytearray(3)
    sink = SliceSink(data, 0)
    sink.push(7)
    sink.push(9)
    assert sink.pos() == 2
    assert sink.byte_at(1) == 9
    assert data == bytearray([7, 9, 0])


def test_push_past_capacity_raises():
    sink = SliceSink(bytearray(1), 1)
    with pytest.raises(IndexError):
        sink.push(1)


def test_extend_with_fill():
    data = bytearray(6)
    sink = SliceSink(data, 1)
    sink.extend_with_fill(0xAA, 4)
    assert sink.pos() == 5
    assert data == bytearray([0, 0xAA, 0xAA, 0xAA, 0xAA, 0])


def test_extend_from_slice():
    data = bytearray(8)
    sink = SliceSink(data, 2)
    sink.extend_from_slice(b"hello")
    assert sink.pos() == 7
    assert bytes(data[2:7]) == b"hello"


def test_extend_from_slice_wild_advances_by_copy_len():
    data = bytearray(8)
    sink = SliceSink(data, 0)
    sink.extend_from_slice_wild(b"abcdef", 3)
    assert sink.pos() == 3
    assert bytes(data[:6]) == b"abcdef"


def test_extend_from_slice_wild_rejects_long_copy_len():
    sink = SliceSink(bytearray(8), 0)
    with pytest.raises(ValueError):
        sink.extend_from_slice_wild(b"ab", 3)


def test_extend_from_slice_overflow_raises():
    sink = SliceSink(bytearray(4), 2)
    with pytest.raises(IndexError):
        sink.extend_from_slice(b"abc")


def test_extend_from_within():
    data = bytearray(b"abcd" + bytes(6))
    sink = SliceSink(data, 4)
    sink.extend_from_within(1, 3, 2)
    assert sink.pos() == 6
    assert bytes(data[4:7]) == b"bcd"


def test_extend_from_within_overlapping_repeats_pattern():
    data = bytearray(b"ab" + bytes(8))
    sink = SliceSink(data, 2)
    sink.extend_from_within_overlapping(0, 7)
    assert sink.pos() == 9
    assert bytes(data[:9]) == b"ababababa"


def test_extend_from_within_overlapping_single_byte_run():
    data = bytearray(b"xz" + bytes(5))
    sink = SliceSink(data, 2)
    sink.extend_from_within_overlapping(1, 5)
    assert bytes(data) == b"xzzzzzz"


def test_extend_from_within_overlapping_start_after_pos():
    sink = SliceSink(bytearray(8), 2)
    with pytest.raises(IndexError):
        sink.extend_from_within_overlapping(3, 1)


@pytest.mark.parametrize("factory", [vec_sink_for_compression, vec_sink_for_decompression])
def test_vec_sink_grows_buffer(factory):
    buffer = bytearray(b"head")
    sink = factory(buffer, 2, 1, 5)
    assert len(buffer) == 7
    assert sink.capacity() == 5
    assert sink.pos() == 1
    assert sink.byte_at(0) == ord("a")
    sink.extend_from_slice(b"XYZ")
    assert bytes(buffer) == b"heaXYZ\x00"


@pytest.mark.parametrize("factory", [vec_sink_for_compression, vec_sink_for_decompression])
def test_vec_sink_shrinks_buffer(factory):
    buffer = bytearray(b"0123456789")
    sink = factory(buffer, 0, 0, 4)
    assert bytes(buffer) == b"0123"
    assert sink.capacity() == 4


def test_vec_sink_buffer_can_be_resized_afterwards():
    buffer = bytearray()
    sink = vec_sink_for_compression(buffer, 0, 0, 4)
    sink.extend_from_slice(b"abcd")
    buffer.extend(b"ef")
    assert bytes(buffer) == b"abcdef"