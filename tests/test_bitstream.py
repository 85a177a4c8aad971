import pytest

from bitstream import EncodedStream, pack_bits, unpack_bits


def test_pack_bits_msb_first_with_zero_padding():
    stream = pack_bits("110")
    assert stream.data == b"\xc0"
    assert stream.bit_length == 3
    assert stream.pad_bits == 5
    assert stream.symbol_count is None


def test_pack_full_bytes_has_no_padding():
    stream = pack_bits("0000000111111110")
    assert stream.data == b"\x01\xfe"
    assert stream.pad_bits == 0
    assert len(stream) == 16


def test_padding_bits_are_not_read_back():
    assert EncodedStream(b"\xff", 3).to01() == "111"
    assert list(unpack_bits(b"\xa5\x80", 7)) == list("101001011")


def test_from01_to01():
    bits = "1011001110001"
    stream = EncodedStream.from01(bits, symbol_count=4)
    assert stream.to01() == bits
    assert stream.symbol_count == 4
    assert stream.byte_size == 2


def test_empty_stream():
    stream = EncodedStream.empty()
    assert len(stream) == 0
    assert stream.data == b""
    assert stream.to01() == ""
    assert pack_bits("") == EncodedStream(b"", 0)


def test_prefix_keeps_symbol_count():
    stream = EncodedStream.from01("10110", symbol_count=3)
    cut = stream.prefix(4)
    assert cut.to01() == "1011"
    assert cut.symbol_count == 3
    with pytest.raises(ValueError):
        stream.prefix(6)


def test_kind_is_validated_and_kept():
    stream = EncodedStream.from01("10110", symbol_count=3, kind="bytes")
    assert stream.prefix(2).kind == "bytes"
    assert EncodedStream.empty("text").kind == "text"
    with pytest.raises(ValueError):
        EncodedStream(b"", 0, kind="words")


@pytest.mark.parametrize("data, bit_length", [(b"\x00", 9), (b"\x00\x00", 8), (b"", 1)])
def test_bit_length_must_match_data(data, bit_length):
    with pytest.raises(ValueError):
        EncodedStream(data, bit_length)


def test_negative_values_rejected():
    with pytest.raises(ValueError):
        EncodedStream(b"", -1)
    with pytest.raises(ValueError):
        EncodedStream(b"", 0, -1)


def test_pack_rejects_non_bits():
    with pytest.raises(ValueError):
        pack_bits("1021")


def test_unpack_rejects_bad_padding():
    with pytest.raises(ValueError):
        list(unpack_bits(b"\x00", 8))
    with pytest.raises(ValueError):
        list(unpack_bits(b"", 3))
