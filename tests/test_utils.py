import binascii

import pytest

from cryptutil.common.errors import LengthMismatch
from cryptutil.common.utils import (
    sha1, hmac_sha1, to_base64, from_base64, long_to_binary, binary_to_long,
    long_to_base64, base64_to_long, pack_word, unpack_word, strxor, reversed_seq,
)


def test_sha1_known_vector():
    assert sha1(b"abc").hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert len(sha1(b"")) == 20


def test_hmac_sha1_rfc2202_case1():
    digest = hmac_sha1(b"\x0b" * 20, b"Hi There")
    assert digest.hex() == "b617318655057264e28bc0b6fb378c8ef146be00"


@pytest.mark.parametrize("data", [b"", b"\x00", b"foo", bytes(range(256))])
def test_base64_round_trip(data):
    assert from_base64(to_base64(data)) == data


def test_to_base64_is_standard_padded():
    assert to_base64(b"\xfb\xff") == "+/8="


def test_from_base64_rejects_garbage():
    with pytest.raises(binascii.Error):
        from_base64("not base64!")


@pytest.mark.parametrize("value, encoded", [
    (0, b"\x00"),
    (127, b"\x7f"),
    (128, b"\x00\x80"),
    (255, b"\x00\xff"),
    (256, b"\x01\x00"),
    (-1, b"\xff"),
    (-128, b"\x80"),
    (-129, b"\xff\x7f"),
])
def test_long_to_binary(value, encoded):
    assert long_to_binary(value) == encoded
    assert binary_to_long(encoded) == value


@pytest.mark.parametrize("value", [1, 2 ** 31, 2 ** 64 - 1, 3 ** 200, -(2 ** 100) + 7])
def test_long_binary_round_trip(value):
    assert binary_to_long(long_to_binary(value)) == value
    assert base64_to_long(long_to_base64(value)) == value


def test_binary_to_long_empty_is_zero():
    assert binary_to_long(b"") == 0


def test_words():
    assert pack_word(1) == b"\x00\x00\x00\x01"
    assert unpack_word(pack_word(0xDEADBEEF)) == 0xDEADBEEF
    with pytest.raises(LengthMismatch):
        unpack_word(b"abc")


def test_strxor_is_self_inverse():
    x = b"\x00\xffhello"
    y = b"\x0f\x0fworld"
    assert strxor(strxor(x, y), y) == x
    assert strxor(x, x) == b"\x00" * len(x)


def test_strxor_length_mismatch():
    with pytest.raises(LengthMismatch):
        strxor(b"ab", b"abc")
    # still a ValueError for callers that only know the builtin
    with pytest.raises(ValueError):
        strxor(b"", b"a")


def test_reversed_seq():
    assert reversed_seq("abc") == "cba"
    assert reversed_seq(b"\x01\x02") == b"\x02\x01"
    assert reversed_seq([1, 2, 3]) == [3, 2, 1]
    assert reversed_seq((1, 2)) == (2, 1)
    with pytest.raises(TypeError):
        reversed_seq(123)
