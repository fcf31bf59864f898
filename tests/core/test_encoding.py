import pytest

from kademlia_tables import (
    InvalidIdentifierError,
    decode_id,
    encode_id,
)
from kademlia_tables.encoding import is_supported_encoding


@pytest.mark.parametrize(
    "value, encoding, expected",
    [
        ("00ff", "hex", b"\x00\xff"),
        ("ab", "utf8", b"ab"),
        ("ab", "utf-8", b"ab"),
        ("AAE=", "base64", b"\x00\x01"),
        ("12", "base58", b"\x00\x01"),
        ("\xe9", "latin1", b"\xe9"),
    ],
)
def test_decode_id(value, encoding, expected):
    assert decode_id(value, encoding) == expected


def test_bytes_pass_through():
    assert decode_id(b"\x01\x02", "hex") == b"\x01\x02"


@pytest.mark.parametrize(
    "value, encoding",
    [
        ("zz", "hex"),
        ("abc", "hex"),
        ("not base64!", "base64"),
        ("0OIl", "base58"),
        ("\xe9", "ascii"),
    ],
)
def test_decode_invalid_identifier(value, encoding):
    with pytest.raises(InvalidIdentifierError):
        decode_id(value, encoding)


def test_unsupported_encoding():
    assert not is_supported_encoding("rot13")
    with pytest.raises(InvalidIdentifierError):
        decode_id("00", "rot13")


def test_encode_id():
    assert encode_id(b"\x00\xff", "hex") == "00ff"
    assert encode_id(b"\x00\x01", "base58") == "12"
    assert decode_id(encode_id(b"peer", "base64"), "base64") == b"peer"
