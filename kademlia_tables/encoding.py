"""
Identifier codecs.

Identifiers are handed around as strings and decoded to raw bytes before any
distance or bucket computation.
"""

import base64
import binascii
from collections.abc import Callable

import base58

from kademlia_tables.exceptions import InvalidIdentifierError

IdLike = str | bytes


def _decode_hex(value: str) -> bytes:
    return bytes.fromhex(value)


def _decode_base64(value: str) -> bytes:
    return base64.b64decode(value, validate=True)


def _decode_base58(value: str) -> bytes:
    return base58.b58decode(value)


def _text_codec(name: str) -> tuple[Callable[[str], bytes], Callable[[bytes], str]]:
    return (lambda value: value.encode(name), lambda raw: raw.decode(name))


_CODECS: dict[str, tuple[Callable[[str], bytes], Callable[[bytes], str]]] = {
    "utf8": _text_codec("utf-8"),
    "utf-8": _text_codec("utf-8"),
    "ascii": _text_codec("ascii"),
    "latin1": _text_codec("latin-1"),
    "hex": (_decode_hex, lambda raw: raw.hex()),
    "base64": (_decode_base64, lambda raw: base64.b64encode(raw).decode()),
    "base58": (_decode_base58, lambda raw: base58.b58encode(raw).decode()),
}


def is_supported_encoding(encoding: str) -> bool:
    return encoding in _CODECS


def decode_id(value: IdLike, encoding: str = "utf8") -> bytes:
    """
    Decode an identifier to its raw bytes.

    :param value: the identifier; ``bytes`` are returned unchanged
    :param encoding: one of the supported encoding names

    :raises InvalidIdentifierError: if ``value`` is not valid under ``encoding``
    """
    if isinstance(value, bytes):
        return value
    try:
        decode, _ = _CODECS[encoding]
    except KeyError:
        raise InvalidIdentifierError(f"Unsupported encoding {encoding!r}") from None
    try:
        return decode(value)
    except (ValueError, binascii.Error, UnicodeError) as e:
        raise InvalidIdentifierError(
            f"Identifier {value!r} is not valid {encoding}: {e}"
        ) from e


def encode_id(raw: bytes, encoding: str = "utf8") -> str:
    """Encode raw identifier bytes back to their string form."""
    try:
        _, encode = _CODECS[encoding]
    except KeyError:
        raise InvalidIdentifierError(f"Unsupported encoding {encoding!r}") from None
    try:
        return encode(raw)
    except UnicodeError as e:
        raise InvalidIdentifierError(f"Bytes {raw!r} are not valid {encoding}") from e
