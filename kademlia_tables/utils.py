"""
Utility functions for the Kademlia routing tables.
"""

from collections.abc import Callable, Mapping
import dataclasses
from typing import Any, TypeVar

from kademlia_tables.encoding import IdLike, decode_id
from kademlia_tables.exceptions import ValidationError

RecordT = TypeVar("RecordT")


def xor_distance(key1: bytes, key2: bytes) -> int:
    """
    Calculate the XOR distance between two keys.

    Bytes past the end of the shorter key count as fully differing (0xff), so
    keys of unequal length are never at distance zero.
    """
    common = min(len(key1), len(key2))
    distance = int.from_bytes(
        bytes(a ^ b for a, b in zip(key1[:common], key2[:common])), byteorder="big"
    )
    extra = abs(len(key1) - len(key2))
    return (distance << (8 * extra)) | ((1 << (8 * extra)) - 1)


def shared_prefix_length(key1: bytes, key2: bytes) -> int:
    """Number of leading bits two keys have in common."""
    for i, (a, b) in enumerate(zip(key1, key2)):
        xor = a ^ b
        if xor:
            return i * 8 + 8 - xor.bit_length()
    return min(len(key1), len(key2)) * 8


def get_node_id(node: Any) -> IdLike:
    """Return the identifier of a peer record or mapping."""
    if isinstance(node, Mapping):
        return node["id"]
    return node.id


def get_distance(id1: IdLike, id2: IdLike, encoding: str = "utf8") -> int:
    """XOR distance between two encoded identifiers."""
    return xor_distance(decode_id(id1, encoding), decode_id(id2, encoding))


def create_compare(id: IdLike, encoding: str = "utf8") -> Callable[[Any], int]:
    """
    Build a sort key ordering peer records by XOR distance to ``id``.

    Use as ``sorted(nodes, key=create_compare(target))``.
    """
    target = decode_id(id, encoding)

    def compare(node: Any) -> int:
        return xor_distance(decode_id(get_node_id(node), encoding), target)

    return compare


def merge_node(node: RecordT, fields: Mapping[str, Any]) -> RecordT:
    """
    Return a copy of ``node`` with ``fields`` applied over it.

    The given record is never mutated. Supports dataclasses, named tuples
    and mappings.
    """
    if "id" in fields:
        raise ValidationError("A peer's id cannot be changed by an update")
    if dataclasses.is_dataclass(node) and not isinstance(node, type):
        return dataclasses.replace(node, **fields)
    if isinstance(node, tuple) and hasattr(node, "_replace"):
        return node._replace(**fields)
    if isinstance(node, Mapping):
        return type(node)({**node, **fields})  # type: ignore[call-arg]
    raise ValidationError(f"Cannot merge fields into a {type(node).__name__} record")
