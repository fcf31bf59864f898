"""
Interfaces shared by the routing tables.
"""

from abc import (
    ABC,
    abstractmethod,
)
from collections.abc import (
    Callable,
    Iterator,
)
from typing import (
    Generic,
    TypeVar,
)

from kademlia_tables.encoding import (
    IdLike,
)

# A peer record: a dataclass, named tuple or mapping carrying an ``id``
N = TypeVar("N")

# Maps a peer record to the index of the table that should hold it
Classifier = Callable[[N], int]


class IKademliaTable(ABC, Generic[N]):
    """
    Interface of a single XOR-distance bucket table.

    Buckets are ordered sequences, least-recently seen peer at the head.
    """

    id: IdLike
    encoding: str
    bucket_size: int
    bucket_count: int
    buckets: list[list[N]]

    @property
    @abstractmethod
    def nodes(self) -> list[N]:
        """All peers of the table, bucket by bucket."""

    @abstractmethod
    def get_bucket_index(self, id: IdLike) -> int:
        """Index in ``[0, bucket_count)`` of the bucket holding ``id``."""

    @abstractmethod
    def add(self, node: N) -> bool:
        """Append ``node`` to its bucket; False if the bucket is full."""

    @abstractmethod
    def has(self, id: IdLike, i: int | None = None) -> bool:
        pass

    @abstractmethod
    def get(self, id: IdLike, i: int | None = None) -> N | None:
        pass

    @abstractmethod
    def remove(self, id: IdLike, i: int | None = None) -> bool:
        pass

    @abstractmethod
    def closest(self, id: IdLike, limit: int = 3) -> list[N]:
        """Up to ``limit`` peers, nearest to ``id`` first."""

    @abstractmethod
    def seen(self, id: IdLike, i: int | None = None) -> bool:
        """Move a peer to the tail of its bucket."""

    @abstractmethod
    def replace(self, node: N, i: int | None = None) -> bool:
        """Swap in a new record for a peer, keeping its bucket position."""

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.buckets)

    def __iter__(self) -> Iterator[N]:
        for bucket in self.buckets:
            yield from bucket

    def __contains__(self, id: object) -> bool:
        return isinstance(id, (str, bytes)) and self.has(id)


__all__ = [
    "Classifier",
    "IKademliaTable",
    "N",
]
