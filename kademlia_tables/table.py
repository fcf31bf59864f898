"""
Single Kademlia routing table.

One bucket per possible shared-prefix length with the local identifier, so a
table over an ``n``-bit identifier has ``n + 1`` buckets. The last bucket is
where the local identifier itself would land.
"""

import heapq
import logging
from typing import Any

from kademlia_tables.abc import (
    IKademliaTable,
    N,
)
from kademlia_tables.config import (
    KademliaTablesConfig,
    resolve_config,
)
from kademlia_tables.encoding import (
    IdLike,
    decode_id,
)
from kademlia_tables.exceptions import (
    InvalidIdentifierError,
)
from kademlia_tables.utils import (
    create_compare,
    get_distance,
    get_node_id,
    shared_prefix_length,
)

logger = logging.getLogger("kademlia_tables.table")


class KademliaTable(IKademliaTable[N]):
    """
    A fixed-bucket Kademlia routing table.

    Each bucket stores up to ``bucket_size`` peers ordered by last contact,
    least-recently seen first. A full bucket rejects new peers; there is no
    eviction or replacement cache at this level.
    """

    get_distance = staticmethod(get_distance)
    create_compare = staticmethod(create_compare)

    def __init__(
        self, id: IdLike, config: KademliaTablesConfig | None = None, **options: Any
    ) -> None:
        """
        Initialize the routing table.

        :param id: The identifier of the local node.
        :param config: Shared configuration; keyword ``options`` override it.

        """
        self.config = resolve_config(config, options)
        self.id = id
        self.encoding = self.config.encoding
        self.bucket_size = self.config.bucket_size

        self._id_bytes = decode_id(id, self.encoding)
        if not self._id_bytes:
            raise InvalidIdentifierError("The local identifier must not be empty")

        self.bucket_count = len(self._id_bytes) * 8 + 1
        self.buckets: list[list[N]] = [[] for _ in range(self.bucket_count)]

    @property
    def nodes(self) -> list[N]:
        return [node for bucket in self.buckets for node in bucket]

    def get_bucket_index(self, id: IdLike) -> int:
        prefix = shared_prefix_length(self._id_bytes, decode_id(id, self.encoding))
        return min(prefix, self.bucket_count - 1)

    def _index_in_bucket(self, id: IdLike, i: int) -> int | None:
        # Compare decoded bytes so every spelling of an identifier matches
        key = decode_id(id, self.encoding)
        for index, node in enumerate(self.buckets[i]):
            if decode_id(get_node_id(node), self.encoding) == key:
                return index
        return None

    def add(self, node: N) -> bool:
        """
        Append a peer to the tail of its bucket.

        Returns False without touching the table if the bucket is full or
        already holds a peer with the same id.
        """
        id = get_node_id(node)
        i = self.get_bucket_index(id)
        bucket = self.buckets[i]

        if self._index_in_bucket(id, i) is not None:
            logger.debug("Peer %s already in bucket %d", id, i)
            return False

        if len(bucket) >= self.bucket_size:
            logger.debug("Bucket %d is full, cannot add peer %s", i, id)
            return False

        bucket.append(node)
        return True

    def has(self, id: IdLike, i: int | None = None) -> bool:
        if i is None:
            i = self.get_bucket_index(id)
        return self._index_in_bucket(id, i) is not None

    def get(self, id: IdLike, i: int | None = None) -> N | None:
        if i is None:
            i = self.get_bucket_index(id)
        index = self._index_in_bucket(id, i)
        if index is None:
            return None
        return self.buckets[i][index]

    def remove(self, id: IdLike, i: int | None = None) -> bool:
        if i is None:
            i = self.get_bucket_index(id)
        index = self._index_in_bucket(id, i)
        if index is None:
            return False
        del self.buckets[i][index]
        return True

    def seen(self, id: IdLike, i: int | None = None) -> bool:
        if i is None:
            i = self.get_bucket_index(id)
        index = self._index_in_bucket(id, i)
        if index is None:
            return False
        bucket = self.buckets[i]
        bucket.append(bucket.pop(index))
        return True

    def replace(self, node: N, i: int | None = None) -> bool:
        id = get_node_id(node)
        if i is None:
            i = self.get_bucket_index(id)
        index = self._index_in_bucket(id, i)
        if index is None:
            return False
        self.buckets[i][index] = node
        return True

    def closest(self, id: IdLike, limit: int = 3) -> list[N]:
        """
        Find the peers closest to ``id``.

        :param id: The identifier to measure distance from
        :param limit: Maximum number of peers to return

        Returns
        -------
            list: Up to ``limit`` peers by ascending XOR distance; peers at
            equal distance keep table order.

        """
        if limit <= 0:
            return []
        return heapq.nsmallest(
            limit, self.nodes, key=create_compare(id, self.encoding)
        )
