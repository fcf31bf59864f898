"""
Multi-table Kademlia routing.

Peers are partitioned across several parallel routing tables by a classifier
(for instance on observed latency). Lookups find the owning table through the
shared bucket index, and ``closest`` merges per-table results so that peers
from preferred tables are only passed over for farther ones once the search
window has grown past them.
"""

from collections.abc import (
    Iterator,
    Mapping,
)
import logging
from typing import (
    Any,
    Generic,
)

from kademlia_tables.abc import (
    Classifier,
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
    ConfigurationError,
    ValidationError,
)
from kademlia_tables.table import (
    KademliaTable,
)
from kademlia_tables.utils import (
    create_compare,
    get_distance,
    get_node_id,
    merge_node,
)

logger = logging.getLogger("kademlia_tables.tables")


class KademliaTables(Generic[N]):
    """
    A set of ``table_count`` routing tables sharing one local identifier.

    Each peer lives in exactly one table, chosen by the classifier. Higher
    table indices are searched first by :meth:`closest`.

    The structure is not thread-safe; drive it from a single task or guard it
    with an external lock.
    """

    get_distance = staticmethod(get_distance)
    create_compare = staticmethod(create_compare)

    def __init__(
        self,
        id: IdLike,
        classifier: Classifier[N] | None = None,
        config: KademliaTablesConfig | None = None,
        *,
        table_class: type[IKademliaTable[N]] = KademliaTable,
        **options: Any,
    ) -> None:
        """
        Initialize the routing tables.

        :param id: The identifier of the local node.
        :param classifier: Maps a peer to a table index in ``[0, table_count)``.
            May be omitted by subclasses overriding :meth:`get_table_index`.
        :param config: Shared configuration; keyword ``options`` override it.
        :param table_class: Single-table implementation to instantiate.

        """
        self.config = resolve_config(config, options)
        self.id = id
        self.encoding = self.config.encoding

        self.bucket_size = self.config.bucket_size
        self.bucket_count = len(decode_id(id, self.encoding)) * 8 + 1

        self.table_class = table_class
        self.preference_factor = self.config.preference_factor
        self.table_count = self.config.table_count

        if (
            classifier is None
            and type(self).get_table_index is KademliaTables.get_table_index
        ):
            raise ConfigurationError(
                "A classifier is required unless get_table_index is overridden"
            )
        self._classifier = classifier

        self.tables: list[IKademliaTable[N]] = [
            table_class(id, self.config) for _ in range(self.table_count)
        ]

    @property
    def buckets(self) -> list[list[N]]:
        """Every bucket of every table, table by table."""
        return [bucket for table in self.tables for bucket in table.buckets]

    @property
    def nodes(self) -> list[N]:
        return [node for table in self.tables for node in table.nodes]

    def get_table_index(self, node: N) -> int:
        if self._classifier is None:
            raise ConfigurationError(
                "A classifier is required unless get_table_index is overridden"
            )
        return self._classifier(node)

    def get_bucket_index(self, id: IdLike) -> int:
        return self.tables[0].get_bucket_index(id)

    def _checked_table_index(self, ti: int) -> int:
        if not 0 <= ti < self.table_count:
            raise ValidationError(
                f"Table index {ti} out of range for {self.table_count} tables"
            )
        return ti

    def _find_table_index(self, id: IdLike, i: int) -> int | None:
        for ti, table in enumerate(self.tables):
            if table.has(id, i):
                return ti
        return None

    def add(self, node: N, ti: int | None = None) -> bool:
        """
        Add a peer to the table chosen by the classifier, or to table ``ti``.

        Returns
        -------
            bool: True if the peer was inserted, False if its bucket is full
            or a peer with the same id is already known

        """
        id = get_node_id(node)
        if ti is None:
            ti = self.get_table_index(node)
        self._checked_table_index(ti)

        if self.has(id):
            logger.debug("Peer %s already known, not adding it again", id)
            return False

        success = self.tables[ti].add(node)
        if success:
            logger.debug("Added peer %s to table %d", id, ti)
        else:
            logger.debug("Bucket for peer %s in table %d is full", id, ti)
        return success

    def has(self, id: IdLike, i: int | None = None) -> bool:
        if i is None:
            i = self.get_bucket_index(id)
        return any(table.has(id, i) for table in self.tables)

    def get(self, id: IdLike, i: int | None = None) -> N | None:
        if i is None:
            i = self.get_bucket_index(id)
        for table in self.tables:
            node = table.get(id, i)
            if node is not None:
                return node
        return None

    def closest(self, id: IdLike, limit: int = 3) -> list[N]:
        """
        Find up to ``limit`` peers to contact for ``id``.

        A known peer with exactly ``id`` always comes first. The rest come
        from :meth:`get_preferred_nodes`.
        """
        if limit <= 0:
            return []

        node = self.get(id)
        preferred_nodes = self.get_preferred_nodes(id, limit)

        if node is None:
            return preferred_nodes

        key = decode_id(id, self.encoding)
        others = [
            n
            for n in preferred_nodes
            if decode_id(get_node_id(n), self.encoding) != key
        ]
        return [node, *others[: limit - 1]]

    def get_preferred_nodes(self, id: IdLike, limit: int) -> list[N]:
        """
        Merge the closest peers of every table into one preference order.

        Tables are visited from the highest index down. The highest table is
        searched without restriction; each lower table only contributes peers
        whose bucket offset from ``id`` lies inside a window that widens by
        at least ``preference_factor`` per step. The collected peers are
        reversed, so the last table visited leads.
        """
        i0 = self.get_bucket_index(id)
        nodes: list[N] = []
        offset_boundary: float | None = None

        for ti in range(self.table_count - 1, -1, -1):
            boundary = self.bucket_count if offset_boundary is None else offset_boundary

            accepted = []
            offsets = []
            for node in self.tables[ti].closest(id, limit):
                offset = abs(i0 - self.get_bucket_index(get_node_id(node)))
                if offset <= boundary:
                    accepted.append(node)
                    offsets.append(offset)

            nodes.extend(accepted)
            offset_boundary = self.next_offset_boundary(
                max(offsets, default=None), offset_boundary
            )

        nodes.reverse()
        return nodes[:limit]

    def next_offset_boundary(
        self, max_offset: int | None, offset_boundary: float | None
    ) -> float:
        """
        Offset window for the next, less preferred, table.

        :param max_offset: Largest bucket offset accepted at this step, or
            None if the table contributed nothing
        :param offset_boundary: Window used at this step, None when unbounded

        """
        doubled = (offset_boundary or 1) * 2
        if max_offset is None:
            return doubled
        return max(max(max_offset, 1) * self.preference_factor, doubled)

    def update(
        self, id: IdLike, fields: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> N | None:
        """
        Merge new field values into a known peer.

        The peer keeps its bucket position unless the classifier now places
        it in another table; it is then moved to the tail of its bucket in
        that table. If that bucket is full the peer is dropped.

        Returns
        -------
            The updated record, or None if no peer has this id

        """
        i = self.get_bucket_index(id)
        ti = self._find_table_index(id, i)
        if ti is None:
            return None

        node = self.tables[ti].get(id, i)
        updated_node = merge_node(node, {**(fields or {}), **kwargs})
        new_ti = self._checked_table_index(self.get_table_index(updated_node))

        if new_ti != ti:
            self.tables[ti].remove(id, i)
            if self.tables[new_ti].add(updated_node):
                logger.debug("Moved peer %s from table %d to %d", id, ti, new_ti)
            else:
                logger.warning(
                    "Peer %s dropped moving from table %d: bucket %d of table %d "
                    "is full",
                    id,
                    ti,
                    i,
                    new_ti,
                )
            return updated_node

        self.tables[ti].replace(updated_node, i)
        return updated_node

    def seen(self, id: IdLike) -> bool:
        """Mark a peer as most recently seen within its bucket."""
        i = self.get_bucket_index(id)
        ti = self._find_table_index(id, i)
        if ti is None:
            return False
        return self.tables[ti].seen(id, i)

    def remove(self, id: IdLike) -> bool:
        i = self.get_bucket_index(id)
        for ti, table in enumerate(self.tables):
            if table.remove(id, i):
                logger.debug("Removed peer %s from table %d", id, ti)
        return True

    def __len__(self) -> int:
        return sum(len(table) for table in self.tables)

    def __iter__(self) -> Iterator[N]:
        for table in self.tables:
            yield from table

    def __contains__(self, id: object) -> bool:
        return isinstance(id, (str, bytes)) and self.has(id)
