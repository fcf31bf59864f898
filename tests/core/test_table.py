"""
Unit tests for the single KademliaTable.

Covers bucket indexing relative to the local identifier, capacity limits,
recency ordering and closest-peer queries.
"""

import pytest

from kademlia_tables import (
    InvalidIdentifierError,
    KademliaTable,
    KademliaTablesConfig,
)
from tests.factories import (
    Node,
)


def bucket_ids(table, i):
    return [node.id for node in table.buckets[i]]


class TestKademliaTable:
    """Test suite for KademliaTable."""

    def test_init_default_parameters(self):
        table = KademliaTable("0000", encoding="hex")

        assert table.bucket_size == 20
        assert table.bucket_count == 17
        assert len(table.buckets) == 17
        assert table.nodes == []
        assert len(table) == 0

    def test_init_from_config(self):
        config = KademliaTablesConfig(bucket_size=5, encoding="hex")
        table = KademliaTable("00000000", config)

        assert table.bucket_size == 5
        assert table.bucket_count == 33
        assert table.config is config

    def test_options_override_config(self):
        config = KademliaTablesConfig(bucket_size=5, encoding="hex")
        table = KademliaTable("0000", config, bucket_size=7)

        assert table.bucket_size == 7
        assert table.encoding == "hex"

    def test_utf8_identifier_bit_length(self):
        table = KademliaTable("abc")

        assert table.bucket_count == 25

    @pytest.mark.parametrize("bad_id", ["zz", "abc", ""])
    def test_malformed_identifier_rejected(self, bad_id):
        with pytest.raises(InvalidIdentifierError):
            KademliaTable(bad_id, encoding="hex")

    @pytest.mark.parametrize(
        "id, expected",
        [
            ("8000", 0),
            ("4000", 1),
            ("00ff", 8),
            ("0001", 15),
            ("0000", 16),
        ],
    )
    def test_get_bucket_index(self, table, id, expected):
        assert table.get_bucket_index(id) == expected

    def test_peer_operations(self, table):
        node = Node("00ff", 10)

        assert not table.has(node.id)
        assert table.get(node.id) is None

        assert table.add(node) is True
        assert table.has(node.id)
        assert table.has(node.id, 8)
        assert not table.has(node.id, 7)
        assert table.get(node.id) == node
        assert node.id in table
        assert list(table) == [node]

        assert table.remove(node.id) is True
        assert not table.has(node.id)
        assert table.remove(node.id) is False

    def test_add_duplicate_rejected(self, table):
        assert table.add(Node("8000", 10)) is True
        assert table.add(Node("8000", 99)) is False
        assert table.get("8000").ping_ms == 10
        assert len(table) == 1

    def test_identifier_spellings_match(self, table):
        table.add(Node("abcd"))

        assert table.has(b"\xab\xcd")
        assert table.has("ABCD")
        assert table.add(Node(b"\xab\xcd")) is False
        assert len(table) == 1

    def test_add_to_full_bucket(self):
        table = KademliaTable("0000", encoding="hex", bucket_size=2)

        assert table.add(Node("8000")) is True
        assert table.add(Node("8001")) is True
        assert table.add(Node("8002")) is False

        assert bucket_ids(table, 0) == ["8000", "8001"]
        # Other buckets still accept peers
        assert table.add(Node("4000")) is True

    def test_seen_moves_peer_to_tail(self, table):
        for id in ["8000", "8001", "8002"]:
            table.add(Node(id))

        assert table.seen("8000") is True
        assert bucket_ids(table, 0) == ["8001", "8002", "8000"]
        assert table.seen("9999") is False

    def test_replace_keeps_position(self, table):
        for id in ["8000", "8001", "8002"]:
            table.add(Node(id))

        assert table.replace(Node("8001", 42)) is True
        assert bucket_ids(table, 0) == ["8000", "8001", "8002"]
        assert table.get("8001").ping_ms == 42
        assert table.replace(Node("9999")) is False

    def test_closest(self, table):
        for id in ["8000", "ff00", "0001", "00ff"]:
            table.add(Node(id))

        assert [n.id for n in table.closest("0000", 2)] == ["0001", "00ff"]
        assert [n.id for n in table.closest("ffff", 1)] == ["ff00"]
        assert len(table.closest("0000", 10)) == 4
        assert table.closest("0000", 0) == []

    def test_closest_default_limit(self, table):
        for id in ["8000", "ff00", "0001", "00ff"]:
            table.add(Node(id))

        assert len(table.closest("0000")) == 3

    def test_static_helpers(self):
        assert KademliaTable.get_distance("00ff", "000f", "hex") == 0xF0

        key = KademliaTable.create_compare("0000", "hex")
        nodes = [Node("ff00"), Node("0001"), Node("00f0")]
        assert [n.id for n in sorted(nodes, key=key)] == ["0001", "00f0", "ff00"]
