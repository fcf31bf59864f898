import pytest

from kademlia_tables import (
    KademliaTable,
    KademliaTables,
)
from tests.factories import (
    classify_by_ping,
    random_id,
)


@pytest.fixture
def tables():
    return KademliaTables(random_id(), classify_by_ping, table_count=3, encoding="hex")


@pytest.fixture
def small_tables():
    """Tables over a 16-bit identifier made of zero bits."""
    return KademliaTables("0000", classify_by_ping, encoding="hex")


@pytest.fixture
def table():
    return KademliaTable("0000", encoding="hex")
