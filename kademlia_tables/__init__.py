"""
Kademlia routing tables partitioned by peer quality.

This package provides a single XOR-distance bucket table and a multi-table
structure that spreads peers across several such tables according to a
caller-supplied classifier.
"""

from .config import (
    KademliaTablesConfig,
)
from .encoding import (
    decode_id,
    encode_id,
)
from .exceptions import (
    BaseKademliaTablesError,
    ConfigurationError,
    InvalidIdentifierError,
    ValidationError,
)
from .table import (
    KademliaTable,
)
from .tables import (
    KademliaTables,
)
from .utils import (
    create_compare,
    get_distance,
)

__all__ = [
    "BaseKademliaTablesError",
    "ConfigurationError",
    "InvalidIdentifierError",
    "KademliaTable",
    "KademliaTables",
    "KademliaTablesConfig",
    "ValidationError",
    "create_compare",
    "decode_id",
    "encode_id",
    "get_distance",
]
