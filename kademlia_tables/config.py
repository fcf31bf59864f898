# kademlia_tables/config.py
from dataclasses import dataclass
from typing import Any, Final

from kademlia_tables.encoding import is_supported_encoding
from kademlia_tables.exceptions import ConfigurationError

BUCKET_SIZE: Final[int] = 20  # k in the Kademlia paper
TABLE_COUNT: Final[int] = 3
PREFERENCE_FACTOR: Final[float] = 2
ENCODING: Final[str] = "utf8"

# camelCase spellings accepted by from_dict
_CAMEL_CASE_OPTIONS: Final[dict[str, str]] = {
    "bucketSize": "bucket_size",
    "tableCount": "table_count",
    "preferenceFactor": "preference_factor",
}


@dataclass(frozen=True)
class KademliaTablesConfig:
    """Configuration shared by every table of a routing structure."""

    bucket_size: int = BUCKET_SIZE
    table_count: int = TABLE_COUNT
    preference_factor: float = PREFERENCE_FACTOR
    encoding: str = ENCODING

    def __post_init__(self) -> None:
        if not isinstance(self.bucket_size, int) or self.bucket_size < 1:
            raise ConfigurationError(
                f"bucket_size must be a positive integer, got {self.bucket_size!r}"
            )
        if not isinstance(self.table_count, int) or self.table_count < 1:
            raise ConfigurationError(
                f"table_count must be a positive integer, got {self.table_count!r}"
            )
        if self.preference_factor <= 0:
            raise ConfigurationError(
                f"preference_factor must be positive, got {self.preference_factor!r}"
            )
        if not is_supported_encoding(self.encoding):
            raise ConfigurationError(f"Unsupported encoding {self.encoding!r}")

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "KademliaTablesConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        options = {_CAMEL_CASE_OPTIONS.get(k, k): v for k, v in config.items()}
        return cls(
            **{k: v for k, v in options.items() if k in cls.__annotations__}
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "bucket_size": self.bucket_size,
            "table_count": self.table_count,
            "preference_factor": self.preference_factor,
            "encoding": self.encoding,
        }


def resolve_config(
    config: KademliaTablesConfig | None, options: dict[str, Any]
) -> KademliaTablesConfig:
    """Apply keyword overrides to ``config``, or build one from them alone."""
    unknown = sorted(
        k
        for k in options
        if _CAMEL_CASE_OPTIONS.get(k, k) not in KademliaTablesConfig.__annotations__
    )
    if unknown:
        raise ConfigurationError(f"Unknown configuration options: {unknown}")
    if config is None:
        return KademliaTablesConfig.from_dict(options)
    if options:
        return KademliaTablesConfig.from_dict({**config.to_dict(), **options})
    return config
