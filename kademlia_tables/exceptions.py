class BaseKademliaTablesError(Exception):
    pass


class ValidationError(BaseKademliaTablesError):
    """Raised when something does not pass a validation check."""


class ConfigurationError(ValidationError):
    """Raised when a routing table is built from an invalid configuration."""


class InvalidIdentifierError(ValidationError):
    """Raised when an identifier cannot be decoded under the configured encoding."""
