class BackslashError(Exception):
    """Base class for installer errors."""


class ConfigurationError(BackslashError):
    """Raised when a connection is missing or has invalid parameters."""


class EnumConfigurationError(BackslashError):
    """Raised when a lookup enum is malformed or has no storage model."""
