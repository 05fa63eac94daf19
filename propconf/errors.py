"""Exceptions raised while resolving and loading configuration sources."""


class ConfigurationError(Exception):
    """Base exception for configuration errors."""

    pass


class MalformedSourceError(ConfigurationError):
    """Exception raised when a source location cannot be interpreted."""

    pass


class SourceReadError(ConfigurationError):
    """Exception raised when a resolved source cannot be read or parsed."""

    pass
