class RestKitError(Exception):
    """Base class for all exceptions in FastAPI-RestKit."""


class CacheError(RestKitError):
    """Exception raised for cache-related errors."""


class InvalidCacheKeyError(CacheError, ValueError):
    """Exception raised when a cache key is empty or uses reserved characters."""


class InvalidTTLError(CacheError, ValueError):
    """Exception raised when a time-to-live cannot be interpreted."""


class ConfigurationError(RestKitError, ValueError):
    """Exception raised for invalid endpoint or middleware configuration."""


class UnsupportedSerializationModeError(ConfigurationError):
    """Exception raised when a serialization mode is unknown or unavailable."""
