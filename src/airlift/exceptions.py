"""Custom exceptions for airlift"""


class AirliftError(Exception):
    """Base exception for fatal airlift errors"""

    exit_code = 1


class ConfigError(AirliftError):
    """Raised when the configuration is missing, unreadable or has no images"""

    pass


class ArchiveDirectoryError(AirliftError):
    """Raised when the archive directory is missing or cannot be created"""

    pass


class RuntimeUnavailableError(AirliftError):
    """Raised when the container runtime binary cannot be executed"""

    pass


class InvalidReferenceError(AirliftError):
    """Raised when an image reference cannot be parsed"""

    pass


class InvalidArchiveNameError(AirliftError):
    """Raised when an archive filename cannot be decoded"""

    pass
