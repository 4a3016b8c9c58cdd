class Error(Exception):
    """Base exception for contestpulse errors."""

    pass


class ValidationError(Error):
    """Raised when contest data (typically timestamps) is malformed or unparsable."""

    pass


class NotFoundError(Error):
    """Raised when a referenced contest or submission does not exist."""

    pass


class ExternalProviderError(Error):
    """Raised when the stats provider fails: network, non-2xx, or bad payload."""

    pass


class StorageError(Error):
    """Raised when reading or writing the submission store fails."""

    pass
