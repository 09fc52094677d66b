class NetworkError(Exception):
    """Raised when a remote resource cannot be fetched."""
