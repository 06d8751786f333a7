class MalformedRecord(ValueError):
    """Raised when a raw item record lacks a required field or has the wrong shape."""


class ResolutionMiss(LookupError):
    """Raised by a resolver when a comment id cannot be turned into a Comment."""


class FetchError(Exception):
    """Raised when a single item cannot be retrieved from the remote API."""
