"""Exceptions raised by the API client and the local stores."""


class HNError(Exception):
    """Base class for every error hnterm raises on purpose."""


class FetchError(HNError):
    """A request failed: network error, bad status or unparsable body."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class RequestCancelled(HNError):
    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)


class StorageError(HNError):
    """A bookmarks/history/search file could not be read or written."""
