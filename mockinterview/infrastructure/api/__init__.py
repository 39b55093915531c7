"""Interview directory REST client."""

from .client import DirectoryRestClient, DirectoryApiError

__all__ = ["DirectoryRestClient", "DirectoryApiError"]
