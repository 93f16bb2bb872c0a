"""Transport collaborators: payload fetching and API credentials."""

from .fetcher import Fetcher, HttpFetcher, TransportError
from .credentials import FileTokenProvider, TokenError, TokenProvider, refresh_token

__all__ = [
    "Fetcher",
    "FileTokenProvider",
    "HttpFetcher",
    "TokenError",
    "TokenProvider",
    "TransportError",
    "refresh_token",
]
