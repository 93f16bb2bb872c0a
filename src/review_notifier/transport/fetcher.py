from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests

from review_notifier.utils.url_utils import redact_url

logger = logging.getLogger(__name__)

USER_AGENT = "review-notifier/0.1 (+https://github.com/)"


class TransportError(RuntimeError):
    """Raised when a payload could not be retrieved."""


class Fetcher(ABC):
    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Retrieve the raw payload behind a URL."""


class HttpFetcher(Fetcher):
    def __init__(self, timeout_seconds: int = 30, session: requests.Session | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self.session = session

    def fetch(self, url: str) -> bytes:
        headers = {"User-Agent": USER_AGENT}
        getter = self.session.get if self.session is not None else requests.get
        safe_url = redact_url(url)

        try:
            response = getter(url, timeout=self.timeout_seconds, headers=headers)
        except requests.RequestException as exc:
            raise TransportError(f"request to {safe_url} failed: {type(exc).__name__}") from exc

        if response.status_code >= 400:
            raise TransportError(f"{safe_url} returned HTTP {response.status_code}")

        logger.debug("Fetched %d bytes from %s", len(response.content), safe_url)
        return response.content
