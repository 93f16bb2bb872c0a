from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

DEFAULT_IOS_BASE_URL = "https://itunes.apple.com"
DEFAULT_PLAY_STORE_BASE_URL = "https://play.google.com/store/apps"
DEFAULT_ANDROID_API_BASE_URL = "https://www.googleapis.com/androidpublisher/v3/applications"
ANDROID_MAX_RESULTS = 1000

_JAPANESE_CODES = {"ja", "jp"}
_SECRET_QUERY_PARAMS = {"access_token"}


def resolve_language(code: str) -> tuple[str, str]:
    """Return ``(language, country)`` for a configured code.

    ``ja`` and ``jp`` are synonyms: the App Store path wants the country ``jp``
    while everything that tags a language wants ``ja``.
    """
    normalized = (code or "").strip().lower()
    if normalized in _JAPANESE_CODES:
        return "ja", "jp"
    return normalized, normalized


def build_ios_feed_url(
    base_url: str,
    country: str,
    app_id: str,
    page: int | None = None,
) -> str:
    prefix = f"{base_url.rstrip('/')}/{country}/rss/customerreviews"
    if page is not None and page > 0:
        return f"{prefix}/page={page}/id={app_id}/sortBy=mostRecent/xml"
    return f"{prefix}/id={app_id}/sortBy=mostRecent/xml"


def build_play_store_url(base_url: str, app_id: str, language: str) -> str:
    query = urlencode([("id", app_id), ("hl", language)])
    return f"{base_url.rstrip('/')}/details?{query}"


def build_android_reviews_url(base_url: str, app_id: str, token: str) -> str:
    query = urlencode([("access_token", token), ("maxResults", ANDROID_MAX_RESULTS)])
    return f"{base_url.rstrip('/')}/{app_id}/reviews?{query}"


def redact_url(url: str) -> str:
    """Hide credentials carried in the query string before logging a URL."""
    value = (url or "").strip()
    parsed = urlsplit(value)
    if not parsed.query:
        return value

    redacted = []
    for key, query_value in parse_qsl(parsed.query, keep_blank_values=True):
        if key.lower() in _SECRET_QUERY_PARAMS:
            query_value = "***"
        redacted.append((key, query_value))
    query = urlencode(redacted, safe="*")
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, query, parsed.fragment))
