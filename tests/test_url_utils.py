from __future__ import annotations

import pytest

from review_notifier.utils.url_utils import (
    build_android_reviews_url,
    build_ios_feed_url,
    build_play_store_url,
    redact_url,
    resolve_language,
)


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("ja", ("ja", "jp")),
        ("jp", ("ja", "jp")),
        ("JA", ("ja", "jp")),
        ("us", ("us", "us")),
    ],
)
def test_japanese_codes_are_synonyms(code: str, expected: tuple[str, str]) -> None:
    assert resolve_language(code) == expected


def test_ios_feed_url() -> None:
    assert build_ios_feed_url("https://itunes.apple.com/", "jp", "123") == (
        "https://itunes.apple.com/jp/rss/customerreviews/id=123/sortBy=mostRecent/xml"
    )
    assert build_ios_feed_url("https://itunes.apple.com", "us", "123", page=2) == (
        "https://itunes.apple.com/us/rss/customerreviews/page=2/id=123/sortBy=mostRecent/xml"
    )


def test_android_urls() -> None:
    assert build_play_store_url("https://play.google.com/store/apps", "com.a.b", "ja") == (
        "https://play.google.com/store/apps/details?id=com.a.b&hl=ja"
    )
    assert build_android_reviews_url(
        "https://www.googleapis.com/androidpublisher/v3/applications", "com.a.b", "ya29.tok"
    ) == (
        "https://www.googleapis.com/androidpublisher/v3/applications/com.a.b/reviews"
        "?access_token=ya29.tok&maxResults=1000"
    )


def test_redact_url_hides_access_token() -> None:
    redacted = redact_url("https://api.test/com.a.b/reviews?access_token=secret&maxResults=1000")

    assert "secret" not in redacted
    assert redacted == "https://api.test/com.a.b/reviews?access_token=***&maxResults=1000"
