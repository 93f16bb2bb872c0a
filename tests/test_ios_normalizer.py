from __future__ import annotations

import pytest

from conftest import build_ios_feed
from review_notifier.models import AppDescriptor, Platform
from review_notifier.normalizers import IosFeedNormalizer, ParseError, normalizer_for


def _app() -> AppDescriptor:
    return AppDescriptor(platform=Platform.IOS, app_id="111")


def test_feed_metadata_entry_fills_descriptor_and_reviews_follow_in_order() -> None:
    payload = build_ios_feed(
        reviews=[
            {"review_id": "9002", "title": "Newer", "message": "Love it", "rating": 5},
            {
                "review_id": "9001",
                "title": "Older",
                "message": "Crashes on launch",
                "rating": 1,
                "version": "2.0",
                "updated": "2024-03-01T08:00:00+09:00",
            },
        ]
    )
    app = _app()

    reviews = IosFeedNormalizer().normalize(payload, app)

    assert app.display_name == "Example App"
    assert app.store_url == "https://apps.apple.com/jp/app/example/id111?uo=2"
    assert [review.review_id for review in reviews] == ["9002", "9001"]

    newer, older = reviews
    assert newer.title == "Newer"
    assert newer.message == "Love it"
    assert newer.rating == 5
    assert newer.version == "1.0.0"
    assert newer.updated_at == "2024/03/02 17:20:30"
    assert newer.author == "alice"

    assert older.rating == 1
    assert older.version == "2.0"
    assert older.updated_at == "2024/02/29 23:00:00"


def test_feed_without_entries_yields_nothing_and_leaves_descriptor_alone() -> None:
    app = _app()

    reviews = IosFeedNormalizer().normalize(build_ios_feed(with_metadata=False), app)

    assert reviews == []
    assert app.display_name is None
    assert app.label == "iOS 111"


def test_feed_with_only_metadata_has_no_reviews() -> None:
    app = _app()

    assert IosFeedNormalizer().normalize(build_ios_feed(), app) == []
    assert app.display_name == "Example App"


def test_non_feed_payload_is_a_parse_error() -> None:
    with pytest.raises(ParseError):
        IosFeedNormalizer().normalize(b'{"error": "service unavailable"}', _app())


def test_review_without_rating_fails_the_whole_feed() -> None:
    payload = build_ios_feed(reviews=[{"review_id": "9001"}]).replace(
        b"<im:rating>5</im:rating>", b""
    )

    with pytest.raises(ParseError):
        IosFeedNormalizer().normalize(payload, _app())


def test_registry_selects_normalizer_by_platform() -> None:
    assert isinstance(normalizer_for(Platform.IOS), IosFeedNormalizer)
