from __future__ import annotations

import json
from typing import Callable

import pytest

from review_notifier.models import AppDescriptor, ReviewRecord
from review_notifier.notifiers.base import Notifier
from review_notifier.transport import Fetcher, TokenProvider, TransportError

IOS_FEED_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns:im="http://itunes.apple.com/rss" xmlns="http://www.w3.org/2005/Atom" xml:lang="ja">
  <id>https://itunes.apple.com/jp/rss/customerreviews/id={app_id}/sortby=mostrecent/xml</id>
  <title>iTunes Store: Customer Reviews</title>
  <updated>2024-03-03T00:00:00-07:00</updated>
  {entries}
</feed>
"""

IOS_METADATA_ENTRY = """
  <entry>
    <updated>2024-03-03T00:00:00-07:00</updated>
    <id>https://apps.apple.com/jp/app/example/id{app_id}?uo=2</id>
    <title>Example App - Example Inc.</title>
    <im:name>Example App</im:name>
    <link rel="alternate" type="text/html" href="https://apps.apple.com/jp/app/example/id{app_id}?uo=2"/>
  </entry>
"""

IOS_REVIEW_ENTRY = """
  <entry>
    <updated>{updated}</updated>
    <id>{review_id}</id>
    <title>{title}</title>
    <content type="text">{message}</content>
    <im:rating>{rating}</im:rating>
    <im:version>{version}</im:version>
    <author><name>{author}</name><uri>https://itunes.apple.com/jp/reviews/id1</uri></author>
    <content type="html">&lt;p&gt;{message}&lt;/p&gt;</content>
  </entry>
"""


def build_ios_feed(
    app_id: str = "111",
    reviews: list[dict] | None = None,
    *,
    with_metadata: bool = True,
) -> bytes:
    entries = []
    if with_metadata:
        entries.append(IOS_METADATA_ENTRY.format(app_id=app_id))
    for review in reviews or []:
        values = {
            "updated": "2024-03-02T10:20:30-07:00",
            "title": "Title",
            "message": "Body",
            "rating": 5,
            "version": "1.0.0",
            "author": "alice",
        }
        values.update(review)
        entries.append(IOS_REVIEW_ENTRY.format(**values))
    return IOS_FEED_TEMPLATE.format(app_id=app_id, entries="".join(entries)).encode("utf-8")


def build_android_payload(reviews: list[dict] | None = None) -> bytes:
    items = []
    for review in reviews or []:
        items.append(
            {
                "reviewId": review["review_id"],
                "authorName": review.get("author", "bob"),
                "comments": [
                    {
                        "userComment": {
                            "text": review.get("message", "\tNice app"),
                            "lastModified": {
                                "seconds": review.get("seconds", "1709400030"),
                                "nanos": 0,
                            },
                            "starRating": review.get("rating", 4),
                            "appVersionName": review.get("version", "3.2.1"),
                            "appVersionCode": 321,
                        }
                    }
                ],
            }
        )
    return json.dumps({"reviews": items}).encode("utf-8")


class FakeFetcher(Fetcher):
    """Serves payloads by URL fragment; an Exception value is raised instead."""

    def __init__(self, routes: dict[str, bytes | Exception]) -> None:
        self.routes = routes
        self.urls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        for marker, payload in self.routes.items():
            if marker in url:
                if isinstance(payload, Exception):
                    raise payload
                return payload
        raise TransportError(f"no route for {url}")


class StaticTokenProvider(TokenProvider):
    def __init__(self, token: str = "test-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error

    def get_token(self) -> str:
        if self.error is not None:
            raise self.error
        return self.token


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []

    def send(self, app: AppDescriptor, reviews: list[ReviewRecord]) -> None:
        self.calls.append((app.app_id, [review.review_id for review in reviews]))

    def sent_ids(self) -> list[str]:
        return [review_id for _, ids in self.calls for review_id in ids]


@pytest.fixture
def ios_feed() -> Callable[..., bytes]:
    return build_ios_feed


@pytest.fixture
def android_payload() -> Callable[..., bytes]:
    return build_android_payload
