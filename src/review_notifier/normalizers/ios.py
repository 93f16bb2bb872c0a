from __future__ import annotations

import logging
import re
from typing import Any

import feedparser

from review_notifier.models import AppDescriptor, Platform, ReviewRecord, ReviewValidationError
from review_notifier.utils.datetime_utils import format_review_timestamp, parse_datetime_utc

from .base import Normalizer, ParseError
from .registry import register_normalizer

logger = logging.getLogger(__name__)

_MULTISPACE = re.compile(r"[ \t]+")


class IosFeedNormalizer(Normalizer):
    """App Store customer-review feed.

    The first entry of the feed describes the app itself; every following entry
    is a review. feedparser exposes the ``im:`` elements as ``im_<name>`` keys.
    """

    platform = Platform.IOS

    def normalize(self, payload: bytes, app: AppDescriptor) -> list[ReviewRecord]:
        parsed = feedparser.parse(payload)
        if not parsed.get("version"):
            raise ParseError(
                f"iOS payload for {app.app_id} is not a feed: {parsed.get('bozo_exception')}"
            )
        if getattr(parsed, "bozo", False):
            logger.warning(
                "Feed parsing bozo exception for iOS app %s: %s",
                app.app_id,
                parsed.get("bozo_exception"),
            )

        entries = list(parsed.entries)
        if not entries:
            return []

        metadata = entries[0]
        app.display_name = _clean(metadata.get("im_name")) or app.display_name
        app.store_url = str(metadata.get("link", "")).strip() or app.store_url

        return [self._entry_to_review(app, entry) for entry in entries[1:]]

    def _entry_to_review(self, app: AppDescriptor, entry: Any) -> ReviewRecord:
        updated = parse_datetime_utc(entry.get("updated"))
        if updated is None:
            raise ParseError(
                f"iOS review {entry.get('id')!r} for {app.app_id} has no usable 'updated' value"
            )

        try:
            return ReviewRecord(
                review_id=entry.get("id"),
                title=_clean(entry.get("title")),
                message=_first_content(entry),
                rating=entry["im_rating"],
                version=_clean(entry.get("im_version")),
                updated_at=format_review_timestamp(updated),
                author=_clean(entry.get("author")) or None,
            )
        except (KeyError, ReviewValidationError) as exc:
            raise ParseError(f"malformed iOS review entry for {app.app_id}: {exc}") from exc


def _first_content(entry: Any) -> str:
    contents = entry.get("content")
    if not isinstance(contents, list) or not contents:
        return ""
    return str(contents[0].get("value", "")).strip()


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return _MULTISPACE.sub(" ", str(value)).strip()


@register_normalizer(Platform.IOS)
def _build_ios_normalizer() -> Normalizer:
    return IosFeedNormalizer()
