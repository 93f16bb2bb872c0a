from __future__ import annotations

import json
from typing import Any

from review_notifier.models import AppDescriptor, Platform, ReviewRecord, ReviewValidationError
from review_notifier.utils.datetime_utils import format_review_timestamp, from_epoch_seconds

from .base import Normalizer, ParseError
from .registry import register_normalizer


class AndroidReviewsNormalizer(Normalizer):
    """Google Play Developer API ``reviews.list`` response.

    Reviews carry no title, so the package name stands in for one. The
    descriptor's name and store URL are set by the caller.
    """

    platform = Platform.ANDROID

    def normalize(self, payload: bytes, app: AppDescriptor) -> list[ReviewRecord]:
        try:
            document = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Android reviews for {app.app_id} are not valid JSON") from exc

        if not isinstance(document, dict):
            raise ParseError(f"Android reviews for {app.app_id} must be a JSON object")

        # the API omits "reviews" entirely when there is nothing to return
        reviews = document.get("reviews", [])
        if not isinstance(reviews, list):
            raise ParseError(f"Android reviews for {app.app_id}: 'reviews' must be a list")

        return [self._review_to_record(app, review) for review in reviews]

    def _review_to_record(self, app: AppDescriptor, review: Any) -> ReviewRecord:
        try:
            user_comment = review["comments"][0]["userComment"]
            updated = from_epoch_seconds(user_comment["lastModified"]["seconds"])
            return ReviewRecord(
                review_id=review["reviewId"],
                title=app.app_id,
                message=str(user_comment.get("text", "")).strip(),
                rating=user_comment["starRating"],
                version=user_comment.get("appVersionName", ""),
                updated_at=format_review_timestamp(updated),
                author=str(review.get("authorName", "")).strip() or None,
            )
        except (KeyError, IndexError, TypeError, AttributeError, ValueError, OverflowError) as exc:
            raise ParseError(f"malformed Android review for {app.app_id}: {exc!r}") from exc


@register_normalizer(Platform.ANDROID)
def _build_android_normalizer() -> Normalizer:
    return AndroidReviewsNormalizer()
