from __future__ import annotations

import pytest

from review_notifier.models import AppDescriptor, Platform, ReviewRecord, ReviewValidationError


@pytest.mark.parametrize("review_id", [None, "", "   "])
def test_review_requires_identity(review_id) -> None:
    with pytest.raises(ReviewValidationError):
        ReviewRecord(
            review_id=review_id,
            title="t",
            message="m",
            rating=5,
            version="1",
            updated_at="2024/03/02 17:20:30",
        )


def test_version_is_text_and_rating_is_numeric() -> None:
    review = ReviewRecord(
        review_id=" 9001 ",
        title="t",
        message="m",
        rating="4",
        version=2.1,
        updated_at="2024/03/02 17:20:30",
    )

    assert review.review_id == "9001"
    assert review.rating == 4
    assert review.version == "2.1"


def test_non_numeric_rating_is_rejected() -> None:
    with pytest.raises(ReviewValidationError):
        ReviewRecord(
            review_id="1",
            title="t",
            message="m",
            rating="five",
            version="1",
            updated_at="2024/03/02 17:20:30",
        )


def test_descriptor_label_falls_back_to_platform_and_id() -> None:
    app = AppDescriptor(platform=Platform.IOS, app_id="111")
    assert app.label == "iOS 111"

    app.display_name = "Example App"
    assert app.label == "Example App"
