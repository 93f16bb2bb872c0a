from __future__ import annotations

from abc import ABC, abstractmethod

from review_notifier.models import AppDescriptor, ReviewRecord


class Notifier(ABC):
    name: str = "notifier"

    @abstractmethod
    def send(self, app: AppDescriptor, reviews: list[ReviewRecord]) -> None:
        """Deliver one app's new reviews; an empty list must be a no-op."""


def render_stars(rating: int, scale: int = 5) -> str:
    filled = max(0, min(scale, rating))
    return "★" * filled + "☆" * (scale - filled)


def render_review_text(app: AppDescriptor, review: ReviewRecord) -> str:
    lines = [
        f"{render_stars(review.rating)} {review.title}",
        review.message or "(no review text)",
        render_review_footer(app, review),
    ]
    return "\n".join(lines)


def render_review_footer(app: AppDescriptor, review: ReviewRecord) -> str:
    parts = [f"{app.platform.value} {review.version or 'unknown version'}", review.updated_at]
    if review.author:
        parts.append(review.author)
    return " | ".join(parts)
