from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ReviewValidationError(ValueError):
    """Raised when a review is built without its identity fields."""


class Platform(str, Enum):
    IOS = "iOS"
    ANDROID = "Android"


@dataclass(slots=True)
class AppDescriptor:
    platform: Platform
    app_id: str
    display_name: str | None = None
    store_url: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or f"{self.platform.value} {self.app_id}"


@dataclass(frozen=True, slots=True)
class ReviewRecord:
    review_id: str
    title: str
    message: str
    rating: int
    version: str
    updated_at: str
    author: str | None = None

    def __post_init__(self) -> None:
        if self.review_id is None or not str(self.review_id).strip():
            raise ReviewValidationError("review_id is required")

        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "review_id", str(self.review_id).strip())
        object.__setattr__(self, "version", "" if self.version is None else str(self.version))
        try:
            object.__setattr__(self, "rating", int(self.rating))
        except (TypeError, ValueError) as exc:
            raise ReviewValidationError(
                f"rating must be numeric for review {self.review_id}: {self.rating!r}"
            ) from exc


@dataclass(frozen=True, slots=True)
class NotificationDecision:
    eligible: bool
