from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from review_notifier.models import AppDescriptor, Platform, ReviewRecord


class PersistenceError(RuntimeError):
    """Raised when the review store cannot be read."""


@dataclass(slots=True)
class StoredReview:
    review_id: str
    kind: str
    app_name: str
    title: str
    message: str
    rating: int
    updated: str
    version: str
    create_date: str


class Store(ABC):
    @abstractmethod
    def init_db(self) -> None:
        """Create any required schema."""

    @abstractmethod
    def exists(self, review_id: str, platform: Platform) -> int:
        """Return how many rows carry this review identity (0 or 1)."""

    @abstractmethod
    def insert_if_absent(self, app: AppDescriptor, review: ReviewRecord) -> bool:
        """Persist the review unless its identity is already stored.

        Returns True when this call decided the review is new.
        """

    @abstractmethod
    def get(self, review_id: str, platform: Platform) -> StoredReview | None:
        """Return the stored row for a review identity, if any."""
