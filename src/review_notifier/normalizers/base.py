from __future__ import annotations

from abc import ABC, abstractmethod

from review_notifier.models import AppDescriptor, Platform, ReviewRecord


class ParseError(ValueError):
    """Raised when a payload does not have the shape a normalizer expects."""


class Normalizer(ABC):
    platform: Platform

    @abstractmethod
    def normalize(self, payload: bytes, app: AppDescriptor) -> list[ReviewRecord]:
        """Parse a raw payload into reviews, most recent first."""
