"""Platform normalizers and registry."""

from .android import AndroidReviewsNormalizer
from .base import Normalizer, ParseError
from .ios import IosFeedNormalizer
from .registry import (
    NormalizerRegistrationError,
    normalizer_for,
    register_normalizer,
    registered_platforms,
)

__all__ = [
    "AndroidReviewsNormalizer",
    "IosFeedNormalizer",
    "Normalizer",
    "NormalizerRegistrationError",
    "ParseError",
    "normalizer_for",
    "register_normalizer",
    "registered_platforms",
]
