from __future__ import annotations

from typing import Callable

from review_notifier.models import Platform

from .base import Normalizer

NormalizerFactory = Callable[[], Normalizer]

_REGISTRY: dict[Platform, NormalizerFactory] = {}


class NormalizerRegistrationError(ValueError):
    """Raised when no normalizer is registered for a platform."""


def register_normalizer(platform: Platform) -> Callable[[NormalizerFactory], NormalizerFactory]:
    def decorator(factory: NormalizerFactory) -> NormalizerFactory:
        _REGISTRY[platform] = factory
        return factory

    return decorator


def normalizer_for(platform: Platform) -> Normalizer:
    factory = _REGISTRY.get(platform)
    if factory is None:
        available = ", ".join(sorted(item.value for item in _REGISTRY)) or "none"
        raise NormalizerRegistrationError(
            f"No normalizer for platform '{platform}'. Registered platforms: {available}"
        )
    return factory()


def registered_platforms() -> list[Platform]:
    return sorted(_REGISTRY, key=lambda item: item.value)
