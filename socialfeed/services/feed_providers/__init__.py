"""Feed providers and the registry hosts use to pick one for a URL."""

from .base import FeedProvider, FeedProviderAbility, FeedProviderRegistry
from .twitter import (
    LinkResult,
    ScreenNameNotFoundError,
    TwitterFeedProvider,
    TwitterFeedProviderError,
    UnknownResourceError,
)

__all__ = [
    "FeedProvider",
    "FeedProviderAbility",
    "FeedProviderRegistry",
    "LinkResult",
    "ScreenNameNotFoundError",
    "TwitterFeedProvider",
    "TwitterFeedProviderError",
    "UnknownResourceError",
]
