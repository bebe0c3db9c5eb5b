"""FeedProvider protocol: common interface for non-RSS sources served as feeds."""

import logging
from enum import Enum
from typing import Protocol, runtime_checkable
from urllib.parse import SplitResult

from socialfeed.schemas.items import ParsedItem

logger = logging.getLogger(__name__)


class FeedProviderAbility(str, Enum):
    NONE = "none"  # URL is not handled by this provider
    AVAILABLE = "available"  # handled, but belongs to someone else
    OWNER = "owner"  # handled and belongs to the provider's own account


@runtime_checkable
class FeedProvider(Protocol):
    """Protocol for feed providers (Twitter, ...)."""

    def ability(self, url: str | SplitResult, username: str | None = None) -> FeedProviderAbility:
        """Report whether this provider can serve the URL. Never touches the network."""
        ...

    async def icon_url(self, url: str | SplitResult) -> str:
        """Resolve an icon for the feed URL."""
        ...

    async def assign_name(self, url: str | SplitResult) -> str:
        """Resolve a human-readable feed name for the URL."""
        ...

    async def refresh(self, feed_url: str) -> set[ParsedItem]:
        """Fetch current entries for the feed and return them normalized."""
        ...


class FeedProviderRegistry:
    """The host's set of providers, queried by capability."""

    def __init__(self, providers: list[FeedProvider] | None = None):
        self._providers: list[FeedProvider] = list(providers or [])

    @property
    def providers(self) -> list[FeedProvider]:
        return list(self._providers)

    def add(self, provider: FeedProvider) -> None:
        if provider not in self._providers:
            self._providers.append(provider)

    def remove(self, provider: FeedProvider) -> None:
        if provider in self._providers:
            self._providers.remove(provider)

    def best_provider(self, url: str | SplitResult, username: str | None = None) -> FeedProvider | None:
        """Pick the owner of the URL if there is one, else the first provider that can serve it."""
        available: FeedProvider | None = None
        for provider in self._providers:
            ability = provider.ability(url, username)
            if ability is FeedProviderAbility.OWNER:
                return provider
            if ability is FeedProviderAbility.AVAILABLE and available is None:
                available = provider

        if available is None:
            logger.debug("No feed provider for %s", url)
        return available
