"""Twitter feed provider: serves timelines, mentions, searches and user pages as feeds."""

import logging
from dataclasses import dataclass
from gettext import gettext as _
from urllib.parse import SplitResult

from pydantic import TypeAdapter

from socialfeed.config import OAuthSecrets
from socialfeed.constants import (
    HOME_PATHS,
    HOME_TIMELINE_API,
    MENTIONS_PATH,
    MENTIONS_TIMELINE_API,
    SEARCH_API,
    SEARCH_PATH,
    TWEET_MODE,
    TWITTER_API_BASE,
    TWITTER_SERVER,
    USER_TIMELINE_API,
    USERS_SHOW_API,
)
from socialfeed.schemas.items import ParsedItem
from socialfeed.schemas.twitter import TwitterSearchResponse, TwitterStatus, TwitterUser
from socialfeed.services.credentials import (
    Credentials,
    CredentialsError,
    CredentialsNotFoundError,
    CredentialsStore,
    CredentialsType,
)
from socialfeed.services.feed_providers.base import FeedProviderAbility
from socialfeed.services.feed_providers.resources import (
    ResourceKind,
    TwitterResource,
    derive_screen_name,
    is_reserved_path,
    is_twitter_url,
    normalize_path,
    resolve_resource,
    search_query,
)
from socialfeed.services.normalizer import make_parsed_items
from socialfeed.services.twitter_oauth import OAuth1Client, TokenSuccess
from socialfeed.utils import split_url

logger = logging.getLogger(__name__)

_STATUS_LIST = TypeAdapter(list[TwitterStatus])


class TwitterFeedProviderError(Exception):
    """Base class for errors raised by the Twitter provider itself."""


class ScreenNameNotFoundError(TwitterFeedProviderError):
    """The URL did not lead to a Twitter account with a name or avatar."""


class UnknownResourceError(TwitterFeedProviderError):
    """The URL does not name anything the provider can resolve."""


@dataclass
class LinkResult:
    """A freshly linked provider and whether its credentials were saved.

    When `persisted` is False the provider works for this session but the
    account has to be linked again after a restart.
    """

    provider: "TwitterFeedProvider"
    persisted: bool
    error: CredentialsError | None = None


class TwitterFeedProvider:
    """Feed provider bound to one linked Twitter account."""

    def __init__(
        self,
        screen_name: str,
        oauth_token: str,
        oauth_token_secret: str,
        oauth_secrets: OAuthSecrets,
        store: CredentialsStore | None = None,
    ):
        self.screen_name = screen_name
        self._oauth_token = oauth_token
        self._oauth_token_secret = oauth_token_secret
        self._store = store
        self._client = OAuth1Client(
            consumer_key=oauth_secrets.consumer_key,
            consumer_secret=oauth_secrets.consumer_secret,
            oauth_token=oauth_token,
            oauth_token_secret=oauth_token_secret,
        )

    def __repr__(self) -> str:
        return f"TwitterFeedProvider(screen_name={self.screen_name!r})"

    # --- Credential lifecycle ---

    @classmethod
    async def link(
        cls,
        token_success: TokenSuccess,
        store: CredentialsStore,
        oauth_secrets: OAuthSecrets,
    ) -> LinkResult | None:
        """Build a provider from a completed OAuth handshake and save its token pair.

        Returns None when the handshake carries no screen_name.
        """
        screen_name = token_success.parameters.get("screen_name")
        if not screen_name:
            return None

        provider = cls(
            screen_name=screen_name,
            oauth_token=token_success.oauth_token,
            oauth_token_secret=token_success.oauth_token_secret,
            oauth_secrets=oauth_secrets,
            store=store,
        )

        try:
            await store.store_credentials(
                Credentials(CredentialsType.OAUTH_ACCESS_TOKEN, screen_name, token_success.oauth_token),
                TWITTER_SERVER,
            )
            await store.store_credentials(
                Credentials(CredentialsType.OAUTH_ACCESS_TOKEN_SECRET, screen_name, token_success.oauth_token_secret),
                TWITTER_SERVER,
            )
        except CredentialsError as e:
            logger.warning("Could not save credentials for @%s: %s", screen_name, e)
            return LinkResult(provider=provider, persisted=False, error=e)

        logger.info("Linked Twitter account @%s", screen_name)
        return LinkResult(provider=provider, persisted=True)

    @classmethod
    async def rehydrate(
        cls,
        screen_name: str,
        store: CredentialsStore,
        oauth_secrets: OAuthSecrets,
    ) -> "TwitterFeedProvider | None":
        """Rebuild a provider from stored credentials. Returns None unless both halves are present."""
        try:
            token = await store.retrieve_credentials(
                CredentialsType.OAUTH_ACCESS_TOKEN, TWITTER_SERVER, screen_name
            )
            token_secret = await store.retrieve_credentials(
                CredentialsType.OAUTH_ACCESS_TOKEN_SECRET, TWITTER_SERVER, screen_name
            )
        except CredentialsNotFoundError:
            return None
        except CredentialsError as e:
            logger.warning("Could not load credentials for @%s: %s", screen_name, e)
            return None

        return cls(
            screen_name=screen_name,
            oauth_token=token.secret,
            oauth_token_secret=token_secret.secret,
            oauth_secrets=oauth_secrets,
            store=store,
        )

    async def unlink(self) -> None:
        """Forget the stored token pair for this account."""
        if self._store is None:
            return
        for credentials_type in (CredentialsType.OAUTH_ACCESS_TOKEN, CredentialsType.OAUTH_ACCESS_TOKEN_SECRET):
            await self._store.remove_credentials(credentials_type, TWITTER_SERVER, self.screen_name)
        logger.info("Unlinked Twitter account @%s", self.screen_name)

    # --- FeedProvider ---

    def ability(self, url: str | SplitResult, username: str | None = None) -> FeedProviderAbility:
        parts = split_url(url)
        if not is_twitter_url(parts):
            return FeedProviderAbility.NONE

        if is_reserved_path(parts.path):
            return FeedProviderAbility.AVAILABLE

        best_username = username if username is not None else derive_screen_name(parts, self.screen_name)
        if best_username == self.screen_name:
            return FeedProviderAbility.OWNER

        return FeedProviderAbility.AVAILABLE

    async def icon_url(self, url: str | SplitResult) -> str:
        screen_name = derive_screen_name(url, self.screen_name)
        if screen_name is None:
            raise ScreenNameNotFoundError(f"No Twitter account in {split_url(url).geturl()}")

        user = await self._retrieve_user(screen_name)
        if not user.avatar_url:
            raise ScreenNameNotFoundError(f"@{screen_name} has no avatar")
        return user.avatar_url

    async def assign_name(self, url: str | SplitResult) -> str:
        parts = split_url(url)
        path = normalize_path(parts.path)

        if path in HOME_PATHS:
            return _("Twitter Timeline")

        if path == MENTIONS_PATH:
            return _("Twitter Mentions")

        if path == SEARCH_PATH:
            query = search_query(parts)
            if query is not None:
                return _("Twitter Search: {query}").format(query=query)
            return _("Twitter Search")

        screen_name = derive_screen_name(parts, self.screen_name)
        if screen_name is None:
            raise UnknownResourceError(f"Cannot name {parts.geturl()}")

        user = await self._retrieve_user(screen_name)
        if not user.name:
            raise ScreenNameNotFoundError(f"@{screen_name} has no display name")
        return user.name

    async def refresh(self, feed_url: str) -> set[ParsedItem]:
        if not is_twitter_url(feed_url):
            raise UnknownResourceError(f"Not a Twitter URL: {feed_url}")
        resource = resolve_resource(feed_url)
        statuses = await self._retrieve_statuses(resource)
        parsed_items = make_parsed_items(feed_url, statuses)
        logger.info("Refreshed %s: %d statuses, %d items", feed_url, len(statuses), len(parsed_items))
        return parsed_items

    # --- API ---

    async def _retrieve_user(self, screen_name: str) -> TwitterUser:
        resp = await self._client.get(f"{TWITTER_API_BASE}{USERS_SHOW_API}", {"screen_name": screen_name})
        return TwitterUser.model_validate_json(resp.content)

    async def _retrieve_statuses(self, resource: TwitterResource) -> list[TwitterStatus]:
        params = {"tweet_mode": TWEET_MODE}

        if resource.kind is ResourceKind.HOME:
            api = HOME_TIMELINE_API
        elif resource.kind is ResourceKind.MENTIONS:
            api = MENTIONS_TIMELINE_API
        elif resource.kind is ResourceKind.USER:
            api = USER_TIMELINE_API
            params["screen_name"] = resource.screen_name
        elif resource.kind is ResourceKind.SEARCH and resource.query:
            resp = await self._client.get(f"{TWITTER_API_BASE}{SEARCH_API}", {**params, "q": resource.query})
            return TwitterSearchResponse.model_validate_json(resp.content).statuses
        else:
            logger.debug("No endpoint for %s resource, using the home timeline", resource.kind.value)
            api = HOME_TIMELINE_API

        resp = await self._client.get(f"{TWITTER_API_BASE}{api}", params)
        return _STATUS_LIST.validate_json(resp.content)
