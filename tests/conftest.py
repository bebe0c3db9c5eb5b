"""Shared pytest fixtures for socialfeed tests."""

from typing import Any

import pytest

from socialfeed import http_client
from socialfeed.config import OAuthSecrets
from socialfeed.services.credentials import MemoryCredentialsStore
from socialfeed.services.feed_providers.twitter import TwitterFeedProvider

TWITTER_DATE = "Wed Oct 10 20:19:24 +0000 2018"


@pytest.fixture(autouse=True)
def reset_http_client():
    """Each test gets a fresh shared client bound to its own event loop."""
    http_client._client = None
    yield
    http_client._client = None


@pytest.fixture
def oauth_secrets() -> OAuthSecrets:
    return OAuthSecrets(consumer_key="consumer-key", consumer_secret="consumer-secret")


@pytest.fixture
def memory_store() -> MemoryCredentialsStore:
    return MemoryCredentialsStore()


@pytest.fixture
def provider(oauth_secrets, memory_store) -> TwitterFeedProvider:
    """Provider linked to @alice."""
    return TwitterFeedProvider(
        screen_name="alice",
        oauth_token="t1",
        oauth_token_secret="s1",
        oauth_secrets=oauth_secrets,
        store=memory_store,
    )


def make_user(screen_name: str = "bob", name: str | None = "Bob Builder", **extra: Any) -> dict[str, Any]:
    user = {
        "id": 42,
        "id_str": "42",
        "screen_name": screen_name,
        "name": name,
        "profile_image_url_https": f"https://pbs.twimg.com/profile_images/{screen_name}_normal.jpg",
    }
    user.update(extra)
    return user


def make_status(
    id_str: str | None = "1",
    full_text: str = "hello world",
    screen_name: str = "bob",
    created_at: str | None = TWITTER_DATE,
    **extra: Any,
) -> dict[str, Any]:
    status: dict[str, Any] = {
        "full_text": full_text,
        "user": make_user(screen_name),
        "entities": {"hashtags": [], "user_mentions": [], "urls": []},
    }
    if id_str is not None:
        status["id_str"] = id_str
    if created_at is not None:
        status["created_at"] = created_at
    status.update(extra)
    return status


def span(text: str, fragment: str) -> list[int]:
    """Twitter-style [start, end) indices of fragment within text."""
    start = text.index(fragment)
    return [start, start + len(fragment)]
