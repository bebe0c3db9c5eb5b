"""Map twitter.com URLs onto the resources a feed can point at.

Screen names taken from a path are not checked against the API here; a bad
one only surfaces when the user record is fetched.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import SplitResult, parse_qs

from socialfeed.constants import MENTIONS_PATH, RESERVED_PATHS, SEARCH_PATH, TWITTER_DOMAINS, USER_PATHS
from socialfeed.utils import host_matches, split_url


class ResourceKind(str, Enum):
    HOME = "home"
    MENTIONS = "mentions"
    SEARCH = "search"
    USER = "user"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TwitterResource:
    kind: ResourceKind
    screen_name: str | None = None
    query: str | None = None


def normalize_path(path: str) -> str:
    """Drop trailing slashes, keeping the root path as "/"."""
    if path in ("", "/"):
        return path
    return path.rstrip("/") or "/"


def is_twitter_url(url: str | SplitResult) -> bool:
    return host_matches(split_url(url).hostname, TWITTER_DOMAINS)


def is_reserved_path(path: str) -> bool:
    path = normalize_path(path)
    return any(path == reserved or path.startswith(reserved + "/") for reserved in RESERVED_PATHS)


def search_query(url: str | SplitResult) -> str | None:
    values = parse_qs(split_url(url).query).get("q")
    return values[0] if values else None


def derive_screen_name(url: str | SplitResult, own_screen_name: str) -> str | None:
    """
    Work out which account a URL refers to.

    Args:
        url: A twitter.com URL or its split components.
        own_screen_name: Screen name of the linked account.

    Returns:
        The linked account for home-timeline and mentions paths, None for
        reserved paths, otherwise the first path segment exactly as written.
    """
    path = normalize_path(split_url(url).path)
    if is_reserved_path(path):
        return None
    if path in ("", "/", MENTIONS_PATH) or path in USER_PATHS:
        return own_screen_name
    return path[1:].split("/", 1)[0]


def resolve_resource(url: str | SplitResult) -> TwitterResource:
    """Classify a URL into the timeline, search or user resource it names."""
    path = normalize_path(split_url(url).path)
    if path in ("", "/") or path in USER_PATHS:
        return TwitterResource(ResourceKind.HOME)
    if path == MENTIONS_PATH:
        return TwitterResource(ResourceKind.MENTIONS)
    if path == SEARCH_PATH:
        return TwitterResource(ResourceKind.SEARCH, query=search_query(url))
    if is_reserved_path(path):
        return TwitterResource(ResourceKind.UNSUPPORTED)
    return TwitterResource(ResourceKind.USER, screen_name=path[1:].split("/", 1)[0])
