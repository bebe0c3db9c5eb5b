"""Provider-agnostic items handed to the feed-reader host."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ParsedAuthor:
    name: str | None = None
    url: str | None = None
    avatar_url: str | None = None
    email_address: str | None = None


@dataclass(frozen=True)
class ParsedItem:
    """A normalized feed item.

    Equality and hashing only look at (feed_url, unique_id) so a set of
    items never holds the same entry twice.
    """

    unique_id: str
    feed_url: str
    url: str = field(compare=False)
    sync_service_id: str | None = field(default=None, compare=False)
    external_url: str | None = field(default=None, compare=False)
    title: str | None = field(default=None, compare=False)
    content_html: str | None = field(default=None, compare=False)
    content_text: str | None = field(default=None, compare=False)
    summary: str | None = field(default=None, compare=False)
    image_url: str | None = field(default=None, compare=False)
    date_published: datetime | None = field(default=None, compare=False)
    date_modified: datetime | None = field(default=None, compare=False)
    authors: frozenset[ParsedAuthor] | None = field(default=None, compare=False)
