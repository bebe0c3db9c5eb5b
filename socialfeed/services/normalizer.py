"""Status rendering and normalization into ParsedItem."""

import html
import logging
from collections.abc import Iterable
from urllib.parse import quote

import nh3

from socialfeed.constants import ALLOWED_HTML_ATTRIBUTES, ALLOWED_HTML_TAGS, TWITTER_WEB_BASE
from socialfeed.schemas.items import ParsedAuthor, ParsedItem
from socialfeed.schemas.twitter import (
    TwitterHashtag,
    TwitterMedia,
    TwitterMention,
    TwitterStatus,
    TwitterURL,
    TwitterUser,
)

logger = logging.getLogger(__name__)

Entity = TwitterHashtag | TwitterMention | TwitterURL | TwitterMedia


def _display_bounds(status: TwitterStatus, body: str) -> tuple[int, int]:
    if status.display_text_range and len(status.display_text_range) == 2:
        start, end = status.display_text_range
        return max(start, 0), min(end, len(body))
    return 0, len(body)


def _entity_spans(status: TwitterStatus, body: str) -> list[tuple[int, int, Entity]]:
    """Entities of the status body ordered by position."""
    entities = status.entities
    candidates: list[Entity] = [
        *entities.hashtags,
        *entities.user_mentions,
        *entities.urls,
        *status.media,
    ]

    spans: list[tuple[int, int, Entity]] = []
    seen: set[tuple[int, int]] = set()
    for entity in candidates:
        if len(entity.indices) != 2:
            continue
        lo, hi = entity.indices
        # All photos of one tweet share a single t.co link
        if (lo, hi) in seen or lo < 0 or hi > len(body) or lo >= hi:
            continue
        seen.add((lo, hi))
        spans.append((lo, hi, entity))

    spans.sort(key=lambda span: span[0])
    return spans


def _walk(status: TwitterStatus, render_text, render_entity) -> str:
    """Render the displayable part of a body, replacing each entity span."""
    # Offsets count characters of the unescaped text, the body arrives with &amp; &lt; &gt;
    body = html.unescape(status.body)
    start, end = _display_bounds(status, body)
    parts: list[str] = []
    cursor = start
    for lo, hi, entity in _entity_spans(status, body):
        if lo < cursor:
            continue
        if lo >= end:
            break
        parts.append(render_text(body[cursor:lo]))
        parts.append(render_entity(entity, body[lo:hi]))
        cursor = hi
    if cursor < end:
        parts.append(render_text(body[cursor:end]))
    return "".join(parts).strip()


# --- HTML ---


def _text_html(segment: str) -> str:
    return html.escape(segment, quote=False).replace("\n", "<br>")


def _entity_html(entity: Entity, original: str) -> str:
    if isinstance(entity, TwitterMention):
        href = f"{TWITTER_WEB_BASE}/{entity.screen_name}"
        return f'<a href="{html.escape(href)}">{html.escape(original)}</a>'
    if isinstance(entity, TwitterHashtag):
        href = f"{TWITTER_WEB_BASE}/search?q={quote('#' + entity.text)}"
        return f'<a href="{html.escape(href)}">{html.escape(original)}</a>'
    if isinstance(entity, TwitterMedia):
        return ""
    href = entity.expanded_url or entity.url
    label = entity.display_url or entity.url
    return f'<a href="{html.escape(href)}">{html.escape(label)}</a>'


def _media_html(media: Iterable[TwitterMedia]) -> str:
    images = []
    for item in media:
        if not item.media_url_https:
            continue
        img = f'<img src="{html.escape(item.media_url_https)}" alt="">'
        if item.type != "photo" and item.expanded_url:
            img = f'<a href="{html.escape(item.expanded_url)}">{img}</a>'
        images.append(f"<p>{img}</p>")
    return "".join(images)


def _user_link_html(user: TwitterUser | None) -> str:
    if not user or not user.screen_name:
        return ""
    href = html.escape(user.profile_url or "")
    return f'<a href="{href}">@{html.escape(user.screen_name)}</a>'


def _status_html(status: TwitterStatus) -> str:
    if status.retweeted_status:
        retweeted = status.retweeted_status
        return f"<p>RT {_user_link_html(retweeted.user)}:</p>{_status_html(retweeted)}"

    parts = [f"<p>{_walk(status, _text_html, _entity_html)}</p>", _media_html(status.media)]
    if status.quoted_status:
        quoted = status.quoted_status
        author = _user_link_html(quoted.user)
        header = f"<p>{author}</p>" if author else ""
        parts.append(f"<blockquote>{header}{_status_html(quoted)}</blockquote>")
    return "".join(parts)


def render_as_html(status: TwitterStatus) -> str:
    """Render a status body as sanitized HTML with links, mentions and media expanded."""
    raw_html = _status_html(status)
    return nh3.clean(raw_html, tags=ALLOWED_HTML_TAGS, attributes=ALLOWED_HTML_ATTRIBUTES)


# --- Plain text ---


def _entity_text(entity: Entity, original: str) -> str:
    if isinstance(entity, TwitterMedia):
        return ""
    if isinstance(entity, TwitterURL):
        return entity.expanded_url or entity.url
    return original


def render_as_text(status: TwitterStatus) -> str:
    """Render a status body as plain text, with t.co links replaced by their targets."""
    if status.retweeted_status:
        retweeted = status.retweeted_status
        screen_name = retweeted.user.screen_name if retweeted.user else None
        prefix = f"RT @{screen_name}: " if screen_name else "RT: "
        return prefix + render_as_text(retweeted)

    text = _walk(status, str, _entity_text)
    if status.quoted_status:
        quoted = status.quoted_status
        screen_name = quoted.user.screen_name if quoted.user else None
        quoted_text = render_as_text(quoted)
        attribution = f"@{screen_name}: " if screen_name else ""
        text = f"{text}\n\n> {attribution}{quoted_text}"
    return text


# --- Items ---


def make_parsed_authors(user: TwitterUser | None) -> frozenset[ParsedAuthor] | None:
    if user is None:
        return None
    return frozenset([ParsedAuthor(name=user.name, url=user.profile_url, avatar_url=user.avatar_url)])


def make_parsed_items(feed_url: str, statuses: Iterable[TwitterStatus]) -> set[ParsedItem]:
    """
    Normalize statuses into ParsedItems for a feed.

    Statuses without an id or a canonical URL are dropped. The result is a
    set, so repeated statuses collapse into one item.

    Args:
        feed_url: URL of the feed the items belong to.
        statuses: Decoded statuses from a timeline or search response.

    Returns:
        Set of ParsedItem keyed by (feed_url, unique_id).
    """
    parsed_items: set[ParsedItem] = set()
    skipped = 0

    for status in statuses:
        id_str = status.id_str
        status_url = status.status_url
        if not id_str or not status_url:
            skipped += 1
            continue

        parsed_items.add(
            ParsedItem(
                sync_service_id=id_str,
                unique_id=id_str,
                feed_url=feed_url,
                url=status_url,
                content_html=render_as_html(status),
                content_text=render_as_text(status),
                date_published=status.created_at,
                authors=make_parsed_authors(status.user),
            )
        )

    if skipped:
        logger.debug("Skipped %d statuses without id or url for %s", skipped, feed_url)
    return parsed_items
