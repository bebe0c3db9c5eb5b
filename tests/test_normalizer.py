"""Tests for status decoding, rendering and normalization."""

from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from conftest import TWITTER_DATE, make_status, make_user, span
from socialfeed.schemas.items import ParsedAuthor, ParsedItem
from socialfeed.schemas.twitter import TwitterStatus, TwitterUser
from socialfeed.services.normalizer import make_parsed_authors, make_parsed_items, render_as_html, render_as_text

STATUSES = TypeAdapter(list[TwitterStatus])
FEED_URL = "https://twitter.com/home"


def _status(**kwargs) -> TwitterStatus:
    return TwitterStatus.model_validate(make_status(**kwargs))


@pytest.fixture
def rich_status() -> TwitterStatus:
    """Status with a link, hashtag, mention and a trailing photo link."""
    text = "Read this https://t.co/abc #python @carol https://t.co/pic"
    return _status(
        full_text=text,
        display_text_range=[0, text.index("https://t.co/pic")],
        entities={
            "hashtags": [{"text": "python", "indices": span(text, "#python")}],
            "user_mentions": [{"screen_name": "carol", "name": "Carol", "indices": span(text, "@carol")}],
            "urls": [
                {
                    "url": "https://t.co/abc",
                    "expanded_url": "https://example.com/article",
                    "display_url": "example.com/article",
                    "indices": span(text, "https://t.co/abc"),
                }
            ],
            "media": [
                {
                    "url": "https://t.co/pic",
                    "media_url_https": "https://pbs.twimg.com/media/x.jpg",
                    "type": "photo",
                    "indices": span(text, "https://t.co/pic"),
                }
            ],
        },
    )


class TestDecoding:
    def test_created_at_uses_twitter_format(self):
        status = _status(created_at=TWITTER_DATE)
        assert status.created_at == datetime(2018, 10, 10, 20, 19, 24, tzinfo=timezone.utc)

    def test_malformed_timestamp_fails_whole_response(self):
        raw = [make_status(id_str="1"), make_status(id_str="2", created_at="2018-10-10T20:19:24Z")]
        with pytest.raises(ValidationError):
            STATUSES.validate_python(raw)

    def test_numeric_id_is_accepted(self):
        status = TwitterStatus.model_validate({"id": 1050118621198921728, "url": "u"})
        assert status.id_str == "1050118621198921728"

    def test_id_str_preferred_over_id(self):
        status = TwitterStatus.model_validate({"id": 1, "id_str": "2"})
        assert status.id_str == "2"

    def test_status_url_derived_from_author(self):
        assert _status(id_str="99", screen_name="bob").status_url == "https://twitter.com/bob/status/99"

    def test_explicit_url_wins(self):
        assert _status(url="https://example.com/s/1").status_url == "https://example.com/s/1"

    def test_no_url_without_author(self):
        status = TwitterStatus.model_validate({"id_str": "1"})
        assert status.status_url is None

    def test_user_urls(self):
        user = TwitterUser.model_validate(make_user("bob"))
        assert user.profile_url == "https://twitter.com/bob"
        assert user.avatar_url == "https://pbs.twimg.com/profile_images/bob_normal.jpg"


class TestRenderText:
    def test_entities_expanded(self, rich_status):
        assert render_as_text(rich_status) == "Read this https://example.com/article #python @carol"

    def test_html_entities_unescaped(self):
        assert render_as_text(_status(full_text="Fish &amp; chips &lt;3")) == "Fish & chips <3"

    def test_offsets_count_unescaped_characters(self):
        status = _status(
            full_text="Fish &amp; chips @carol",
            display_text_range=[0, 19],
            entities={"user_mentions": [{"screen_name": "carol", "indices": [13, 19]}]},
        )
        assert render_as_text(status) == "Fish & chips @carol"

    def test_display_range_keeps_tail_after_entities(self):
        text = "a &lt; b &gt; c https://t.co/x"
        status = _status(
            full_text=text,
            display_text_range=[0, 24],
            entities={
                "urls": [
                    {"url": "https://t.co/x", "expanded_url": "https://example.com/x", "indices": [10, 24]}
                ]
            },
        )
        assert render_as_text(status) == "a < b > c https://example.com/x"

    def test_retweet(self):
        status = _status(full_text="RT @carol: orig…", retweeted_status=make_status(full_text="original", screen_name="carol"))
        assert render_as_text(status) == "RT @carol: original"

    def test_quote(self):
        status = _status(full_text="so true", quoted_status=make_status(full_text="quoted text", screen_name="dave"))
        assert render_as_text(status) == "so true\n\n> @dave: quoted text"

    def test_falls_back_to_text_field(self):
        status = TwitterStatus.model_validate({"id_str": "1", "text": "short form"})
        assert render_as_text(status) == "short form"


class TestRenderHTML:
    def test_entities_become_links(self, rich_status):
        html = render_as_html(rich_status)
        assert 'href="https://example.com/article"' in html
        assert "example.com/article</a>" in html
        assert 'href="https://twitter.com/carol"' in html
        assert "@carol</a>" in html
        assert "%23python" in html
        assert "https://t.co/pic" not in html

    def test_media_rendered_as_image(self, rich_status):
        assert 'src="https://pbs.twimg.com/media/x.jpg"' in render_as_html(rich_status)

    def test_text_is_escaped(self):
        html = render_as_html(_status(full_text="a &lt;script&gt;alert(1)&lt;/script&gt; b"))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_mention_after_escaped_ampersand(self):
        status = _status(
            full_text="Fish &amp; chips @carol",
            display_text_range=[0, 19],
            entities={"user_mentions": [{"screen_name": "carol", "indices": [13, 19]}]},
        )
        html = render_as_html(status)
        assert "Fish &amp; chips " in html
        assert "@carol</a>" in html
        assert "&amp;amp;" not in html

    def test_newlines_become_breaks(self):
        assert "line one<br>line two" in render_as_html(_status(full_text="line one\nline two"))

    def test_quote_in_blockquote(self):
        status = _status(full_text="so true", quoted_status=make_status(full_text="quoted text", screen_name="dave"))
        html = render_as_html(status)
        assert "<blockquote>" in html
        assert "quoted text" in html


class TestMakeParsedItems:
    def test_end_to_end_scenario(self):
        statuses = STATUSES.validate_python(
            [
                {"id": "1", "url": "u1", "created_at": TWITTER_DATE},
                {"id": "2", "url": "u2"},
                {"url": "u3"},
            ]
        )
        items = make_parsed_items(FEED_URL, statuses)
        assert {item.unique_id for item in items} == {"1", "2"}
        assert {item.url for item in items} == {"u1", "u2"}

    def test_drops_entries_without_url(self):
        statuses = STATUSES.validate_python([{"id_str": "1"}, make_status(id_str="2")])
        items = make_parsed_items(FEED_URL, statuses)
        assert [item.unique_id for item in items] == ["2"]

    def test_duplicates_collapse(self):
        statuses = STATUSES.validate_python(
            [make_status(id_str="7"), make_status(id_str="7", full_text="edited"), make_status(id_str="8")]
        )
        items = make_parsed_items(FEED_URL, statuses)
        assert len(items) == 2
        assert len(items) <= len(statuses)

    def test_item_fields(self):
        items = make_parsed_items(FEED_URL, STATUSES.validate_python([make_status(id_str="5", full_text="hi")]))
        (item,) = items
        assert item.sync_service_id == item.unique_id == "5"
        assert item.feed_url == FEED_URL
        assert item.url == "https://twitter.com/bob/status/5"
        assert item.content_text == "hi"
        assert "hi" in item.content_html
        assert item.date_published == datetime(2018, 10, 10, 20, 19, 24, tzinfo=timezone.utc)
        assert item.authors == frozenset(
            [
                ParsedAuthor(
                    name="Bob Builder",
                    url="https://twitter.com/bob",
                    avatar_url="https://pbs.twimg.com/profile_images/bob_normal.jpg",
                )
            ]
        )

    def test_author_omitted_without_user(self):
        statuses = STATUSES.validate_python([{"id_str": "1", "url": "u1", "full_text": "x"}])
        (item,) = make_parsed_items(FEED_URL, statuses)
        assert item.authors is None

    def test_make_parsed_authors_none(self):
        assert make_parsed_authors(None) is None


class TestParsedItemIdentity:
    def test_identity_ignores_content(self):
        a = ParsedItem(unique_id="1", feed_url=FEED_URL, url="u", content_text="a")
        b = ParsedItem(unique_id="1", feed_url=FEED_URL, url="u", content_text="b")
        assert a == b
        assert len({a, b}) == 1

    def test_identity_scoped_to_feed(self):
        a = ParsedItem(unique_id="1", feed_url="https://twitter.com/home", url="u")
        b = ParsedItem(unique_id="1", feed_url="https://twitter.com/bob", url="u")
        assert a != b
