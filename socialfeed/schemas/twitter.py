"""Pydantic schemas for Twitter API v1.1 user and status records.

Field names and the created_at format are the API's wire contract; keep them as-is.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from socialfeed.constants import TWITTER_DATE_FORMAT, TWITTER_WEB_BASE


class TwitterUser(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id_str: str | None = Field(default=None, validation_alias=AliasChoices("id_str", "id"))
    name: str | None = None
    screen_name: str | None = None
    url: str | None = None  # user-supplied website, not the profile page
    profile_image_url_https: str | None = None
    profile_image_url: str | None = None

    @property
    def avatar_url(self) -> str | None:
        return self.profile_image_url_https or self.profile_image_url

    @property
    def profile_url(self) -> str | None:
        if not self.screen_name:
            return None
        return f"{TWITTER_WEB_BASE}/{self.screen_name}"


class TwitterHashtag(BaseModel):
    text: str
    indices: list[int]


class TwitterMention(BaseModel):
    screen_name: str
    name: str | None = None
    indices: list[int]


class TwitterURL(BaseModel):
    url: str
    expanded_url: str | None = None
    display_url: str | None = None
    indices: list[int]


class TwitterMedia(BaseModel):
    url: str
    media_url_https: str | None = None
    expanded_url: str | None = None
    display_url: str | None = None
    type: str = "photo"
    indices: list[int]


class TwitterEntities(BaseModel):
    hashtags: list[TwitterHashtag] = []
    user_mentions: list[TwitterMention] = []
    urls: list[TwitterURL] = []
    media: list[TwitterMedia] = []


class TwitterStatus(BaseModel):
    """A timeline entry as returned with tweet_mode=extended."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id_str: str | None = Field(default=None, validation_alias=AliasChoices("id_str", "id"))
    url: str | None = None
    created_at: datetime | None = None
    user: TwitterUser | None = None
    full_text: str | None = None
    text: str | None = None
    display_text_range: list[int] | None = None
    entities: TwitterEntities = Field(default_factory=TwitterEntities)
    extended_entities: TwitterEntities | None = None
    retweeted_status: "TwitterStatus | None" = None
    quoted_status: "TwitterStatus | None" = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, v):
        # A bad date raises here and fails validation of the whole response
        if isinstance(v, str):
            return datetime.strptime(v, TWITTER_DATE_FORMAT)
        return v

    @property
    def body(self) -> str:
        return self.full_text or self.text or ""

    @property
    def status_url(self) -> str | None:
        """Canonical web URL, derived from the author and id when the record has none."""
        if self.url:
            return self.url
        if self.id_str and self.user and self.user.screen_name:
            return f"{TWITTER_WEB_BASE}/{self.user.screen_name}/status/{self.id_str}"
        return None

    @property
    def media(self) -> list[TwitterMedia]:
        if self.extended_entities and self.extended_entities.media:
            return self.extended_entities.media
        return self.entities.media


class TwitterSearchResponse(BaseModel):
    statuses: list[TwitterStatus] = []
