"""Wire schemas and normalized item types."""

from .items import ParsedAuthor, ParsedItem
from .twitter import TwitterSearchResponse, TwitterStatus, TwitterUser

__all__ = [
    "ParsedAuthor",
    "ParsedItem",
    "TwitterSearchResponse",
    "TwitterStatus",
    "TwitterUser",
]
