"""SocialFeed - serve social platform timelines as ordinary web feeds."""

__version__ = "0.1.0"
