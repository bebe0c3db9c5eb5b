"""Shared utility functions for socialfeed."""

import logging
from datetime import datetime, UTC
from urllib.parse import SplitResult, urlsplit

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def split_url(url: str | SplitResult) -> SplitResult:
    """Return URL components, accepting an already-split URL unchanged."""
    if isinstance(url, SplitResult):
        return url
    return urlsplit(url)


def host_matches(host: str | None, domains: tuple[str, ...]) -> bool:
    """
    Check whether a host is one of the domains or a subdomain of one.

    Args:
        host: Hostname from a parsed URL, possibly None.
        domains: Registrable domains such as ("twitter.com",).

    Returns:
        True if the host belongs to any of the domains.
    """
    if not host:
        return False
    host = host.lower().rstrip(".")
    return any(host == domain or host.endswith("." + domain) for domain in domains)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # httpx logs every request at INFO, which drowns out provider logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
