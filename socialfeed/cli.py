"""CLI for SocialFeed using Typer."""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, AsyncIterator, Optional

import httpx
import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .db.session import create_engine, create_session_factory, init_db
from .http_client import close_http_client
from .services.credentials import CredentialsError, SQLCredentialsStore
from .services.feed_providers import FeedProviderAbility, TwitterFeedProvider, TwitterFeedProviderError
from .services.twitter_oauth import build_authorize_url, exchange_access_token, request_token
from .utils import setup_logging

# Load .env from the working directory only
load_dotenv(Path.cwd() / ".env", override=False)

# CLI styles
STYLE_HEADER = "bold blue"
STYLE_SUCCESS = "bold green"
STYLE_WARNING = "bold yellow"
STYLE_ERROR = "bold red"

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="socialfeed",
    help="SocialFeed - read Twitter timelines, mentions and searches as feeds.",
    add_completion=False,
)
console = Console()

AccountOption = Annotated[str, typer.Option("--account", "-a", help="Screen name of a linked account")]
VerboseOption = Annotated[Optional[bool], typer.Option(help="Verbose output")]


@asynccontextmanager
async def _credentials_store() -> AsyncIterator[SQLCredentialsStore]:
    """Open the credential database for the duration of one command."""
    settings = get_settings()
    engine = create_engine(settings.database_url, echo=settings.debug)
    try:
        await init_db(engine)
        yield SQLCredentialsStore(create_session_factory(engine), settings.fernet_key)
    finally:
        await close_http_client()
        await engine.dispose()


async def _load_provider(store: SQLCredentialsStore, account: str) -> TwitterFeedProvider:
    provider = await TwitterFeedProvider.rehydrate(account, store, get_settings().twitter_secrets)
    if provider is None:
        console.print(f"[{STYLE_ERROR}]No stored credentials for @{account}. Run `socialfeed link` first.[/{STYLE_ERROR}]")
        raise typer.Exit(1)
    return provider


def _run(coro) -> None:
    """Run a command coroutine, turning settings, credential and HTTP errors into a clean exit."""
    try:
        asyncio.run(coro)
    except (TwitterFeedProviderError, CredentialsError, httpx.HTTPError, ValidationError, ValueError) as e:
        console.print(f"[{STYLE_ERROR}]{type(e).__name__}: {escape(str(e))}[/{STYLE_ERROR}]")
        raise typer.Exit(1)


@app.command()
def link(verbose: VerboseOption = None):
    """
    Link a Twitter account with the PIN-based OAuth flow.

    Opens nothing by itself: visit the printed URL, approve the app and
    paste the PIN back here.
    """
    setup_logging(bool(verbose))

    async def _link() -> None:
        settings = get_settings()
        oauth_secrets = settings.twitter_secrets
        if not oauth_secrets.consumer_key or not oauth_secrets.consumer_secret:
            console.print(f"[{STYLE_ERROR}]Set TWITTER_CONSUMER_KEY and TWITTER_CONSUMER_SECRET first.[/{STYLE_ERROR}]")
            raise typer.Exit(1)

        async with _credentials_store() as store:
            temporary = await request_token(oauth_secrets, settings.twitter_callback_url)
            console.print(f"[{STYLE_HEADER}]Authorize SocialFeed at:[/{STYLE_HEADER}]")
            console.print(build_authorize_url(temporary.oauth_token))
            verifier = typer.prompt("PIN")

            token_success = await exchange_access_token(oauth_secrets, temporary, verifier.strip())
            result = await TwitterFeedProvider.link(token_success, store, oauth_secrets)
            if result is None:
                console.print(f"[{STYLE_ERROR}]Twitter did not return a screen name.[/{STYLE_ERROR}]")
                raise typer.Exit(1)

            console.print(f"[{STYLE_SUCCESS}]Linked @{result.provider.screen_name}[/{STYLE_SUCCESS}]")
            if not result.persisted:
                console.print(
                    f"[{STYLE_WARNING}]Credentials could not be saved ({result.error}). "
                    f"You will need to link again next time.[/{STYLE_WARNING}]"
                )

    _run(_link())


@app.command()
def unlink(account: AccountOption, verbose: VerboseOption = None):
    """Remove stored credentials for a linked account."""
    setup_logging(bool(verbose))

    async def _unlink() -> None:
        async with _credentials_store() as store:
            provider = await _load_provider(store, account)
            await provider.unlink()
            console.print(f"[{STYLE_SUCCESS}]Unlinked @{account}[/{STYLE_SUCCESS}]")

    _run(_unlink())


@app.command()
def resolve(
    url: Annotated[str, typer.Argument(help="twitter.com URL to add as a feed")],
    account: AccountOption,
    username: Annotated[Optional[str], typer.Option(help="Screen name hint for ownership checks")] = None,
    verbose: VerboseOption = None,
):
    """Show whether a URL can be a feed, and its name and icon."""
    setup_logging(bool(verbose))

    async def _resolve() -> None:
        async with _credentials_store() as store:
            provider = await _load_provider(store, account)
            ability = provider.ability(url, username)
            console.print(f"Ability: [{STYLE_HEADER}]{ability.value}[/{STYLE_HEADER}]")
            if ability is FeedProviderAbility.NONE:
                return

            name = await provider.assign_name(url)
            console.print(f"Name:    {name}")
            try:
                icon = await provider.icon_url(url)
            except TwitterFeedProviderError as e:
                icon = f"(none: {e})"
            console.print(f"Icon:    {icon}")

    _run(_resolve())


@app.command()
def refresh(
    url: Annotated[str, typer.Argument(help="Feed URL to refresh")],
    account: AccountOption,
    limit: Annotated[int, typer.Option(help="Max items to show")] = 20,
    verbose: VerboseOption = None,
):
    """Fetch a feed and print its normalized items."""
    setup_logging(bool(verbose))

    async def _refresh() -> None:
        async with _credentials_store() as store:
            provider = await _load_provider(store, account)
            items = await provider.refresh(url)

        ordered = sorted(
            items,
            key=lambda item: item.date_published.timestamp() if item.date_published else 0.0,
            reverse=True,
        )
        table = Table(title=f"{url} ({len(items)} items)")
        table.add_column("Published", style="dim")
        table.add_column("Author")
        table.add_column("Text")
        for item in ordered[:limit]:
            author = next(iter(item.authors)).name if item.authors else ""
            published = item.date_published.strftime("%Y-%m-%d %H:%M") if item.date_published else ""
            table.add_row(published, author or "", (item.content_text or "")[:120])
        console.print(table)

    _run(_refresh())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
