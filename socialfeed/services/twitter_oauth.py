"""Twitter OAuth 1.0a helpers: request signing, signed GETs and the PIN/callback handshake."""

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import httpx

from socialfeed.config import OAuthSecrets
from socialfeed.constants import (
    TWITTER_ACCESS_TOKEN_URL,
    TWITTER_API_TIMEOUT,
    TWITTER_AUTHORIZE_URL,
    TWITTER_REQUEST_TOKEN_URL,
)
from socialfeed.http_client import get_http_client

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


@dataclass(frozen=True)
class TokenSuccess:
    """Outcome of a token exchange: the token pair plus every other response parameter."""

    oauth_token: str
    oauth_token_secret: str
    parameters: dict[str, str] = field(default_factory=dict)


def percent_encode(value: str) -> str:
    """RFC 3986 encoding as required by RFC 5849 section 3.6."""
    return quote(value, safe="~")


def generate_nonce() -> str:
    return secrets.token_hex(16)


def _base_url(url: str) -> tuple[str, list[tuple[str, str]]]:
    """Split a URL into its signature base URI and its query parameters."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    if (scheme == "https" and netloc.endswith(":443")) or (scheme == "http" and netloc.endswith(":80")):
        netloc = netloc.rsplit(":", 1)[0]
    base = urlunsplit((scheme, netloc, parts.path or "/", "", ""))
    return base, parse_qsl(parts.query, keep_blank_values=True)


def signature_base_string(method: str, url: str, params: list[tuple[str, str]]) -> str:
    """Build the signature base string from the method, base URI and all parameters."""
    base, query = _base_url(url)
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in [*query, *params])
    normalized = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join([method.upper(), percent_encode(base), percent_encode(normalized)])


def sign(base_string: str, consumer_secret: str, token_secret: str = "") -> str:
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def build_authorization_header(
    method: str,
    url: str,
    params: dict[str, str],
    oauth_secrets: OAuthSecrets,
    token: str | None = None,
    token_secret: str = "",
    extra_oauth: dict[str, str] | None = None,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> str:
    """Return the `Authorization: OAuth ...` header value for a request."""
    oauth_params = {
        "oauth_consumer_key": oauth_secrets.consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or str(int(time.time())),
        "oauth_version": OAUTH_VERSION,
    }
    if token:
        oauth_params["oauth_token"] = token
    if extra_oauth:
        oauth_params.update(extra_oauth)

    base_string = signature_base_string(method, url, [*params.items(), *oauth_params.items()])
    oauth_params["oauth_signature"] = sign(base_string, oauth_secrets.consumer_secret, token_secret)

    fields = ", ".join(f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(oauth_params.items()))
    return f"OAuth {fields}"


class OAuth1Client:
    """Signs and sends API requests on behalf of one linked account."""

    def __init__(self, consumer_key: str, consumer_secret: str, oauth_token: str, oauth_token_secret: str):
        self._secrets = OAuthSecrets(consumer_key=consumer_key, consumer_secret=consumer_secret)
        self._token = oauth_token
        self._token_secret = oauth_token_secret

    async def get(self, url: str, parameters: dict[str, str] | None = None) -> httpx.Response:
        """Signed GET. Non-2xx responses raise httpx.HTTPStatusError."""
        params = dict(parameters or {})
        header = build_authorization_header(
            "GET", url, params, self._secrets, token=self._token, token_secret=self._token_secret
        )
        client = get_http_client()
        resp = await client.get(
            url,
            params=params,
            headers={"Authorization": header},
            timeout=TWITTER_API_TIMEOUT,
        )
        resp.raise_for_status()
        return resp


def _parse_token_response(resp: httpx.Response) -> TokenSuccess:
    data = dict(parse_qsl(resp.text))
    token = data.pop("oauth_token", None)
    token_secret = data.pop("oauth_token_secret", None)
    if not token or not token_secret:
        raise ValueError("Token response is missing oauth_token or oauth_token_secret")
    return TokenSuccess(oauth_token=token, oauth_token_secret=token_secret, parameters=data)


async def request_token(oauth_secrets: OAuthSecrets, callback: str = "oob") -> TokenSuccess:
    """Step 1: obtain a temporary request token."""
    header = build_authorization_header(
        "POST",
        TWITTER_REQUEST_TOKEN_URL,
        {},
        oauth_secrets,
        extra_oauth={"oauth_callback": callback},
    )
    client = get_http_client()
    resp = await client.post(TWITTER_REQUEST_TOKEN_URL, headers={"Authorization": header})
    resp.raise_for_status()
    return _parse_token_response(resp)


def build_authorize_url(oauth_token: str) -> str:
    """Step 2: URL where the user approves the app and receives a verifier."""
    return f"{TWITTER_AUTHORIZE_URL}?{urlencode({'oauth_token': oauth_token})}"


async def exchange_access_token(oauth_secrets: OAuthSecrets, request: TokenSuccess, verifier: str) -> TokenSuccess:
    """Step 3: trade the approved request token for an access token.

    Twitter includes `user_id` and `screen_name` in the returned parameters.
    """
    header = build_authorization_header(
        "POST",
        TWITTER_ACCESS_TOKEN_URL,
        {},
        oauth_secrets,
        token=request.oauth_token,
        token_secret=request.oauth_token_secret,
        extra_oauth={"oauth_verifier": verifier},
    )
    client = get_http_client()
    resp = await client.post(TWITTER_ACCESS_TOKEN_URL, headers={"Authorization": header})
    resp.raise_for_status()
    return _parse_token_response(resp)
