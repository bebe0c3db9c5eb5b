"""Centralized constants for the Twitter feed provider."""

# --- Credentials ---
TWITTER_SERVER = "api.twitter.com"

# --- Twitter URLs ---
TWITTER_DOMAINS = ("twitter.com", "x.com")
TWITTER_WEB_BASE = "https://twitter.com"
TWITTER_API_BASE = "https://api.twitter.com/1.1/"

# --- OAuth 1.0a handshake ---
TWITTER_REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token"
TWITTER_AUTHORIZE_URL = "https://api.twitter.com/oauth/authorize"
TWITTER_ACCESS_TOKEN_URL = "https://api.twitter.com/oauth/access_token"

# --- Twitter API endpoints (relative to TWITTER_API_BASE) ---
USERS_SHOW_API = "users/show.json"
HOME_TIMELINE_API = "statuses/home_timeline.json"
MENTIONS_TIMELINE_API = "statuses/mentions_timeline.json"
USER_TIMELINE_API = "statuses/user_timeline.json"
SEARCH_API = "search/tweets.json"

# Without tweet_mode=extended the API truncates status bodies to 140 chars
TWEET_MODE = "extended"

# Twitter's created_at format, "EEE MMM dd HH:mm:ss Z yyyy"
TWITTER_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

# --- URL paths ---
USER_PATHS = ("/home", "/notifications")
RESERVED_PATHS = ("/search", "/explore", "/messages", "/i", "/compose")
HOME_PATHS = ("/", "/home")
MENTIONS_PATH = "/notifications/mentions"
SEARCH_PATH = "/search"

# --- HTTP Client ---
HTTP_TOTAL_TIMEOUT = 60  # seconds
HTTP_CONNECT_TIMEOUT = 10  # seconds
TWITTER_API_TIMEOUT = 30  # seconds

# --- HTML Sanitization ---
ALLOWED_HTML_TAGS = {
    "p", "a", "br", "img", "blockquote", "div", "span", "strong", "em",
}
ALLOWED_HTML_ATTRIBUTES = {
    "a": {"href"},
    "img": {"src", "alt"},
}
