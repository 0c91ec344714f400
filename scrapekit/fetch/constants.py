"""HTTP constants shared by clients, transports and scrapers."""

from typing import Final


# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_REDIRECT_MIN = 300
HTTP_STATUS_REDIRECT_MAX = 400

# Content types
JSON_CONTENT_TYPE: Final = "application/json;charset=UTF-8"
HTML_CONTENT_TYPE: Final = "text/html; charset=utf-8"
FORM_CONTENT_TYPE: Final = "application/x-www-form-urlencoded;charset=UTF-8"

# Built-in client profiles
HTTP_PROFILE: Final = "http"
SCRAPER_PROFILE: Final = "scraper"

# Default transport timeout (seconds)
DEFAULT_TIMEOUT_SECONDS = 30.0

# Cache-Control directive sent for each cache mode when the caller set none
CACHE_CONTROL_DIRECTIVES: Final[dict[str, str]] = {
    "no-cache": "max-age=0",
    "no-store": "no-cache",
    "reload": "no-cache",
}

# Headers dropped when credentials are omitted
CREDENTIAL_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization"})
