"""Latest-version oracles — store listing scrape, iTunes lookup, backend API.

Each oracle performs a single blocking HTTP GET and either returns the raw
version string (or None when the response carries no version) or raises
RetrievalError tagged with why the fetch failed.
"""

import http.client
import json
import logging
import re
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from versiongate.branding import AppBranding
from versiongate.core.models import RetrievalError, RetrievalReason

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

PLAY_STORE_URL = "https://play.google.com/store/apps/details"
ITUNES_LOOKUP_URL = "https://itunes.apple.com/lookup"

# Play Store embeds the current version as [[["1.2.3"]] in its page data
PLAY_VERSION_RE = re.compile(r'\[\[\["(\d+\.\d+\.\d+)"\]\]')


def http_get(url: str, timeout: float, accept: str = '*/*') -> str:
    """GET ``url`` and return the decoded body of a 200 response."""
    req = Request(url, headers={
        'User-Agent': AppBranding.user_agent(),
        'Accept': accept,
    })
    try:
        with urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, 'status', 200)
            if status != 200:
                raise RetrievalError(RetrievalReason.BAD_STATUS, f"HTTP {status}")
            body = resp.read()
    except HTTPError as e:
        raise RetrievalError(RetrievalReason.BAD_STATUS, f"HTTP {e.code}") from e
    except URLError as e:
        if isinstance(e.reason, TimeoutError):
            raise RetrievalError(RetrievalReason.TIMEOUT, str(e.reason)) from e
        raise RetrievalError(RetrievalReason.NETWORK, str(e.reason)) from e
    except TimeoutError as e:
        raise RetrievalError(RetrievalReason.TIMEOUT, str(e) or "timed out") from e
    except OSError as e:
        raise RetrievalError(RetrievalReason.NETWORK, str(e)) from e
    except http.client.HTTPException as e:
        # Garbage status line or body cut short of Content-Length
        raise RetrievalError(RetrievalReason.NETWORK, f"{type(e).__name__}: {e}") from e

    return body.decode('utf-8', errors='replace')


def http_get_json(url: str, timeout: float):
    body = http_get(url, timeout, accept='application/json')
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise RetrievalError(RetrievalReason.UNEXPECTED_FORMAT, f"Invalid JSON: {e}") from e


class PlayStoreOracle:
    """Scrapes the public Google Play listing for the current version."""

    def __init__(self, locale: str = 'en', timeout: float = DEFAULT_TIMEOUT):
        self.locale = locale
        self.timeout = timeout

    def listing_url(self, app_id: str) -> str:
        return f"{PLAY_STORE_URL}?{urlencode({'id': app_id, 'hl': self.locale})}"

    def store_url(self, app_id: str) -> str:
        return f"{PLAY_STORE_URL}?{urlencode({'id': app_id})}"

    def latest_version(self, app_id: str) -> str | None:
        body = http_get(self.listing_url(app_id), self.timeout, accept='text/html')
        match = PLAY_VERSION_RE.search(body)
        if match is None:
            raise RetrievalError(RetrievalReason.UNEXPECTED_FORMAT,
                                 "No version found in store listing")
        return match.group(1)


class AppStoreOracle:
    """Queries the iTunes lookup API by bundle identifier."""

    def __init__(self, country: str = 'us', timeout: float = DEFAULT_TIMEOUT):
        self.country = country
        self.timeout = timeout
        self._last_track: tuple[str, str] | None = None  # (bundle id, trackViewUrl) of the last lookup

    def lookup_url(self, app_id: str) -> str:
        return f"{ITUNES_LOOKUP_URL}?{urlencode({'bundleId': app_id, 'country': self.country})}"

    def store_url(self, app_id: str) -> str:
        # trackViewUrl is only known after a successful lookup
        if self._last_track is not None and self._last_track[0] == app_id:
            return self._last_track[1]
        return f"https://apps.apple.com/{quote(self.country)}/search?term={quote(app_id)}"

    def latest_version(self, app_id: str) -> str | None:
        self._last_track = None
        data = http_get_json(self.lookup_url(app_id), self.timeout)
        if not isinstance(data, dict):
            raise RetrievalError(RetrievalReason.UNEXPECTED_FORMAT, "Lookup response is not an object")

        results = data.get('results')
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logger.info("App %s not found in %s store", app_id, self.country)
            return None

        entry = results[0]
        track_url = entry.get('trackViewUrl')
        if isinstance(track_url, str) and track_url:
            self._last_track = (app_id, track_url)

        version = entry.get('version')
        return version.strip() if isinstance(version, str) else None


class BackendApiOracle:
    """Reads the latest version from a JSON endpoint owned by the app backend.

    ``url`` may contain an ``{app_id}`` placeholder. ``field`` is a dotted
    path into the response, e.g. ``data.latest_version``.
    """

    def __init__(self, url: str, field: str = 'latest_version',
                 store_url: str = '', timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.field = field
        self._store_url = store_url
        self.timeout = timeout

    def endpoint(self, app_id: str) -> str:
        return self.url.replace('{app_id}', quote(app_id, safe=''))

    def store_url(self, app_id: str) -> str:
        return self._store_url.replace('{app_id}', quote(app_id, safe=''))

    def latest_version(self, app_id: str) -> str | None:
        data = http_get_json(self.endpoint(app_id), self.timeout)
        value = data
        for key in self.field.split('.'):
            if not isinstance(value, dict) or key not in value:
                raise RetrievalError(RetrievalReason.UNEXPECTED_FORMAT,
                                     f"Field '{self.field}' missing from response")
            value = value[key]
        if value is None:
            return None
        if not isinstance(value, str):
            raise RetrievalError(RetrievalReason.UNEXPECTED_FORMAT,
                                 f"Field '{self.field}' is not a string")
        return value.strip()
