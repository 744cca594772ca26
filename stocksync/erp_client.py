import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from threading import Lock

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_RATE_LIMIT = 5  # ERP requests per second
DEFAULT_MAX_ATTEMPTS = 3
MAX_RETRY_WAIT = 60.0


class ErpClientError(Exception):
    """Any failure talking to the ERP: network, HTTP status or payload."""


class ErpConfigurationError(ErpClientError):
    """Base URL or API key is missing from settings."""


class ErpResponseError(ErpClientError):
    """The ERP answered, but not with something we can use."""


class RateLimiter:
    """
    Thread-safe fixed-window limiter for outgoing ERP calls.

    At most `rate` calls start within one `period`. The first call opens a
    window; a call that finds the window spent waits for it to close and opens
    the next one.
    """

    def __init__(self, rate: int, period: float = 1.0):
        self._rate = max(1, rate)
        self._period = period
        self._remaining = self._rate
        self._opened_at = None
        self._lock = Lock()

    def acquire(self):
        with self._lock:
            now = time.monotonic()
            if self._opened_at is None or now - self._opened_at >= self._period:
                self._open_window(now)

            if self._remaining == 0:
                time.sleep(self._period - (now - self._opened_at))
                self._open_window(time.monotonic())

            self._remaining -= 1

    def _open_window(self, now: float):
        self._opened_at = now
        self._remaining = self._rate


def check_configuration():
    """Raise ErpConfigurationError unless the ERP endpoint is configured."""
    missing = [
        name for name in ('ERP_API_BASE_URL', 'ERP_API_KEY')
        if not getattr(settings, name, '')
    ]
    if missing:
        raise ErpConfigurationError(
            f"ERP API is not configured: missing {', '.join(missing)}."
        )


class ErpClient:
    def __init__(self):
        check_configuration()
        self._base_url = settings.ERP_API_BASE_URL.rstrip('/')
        self._timeout = getattr(settings, 'ERP_API_TIMEOUT', DEFAULT_TIMEOUT)
        self._session = requests.Session()
        self._session.headers.update({
            'X-Api-Key': settings.ERP_API_KEY,
            'Accept': 'application/json',
        })
        self._max_attempts = max(1, getattr(settings, 'ERP_API_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS))
        self._rate_limiter = RateLimiter(getattr(settings, 'ERP_API_RATE_LIMIT', DEFAULT_RATE_LIMIT))

    def fetch_stock(self, external_ids) -> list:
        """Return the raw stock groups the ERP holds for the given external ids."""
        url = f"{self._base_url}/product-stock/"
        payload = {'uuids': list(external_ids)}
        data = self._fetch_json('POST', url, json=payload)
        if not isinstance(data, list):
            raise ErpResponseError(f"Expected a list of stock groups, got {type(data).__name__}.")
        return data

    def fetch_catalog_page(self, page: int = 1, limit: int = 80) -> list:
        url = f"{self._base_url}/product-groups/"
        data = self._fetch_json('GET', url, params={'page': page, 'limit': limit})
        if not isinstance(data, list):
            raise ErpResponseError(f"Expected a list of product groups, got {type(data).__name__}.")
        return data

    def _fetch_json(self, method: str, url: str, **kwargs):
        try:
            response = self._request_with_retry(method, url, **kwargs)
        except requests.RequestException as exc:
            raise ErpClientError(f"ERP request {method} {url} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ErpResponseError(f"Invalid JSON response from ERP ({url}).") from exc

    def _request_with_retry(self, method: str, url: str, **kwargs) -> requests.Response:
        backoff = 1.0
        for attempt in range(1, self._max_attempts + 1):
            self._rate_limiter.acquire()
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
            if response.status_code != 429:
                response.raise_for_status()
                return response

            if attempt == self._max_attempts:
                break
            wait = self._retry_after_seconds(response)
            if wait is None:
                wait = backoff
            logger.warning(
                "ERP throttled %s %s (attempt %d/%d); retrying in %.1fs.",
                method, url, attempt, self._max_attempts, wait,
            )
            time.sleep(wait)
            backoff *= 2

        raise ErpClientError(
            f"ERP request {method} {url} failed after {self._max_attempts} attempts due to rate limiting."
        )

    @staticmethod
    def _retry_after_seconds(response: requests.Response):
        """Seconds to wait per Retry-After (delta or HTTP date), capped; None if unusable."""
        header = response.headers.get('Retry-After')
        if header is None:
            return None
        try:
            seconds = float(header)
        except ValueError:
            try:
                retry_at = parsedate_to_datetime(header)
            except (TypeError, ValueError):
                return None
            if retry_at.tzinfo is None:
                retry_at = retry_at.replace(tzinfo=timezone.utc)
            seconds = (retry_at - datetime.now(timezone.utc)).total_seconds()
        return min(max(seconds, 0.0), MAX_RETRY_WAIT)
