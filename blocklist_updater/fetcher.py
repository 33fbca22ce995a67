"""
HTTP client used for every remote resource (sources, TLD data, resolver).

Retries are done here with a fixed delay between attempts rather than an
exponential backoff, so a single unreachable host costs at most
``attempts * delay`` seconds.
"""

import time
import logging
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter

from . import __version__

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_FETCH_ATTEMPTS = 10
DEFAULT_FETCH_DELAY = 5.0
DEFAULT_POOL_SIZE = 50

USER_AGENT = f'Blocklist Updater/{__version__}'


class FetchError(Exception):
    """Raised when a resource could not be retrieved after all attempts."""

    def __init__(self, url: str, attempts: int, error: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.error = error
        super().__init__(f"{url}: giving up after {attempts} attempts ({error})")


class HTTPClient:
    """HTTP client with fixed-delay retry logic."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT,
                 attempts: int = DEFAULT_FETCH_ATTEMPTS,
                 delay: float = DEFAULT_FETCH_DELAY,
                 pool_size: int = DEFAULT_POOL_SIZE,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.attempts = max(1, attempts)
        self.delay = max(0.0, delay)
        self.pool_size = pool_size
        self.session = session if session is not None else self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a session whose connection pool fits the verification fan-out."""
        session = requests.Session()
        session.headers['User-Agent'] = USER_AGENT
        adapter = HTTPAdapter(pool_connections=self.pool_size, pool_maxsize=self.pool_size)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def get(self, url: str, **kwargs) -> requests.Response:
        """Single GET request, no retry."""
        return self.session.get(url, timeout=self.timeout, **kwargs)

    def fetch(self, url: str) -> requests.Response:
        """
        Open ``url`` for streaming, retrying on any request failure.

        The caller owns the returned response and must close it.

        Raises:
            FetchError: when every attempt failed.
        """
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.attempts + 1):
            try:
                response = self.get(url, stream=True)
                try:
                    response.raise_for_status()
                except requests.HTTPError:
                    response.close()
                    raise
                return response
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Download of {url} failed (attempt {attempt}/{self.attempts}): {e}")
            if attempt < self.attempts:
                time.sleep(self.delay)

        raise FetchError(url, self.attempts, last_error)

    def fetch_lines(self, url: str) -> List[str]:
        """Download ``url`` and return its decoded lines."""
        response = self.fetch(url)
        try:
            return response.content.decode('utf-8', errors='ignore').splitlines()
        except requests.RequestException as e:
            raise FetchError(url, self.attempts, e) from e
        finally:
            response.close()
