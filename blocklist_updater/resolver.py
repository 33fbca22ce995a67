"""
Existence checks against a DNS-over-HTTPS JSON resolver.

The resolver is queried with ``GET <url>?name=<domain>`` and must answer
200 with a JSON body carrying a numeric ``Status`` (the DNS RCODE). Only an
explicit NXDOMAIN removes a domain; anything inconclusive keeps it.
"""

import time
import logging

import requests

from .fetcher import HTTPClient

logger = logging.getLogger(__name__)

DEFAULT_RESOLVER_URL = 'https://dns.google.com/resolve'
DEFAULT_RESOLVE_ATTEMPTS = 10
DEFAULT_RESOLVE_DELAY = 3.0

RCODE_NXDOMAIN = 3


class ResolverError(Exception):
    """The resolver gave no usable answer."""


class ExistenceVerifier:
    """Checks whether domains exist, failing open on inconclusive answers."""

    def __init__(self, http_client: HTTPClient, resolver_url: str = DEFAULT_RESOLVER_URL,
                 attempts: int = DEFAULT_RESOLVE_ATTEMPTS, delay: float = DEFAULT_RESOLVE_DELAY):
        self.http_client = http_client
        self.resolver_url = resolver_url
        self.attempts = max(1, attempts)
        self.delay = max(0.0, delay)

    def query(self, domain: str) -> bool:
        """
        Ask the resolver once.

        Returns:
            False if the resolver reports NXDOMAIN, True otherwise.

        Raises:
            ResolverError: on transport errors, non-200 responses and
                malformed bodies.
        """
        try:
            response = self.http_client.get(self.resolver_url, params={'name': domain})
        except requests.RequestException as e:
            raise ResolverError(f"request failed: {e}") from e

        try:
            if response.status_code != 200:
                raise ResolverError(f"unexpected status code: {response.status_code}")
            try:
                body = response.json()
            except (ValueError, RecursionError, requests.RequestException) as e:
                raise ResolverError(f"invalid JSON response: {e}") from e
        finally:
            response.close()

        status = body.get('Status') if isinstance(body, dict) else None
        if not isinstance(status, int) or isinstance(status, bool):
            raise ResolverError(f"missing or non-numeric Status: {body!r}")

        return status != RCODE_NXDOMAIN

    def exists(self, domain: str) -> bool:
        """Query with retries; True unless the resolver reports NXDOMAIN."""
        for attempt in range(1, self.attempts + 1):
            try:
                exists = self.query(domain)
            except ResolverError as e:
                logger.debug(f"Resolving {domain} failed (attempt {attempt}/{self.attempts}): {e}")
                if attempt < self.attempts:
                    time.sleep(self.delay)
                continue

            if not exists:
                logger.debug(f"resolver reports as non-existent: {domain}")
            return exists

        logger.warning(f"Could not verify {domain} after {self.attempts} attempts, keeping it")
        return True
