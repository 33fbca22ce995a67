import json

import pytest
import requests

from blocklist_updater.fetcher import HTTPClient
from blocklist_updater.tlds import TLDReference
from blocklist_updater.whitelist import Whitelist


class FakeResponse:
    def __init__(self, body=b'', status_code=200):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.content = body
        self.status_code = status_code
        self.closed = False

    def iter_lines(self):
        return iter(self.content.splitlines())

    def json(self):
        return json.loads(self.content)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def close(self):
        self.closed = True


class FakeSession:
    """Maps URLs to bodies, responses, exceptions or callables."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, timeout=None, stream=False, params=None, **kwargs):
        self.calls.append((url, params))
        handler = self.routes.get(url)
        if handler is None:
            raise requests.ConnectionError(f"no route to {url}")
        if callable(handler) and not isinstance(handler, FakeResponse):
            handler = handler(url, params)
        if isinstance(handler, BaseException):
            raise handler
        if isinstance(handler, FakeResponse):
            return handler
        return FakeResponse(handler)


@pytest.fixture
def make_client():
    def _make(routes=None, attempts=3):
        return HTTPClient(timeout=5, attempts=attempts, delay=0, session=FakeSession(routes))
    return _make


@pytest.fixture
def tlds():
    return TLDReference(tlds=frozenset({'com', 'net', 'org', 'ly', 'uk'}), suffixes=('.co.uk',))


@pytest.fixture
def empty_whitelist():
    return Whitelist()
