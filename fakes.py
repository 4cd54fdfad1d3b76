"""
In-memory stand-ins for requests sessions and responses used by the tests.
"""

import threading

import requests
from requests.structures import CaseInsensitiveDict


class FakeResponse:
    def __init__(self, status_code=200, body=b"", headers=None, lines=None,
                 reason="OK", fail_after=None, chunk_size=4):
        self.status_code = status_code
        self.reason = reason
        self.headers = CaseInsensitiveDict(headers or {})
        self._body = body
        self._lines = lines or []
        self._fail_after = fail_after
        self._chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self._body), self._chunk_size):
            if self._fail_after is not None and i >= self._fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection broken")
            yield self._body[i:i + self._chunk_size]

    def iter_lines(self):
        for n, line in enumerate(self._lines):
            if self._fail_after is not None and n >= self._fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection broken")
            yield line.encode("utf-8")

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeSession:
    """
    Routes GET requests by exact URL.

    A route maps to a FakeResponse, an exception instance to raise, or a
    callable returning either. Unknown URLs answer 404.
    """

    def __init__(self, routes):
        self.routes = routes
        self.headers = {}
        self.requests = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.requests.append((url, dict(self.headers), kwargs))
        route = self.routes.get(url)
        if callable(route) and not isinstance(route, FakeResponse):
            route = route()
        if route is None:
            return FakeResponse(status_code=404, reason="Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self):
        self.closed = True


class SharedSessionFactory:
    """Hands every caller a FakeSession sharing one route table and request log."""

    def __init__(self, routes):
        self.routes = routes
        self.sessions = []
        self._lock = threading.Lock()

    def __call__(self):
        session = FakeSession(self.routes)
        with self._lock:
            self.sessions.append(session)
        return session

    @property
    def requested_urls(self):
        urls = []
        for session in self.sessions:
            urls.extend(url for url, _, _ in session.requests)
        return urls
