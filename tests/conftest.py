import os
import sys

import pytest
import requests


def _ensure_repo_on_path() -> None:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if root not in sys.path:
        sys.path.append(root)


_ensure_repo_on_path()
os.environ.pop("GOOGLE_PLACES_API_KEY", None)


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=None, headers=None, chunks=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))
        self.headers = headers or {"content-type": "text/html; charset=utf-8"}
        self.encoding = "utf-8"
        self._chunks = chunks
        self.closed = False

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def iter_content(self, chunk_size=1):
        if self._chunks is not None:
            yield from self._chunks
            return
        body = self.text.encode(self.encoding)
        for i in range(0, len(body), chunk_size):
            yield body[i : i + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class DummySession:
    """
    Routes requests by URL prefix. A route value may be a DummyResponse,
    an exception instance (raised) or a callable(url, **kwargs).
    Unrouted URLs raise ConnectionError.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def _dispatch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        for prefix, value in self.routes.items():
            if url.startswith(prefix):
                if isinstance(value, Exception):
                    raise value
                if callable(value):
                    return value(url, **kwargs)
                return value
        raise requests.ConnectionError(f"no route for {url}")

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)


@pytest.fixture
def dummy_response():
    return DummyResponse


@pytest.fixture
def dummy_session():
    return DummySession
