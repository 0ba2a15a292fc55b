import pytest
import requests
from requests.structures import CaseInsensitiveDict

from app import app as flask_app


class FakeUpstream:
    """Stands in for a streamed ``requests.Response``."""

    def __init__(self, status_code=200, reason='OK', headers=None, chunks=(), error=None):
        self.status_code = status_code
        self.reason = reason
        self.headers = CaseInsensitiveDict(headers or {})
        self.chunks = list(chunks)
        self.error = error
        self.closed = False

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_upstream(monkeypatch):
    """Route ``requests.get`` to a canned response and record the calls."""
    calls = []

    def install(upstream=None, raises=None):
        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            if raises is not None:
                raise raises
            return upstream

        monkeypatch.setattr(requests, 'get', fake_get)
        return calls

    return install
