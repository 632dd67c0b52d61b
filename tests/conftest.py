from unittest.mock import MagicMock

import pytest


class FakeResponse:
    """Stands in for the object returned by ``async with session.get(...)``."""

    def __init__(self, status: int = 200, body: bytes = b""):
        self.status = status
        self.body = body

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def cache_root(tmp_path, monkeypatch):
    # Point the cache root at a temporary directory for every test that asks for it
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    return tmp_path / "noir"


@pytest.fixture
def make_session():
    def _make(*responses):
        session = MagicMock()
        session.get = MagicMock(side_effect=list(responses))
        return session

    return _make
