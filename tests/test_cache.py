import os
import time

from noir_core.cache import CachedFile, resolve_cache_dir


def test_resolve_cache_dir_uses_env_override(cache_root):
    assert resolve_cache_dir() == cache_root


def test_resolve_cache_dir_falls_back_to_platform_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", "")
    monkeypatch.setattr("noir_core.cache.user_cache_dir", lambda: str(tmp_path / "platform"))

    assert resolve_cache_dir() == tmp_path / "platform" / "noir"


def test_ttl_boundary(tmp_path):
    path = tmp_path / "file"
    path.write_bytes(b"data")
    mtime = time.time() - 1000
    os.utime(path, (mtime, mtime))
    cached = CachedFile(path, ttl=100)

    # Exactly at the threshold is stale, one second below is fresh
    assert cached.is_fresh(now=mtime + 100) is False
    assert cached.read_bytes(now=mtime + 100) is None
    assert cached.is_fresh(now=mtime + 99) is True
    assert cached.read_bytes(now=mtime + 99) == b"data"


def test_missing_file_is_never_fresh(tmp_path):
    cached = CachedFile(tmp_path / "absent", ttl=100)

    assert cached.age() is None
    assert cached.is_fresh() is False
    assert cached.read_bytes() is None


def test_stale_file_is_left_in_place(tmp_path):
    path = tmp_path / "file"
    path.write_bytes(b"old")
    old = time.time() - 500
    os.utime(path, (old, old))

    assert CachedFile(path, ttl=10).read_bytes() is None
    assert path.exists()


def test_write_creates_parent_directories(tmp_path):
    cached = CachedFile(tmp_path / "a" / "b" / "file", ttl=100)

    assert cached.write_bytes(b"payload") is True
    assert cached.read_bytes() == b"payload"


def test_write_failure_is_reported_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    cached = CachedFile(blocker / "file", ttl=100)

    assert cached.write_bytes(b"payload") is False
