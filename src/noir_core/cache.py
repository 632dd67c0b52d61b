import logging
import os
import time
from pathlib import Path

from platformdirs import user_cache_dir

from .constants import CACHE_DIR_ENV, CACHE_SUBDIR
from .exceptions import FetchError

logger = logging.getLogger(__name__)


def resolve_cache_dir() -> Path:
    """
    Returns ``<cache-root>/noir``.

    The cache root comes from ``$XDG_CACHE_HOME`` when it is set, otherwise from
    the platform's per-user cache directory.
    """
    root = os.getenv(CACHE_DIR_ENV, "")
    if not root:
        try:
            root = user_cache_dir()
        except (KeyError, RuntimeError, OSError) as e:
            raise FetchError(f"Could not resolve user cache directory: {e}", e) from e
    return Path(root) / CACHE_SUBDIR


class CachedFile:
    """A file that is only trusted while younger than ``ttl`` seconds."""

    def __init__(self, path: Path, ttl: float):
        self.path = Path(path)
        self.ttl = ttl

    def age(self, now: float | None = None) -> float | None:
        """Seconds since the last write, or None when the file cannot be stat'ed."""
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None
        if now is None:
            now = time.time()
        return now - mtime

    def is_fresh(self, now: float | None = None) -> bool:
        age = self.age(now)
        return age is not None and age < self.ttl

    def read_bytes(self, now: float | None = None) -> bytes | None:
        """Returns the file contents if fresh, otherwise None. Stale files are left in place."""
        if not self.is_fresh(now):
            return None
        try:
            return self.path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read cache file {self.path}: {e}")
            return None

    def write_bytes(self, data: bytes) -> bool:
        """Best-effort write; failures are logged and reported as False."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(data)
        except OSError as e:
            logger.warning(f"Could not write cache file {self.path}: {e}")
            return False
        return True

    def __repr__(self) -> str:
        return f"CachedFile({str(self.path)!r}, ttl={self.ttl})"
