import logging

from .cache import CachedFile, resolve_cache_dir
from .constants import USERNAME_CACHE_FILE, USERNAME_TTL
from .exceptions import FetchError

logger = logging.getLogger(__name__)


class CredentialStore:
    """Remembers the last Steam username for a week. Only the name is stored, never a password."""

    def __init__(self, ttl: float = USERNAME_TTL):
        self.ttl = ttl

    def cache_file(self) -> CachedFile:
        return CachedFile(resolve_cache_dir() / USERNAME_CACHE_FILE, self.ttl)

    def get_cached_username(self) -> str | None:
        try:
            cached = self.cache_file()
        except FetchError as e:
            logger.debug(f"No cache directory for username: {e}")
            return None

        data = cached.read_bytes()
        if data is None:
            return None

        username = data.decode("utf-8", errors="replace").strip()
        return username or None

    def save_username(self, username: str) -> bool:
        try:
            cached = self.cache_file()
        except FetchError as e:
            logger.warning(f"Not caching username: {e}")
            return False
        return cached.write_bytes(username.encode("utf-8"))
