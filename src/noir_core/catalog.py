import asyncio
import json
import logging

import aiohttp

from .cache import CachedFile, resolve_cache_dir
from .constants import CATALOG_CACHE_FILE, CATALOG_TTL, STEAM_APP_LIST_URL
from .exceptions import FetchError
from .models import Catalog
from .network import fetch_bytes

logger = logging.getLogger(__name__)


class CatalogCache:
    """
    Loads the full Steam app list, keeping the raw response on disk for a day.
    """

    def __init__(self, session: aiohttp.ClientSession, url: str = STEAM_APP_LIST_URL, ttl: float = CATALOG_TTL):
        self.session = session
        self.url = url
        self.ttl = ttl

    def cache_file(self) -> CachedFile:
        return CachedFile(resolve_cache_dir() / CATALOG_CACHE_FILE, self.ttl)

    async def load(self) -> Catalog:
        """
        Returns a complete catalog, from the cache file when it is fresh and from
        the network otherwise.

        Raises:
            FetchError: when the cache root, the request or the parse fails.
        """
        cached = self.cache_file()

        data = await asyncio.to_thread(cached.read_bytes)
        if data is None:
            logger.info(f"Catalog cache missing or stale, fetching {self.url}")
            data = await fetch_bytes(self.session, self.url)
            if await asyncio.to_thread(cached.write_bytes, data):
                logger.debug(f"Wrote {len(data)} bytes to {cached.path}")
        else:
            logger.debug(f"Using cached catalog at {cached.path}")

        return await asyncio.to_thread(self.parse, data)

    @staticmethod
    def parse(data: bytes) -> Catalog:
        try:
            catalog = Catalog.from_response(json.loads(data))
        except (ValueError, KeyError, TypeError) as e:
            raise FetchError(f"Could not parse app list: {e}", e) from e
        logger.info(f"Loaded catalog with {len(catalog)} apps")
        return catalog
