import asyncio

import aiohttp

from .exceptions import FetchError

HEADERS = {
    "User-Agent": "noir/1.0 (Terminal Steam client; +https://github.com/noir-tui/noir)",
    "Accept": "application/json",
}


async def fetch_bytes(session: aiohttp.ClientSession, url: str, params: dict | None = None) -> bytes:
    """
    GETs ``url`` and returns the raw response body.

    Raises:
        FetchError: on connection failures, timeouts and non-200 responses.
    """
    try:
        async with session.get(url, params=params, headers=HEADERS) as resp:
            if resp.status != 200:
                raise FetchError(f"GET {url} returned HTTP {resp.status}")
            return await resp.read()
    except asyncio.TimeoutError as e:
        raise FetchError(f"GET {url} timed out", e) from e
    except aiohttp.ClientError as e:
        raise FetchError(f"GET {url} failed: {e}", e) from e
