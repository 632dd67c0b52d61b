import json
import logging
from typing import Any

import aiohttp

from .constants import STEAM_APP_DETAILS_URL
from .exceptions import DetailsUnavailable, FetchError
from .models import GameDetails
from .network import fetch_bytes

logger = logging.getLogger(__name__)


class SteamAPIManager:
    def __init__(self, session: aiohttp.ClientSession, url: str = STEAM_APP_DETAILS_URL):
        self.session = session
        self.url = url

    async def fetch_app_details(self, appid: int) -> GameDetails:
        """
        Fetches store metadata for one app.

        Raises:
            DetailsUnavailable: when the store reports ``success: false`` for the app.
            FetchError: on network failures or a malformed envelope.
        """
        body = await fetch_bytes(self.session, self.url, params={"appids": str(appid)})
        try:
            data = json.loads(body)
        except ValueError as e:
            raise FetchError(f"Invalid JSON in details for app {appid}: {e}", e) from e

        details = self.unwrap(data, appid)
        logger.debug(f"Fetched details for {appid}: {details.title!r}")
        return details

    @staticmethod
    def unwrap(data: Any, appid: int) -> GameDetails:
        """Decodes ``{"<appid>": {"success": ..., "data": {...}}}`` into GameDetails."""
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected details response for app {appid}")

        envelope = data.get(str(appid))
        if not isinstance(envelope, dict):
            raise FetchError(f"Details response has no entry for app {appid}")
        if envelope.get("success") is False:
            raise DetailsUnavailable(appid)

        payload = envelope.get("data")
        if not isinstance(payload, dict):
            raise FetchError(f"Details response for app {appid} has no data")

        try:
            return GameDetails.from_payload(payload)
        except (ValueError, TypeError, AttributeError) as e:
            raise FetchError(f"Could not decode details for app {appid}: {e}", e) from e
