import asyncio
import sys

import aiohttp
from colorama import Fore, Style

from noir_core.catalog import CatalogCache
from noir_core.steam_api_manager import SteamAPIManager
from noir_tui.app import NoirApp
from noir_tui.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> int:
    log_filter = setup_logging()
    logger.info("Starting noir")

    async with aiohttp.ClientSession() as session:
        app = NoirApp(
            catalog_cache=CatalogCache(session),
            details_manager=SteamAPIManager(session),
            log_filter=log_filter,
        )
        try:
            await app.run_async()
        except Exception as e:
            logger.critical(f"Terminal UI failed: {e}", exc_info=True)
            print(f"{Fore.RED}{Style.BRIGHT}noir: {e}{Style.RESET_ALL}", file=sys.stderr)
            return 1

    logger.info("noir exited")
    return app.return_code or 0


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        # Handle Ctrl+C gracefully
        pass


if __name__ == "__main__":
    cli()
