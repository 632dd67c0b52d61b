# core package for noir
from . import cache, catalog, credentials, downloader, models, state, steam_api_manager

__all__ = ["cache", "catalog", "credentials", "downloader", "models", "state", "steam_api_manager"]
