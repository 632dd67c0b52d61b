from enum import Enum

STEAM_APP_LIST_URL = "https://api.steampowered.com/ISteamApps/GetAppList/v0002/"
STEAM_APP_DETAILS_URL = "https://store.steampowered.com/api/appdetails"

CACHE_DIR_ENV = "XDG_CACHE_HOME"
CACHE_SUBDIR = "noir"
CATALOG_CACHE_FILE = "steam_app_list.json"
USERNAME_CACHE_FILE = "username"

CATALOG_TTL = 24 * 60 * 60  # seconds
USERNAME_TTL = 7 * 24 * 60 * 60  # seconds

ERROR_CLEAR_DELAY = 2.0  # seconds

STEAMCMD_BINARY = "steamcmd"


class Platform(Enum):
    """Platforms steamcmd can be forced to download for, in display order."""

    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"

    @property
    def label(self) -> str:
        return _PLATFORM_LABELS[self]


_PLATFORM_LABELS = {
    Platform.MACOS: "MacOS \ue711",
    Platform.LINUX: "Linux \ue712",
    Platform.WINDOWS: "Windows \ue70f",
}
