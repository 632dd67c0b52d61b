import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from colorama import Fore, Style
from colorama import init as colorama_init

from noir_core.cache import resolve_cache_dir
from noir_core.credentials import CredentialStore
from noir_core.exceptions import FetchError

from .config import LOG_FILE, LOG_LEVEL


# Steam account names are at least three characters long
MIN_MASK_LENGTH = 3


class SensitiveDataFilter(logging.Filter):
    """Filter to mask the Steam username in logs."""

    def __init__(self, username: str | None = None):
        super().__init__()
        self.username = None
        self.remember(username)

    def remember(self, username: str | None):
        self.username = username if username and len(username) >= MIN_MASK_LENGTH else None

    def filter(self, record):
        username = self.username

        def mask(text):
            if username and isinstance(text, str) and username in text:
                text = text.replace(username, "***USERNAME***")
            return text

        record.msg = mask(record.msg)

        if record.args:
            if isinstance(record.args, tuple):
                record.args = tuple(mask(arg) for arg in record.args)
            elif isinstance(record.args, dict):
                record.args = {k: mask(v) for k, v in record.args.items()}

        return True


def default_log_file() -> Path:
    if LOG_FILE:
        return Path(LOG_FILE)
    try:
        return resolve_cache_dir() / "noir.log"
    except FetchError:
        return Path("logs") / "noir.log"


def setup_logging(console: bool = False) -> SensitiveDataFilter:
    """
    Routes all logging to a rotating file. A coloured console handler is only
    added when ``console`` is set, since console output would corrupt the TUI.
    """
    force_color = os.getenv("FORCE_COLOR", "").lower() in ("1", "true")
    colorama_init(autoreset=True, strip=False if force_color else None)

    # Remove existing handlers to ensure our configuration takes precedence
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    # Mask the cached username in every handler
    sensitive = SensitiveDataFilter(CredentialStore().get_cached_username())

    root.setLevel(logging.DEBUG)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(LOG_LEVEL)
        console_handler.addFilter(sensitive)
        console_handler.setFormatter(
            logging.Formatter(
                f"{Fore.CYAN}%(asctime)s{Style.RESET_ALL} | "
                f"{Fore.GREEN}%(levelname)s{Style.RESET_ALL}: "
                f"{Fore.YELLOW}%(name)s{Style.RESET_ALL} - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(console_handler)

    # File Handler (Plain text, Rotating) - Always DEBUG
    log_file = default_log_file()
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")
    except OSError as e:
        print(f"{Fore.RED}Could not open log file {log_file}: {e}{Style.RESET_ALL}", file=sys.stderr)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(sensitive)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s: %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
        root.addHandler(file_handler)

    # aiohttp/asyncio chatter is rarely useful in the log file
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return sensitive


def get_logger(name: str):
    return logging.getLogger(name)
