from __future__ import annotations

import asyncio

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.suggester import SuggestFromList
from textual.widgets import Input, Label, Static

from noir_core.catalog import CatalogCache
from noir_core.credentials import CredentialStore
from noir_core.downloader import DownloadOrchestrator
from noir_core.exceptions import FetchError, ProcessError
from noir_core.models import GameDetails
from noir_core.state import (
    QUIT_KEY,
    CatalogLoaded,
    ClearErrorAfter,
    Command,
    DetailsLoaded,
    Download,
    DownloadDone,
    ErrorCleared,
    FetchDetails,
    KeyPressed,
    LoadCatalog,
    LoginSubmitted,
    Quit,
    ResolveUsername,
    SaveUsername,
    SearchSubmitted,
    SessionState,
    TaskFailed,
    TaskKind,
    UsernameResolved,
    View,
    initial_commands,
    initial_state,
    update,
)
from noir_core.steam_api_manager import SteamAPIManager

from .config import DOWNLOAD_DIR, STEAMCMD_PATH
from .logging_config import SensitiveDataFilter, get_logger

logger = get_logger(__name__)

FOCUSED_STYLE = "#ff5faf"
UNFOCUSED_STYLE = "#585858"


def describe(error: BaseException) -> str:
    """One-line text for an unexpected worker error; some exceptions have an empty str()."""
    return str(error) or type(error).__name__


class StateMessage(Message):
    """Carries one state-machine message into the app's queue."""

    def __init__(self, msg) -> None:
        super().__init__()
        self.msg = msg


class Spinner(Static):
    FRAMES = "|/-\\"

    def on_mount(self) -> None:
        self._frame = 0
        self.update(self.FRAMES[0])
        self.set_interval(0.1, self._advance)

    def _advance(self) -> None:
        self._frame = (self._frame + 1) % len(self.FRAMES)
        self.update(self.FRAMES[self._frame])


class NoirApp(App[None]):
    CSS = """
    Screen {
        layers: base overlay;
        padding: 1 2;
    }
    #search-view, #details-view {
        layer: base;
    }
    .error {
        color: red;
        text-style: bold;
        height: auto;
    }
    #details-title {
        text-style: bold underline;
        margin-bottom: 1;
    }
    #details-description {
        text-style: italic;
        margin: 1 0;
    }
    #overlay {
        layer: overlay;
        width: 100%;
        height: 100%;
        align: center middle;
        display: none;
    }
    #login-box, #waiting-box {
        border: solid $foreground;
        padding: 1;
        width: auto;
        height: auto;
    }
    #login-input {
        width: 24;
    }
    #spinner {
        color: #ff5faf;
        width: 2;
    }
    """
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("ctrl+c", "quit_key", "Quit", priority=True),
    ]

    def __init__(
        self,
        *,
        catalog_cache: CatalogCache,
        details_manager: SteamAPIManager,
        credentials: CredentialStore | None = None,
        downloader: DownloadOrchestrator | None = None,
        log_filter: SensitiveDataFilter | None = None,
    ) -> None:
        super().__init__()
        self.session_state: SessionState = initial_state()
        self.catalog_cache = catalog_cache
        self.details_manager = details_manager
        self.credentials = credentials or CredentialStore()
        self.downloader = downloader or DownloadOrchestrator(steamcmd=STEAMCMD_PATH, base_dir=DOWNLOAD_DIR or None)
        self.log_filter = log_filter
        self._rendered: SessionState | None = None
        self._suggested_catalog = None

    def compose(self) -> ComposeResult:
        with Vertical(id="search-view"):
            yield Static("", id="search-error", classes="error")
            yield Label("Select a game:")
            yield Input(placeholder="Game title", max_length=100, id="search-input")
        with Vertical(id="details-view"):
            yield Static("", id="details-error", classes="error")
            yield Static("", id="details-title")
            yield Static("", id="details-meta")
            yield Static("", id="details-description")
            yield Static("", id="details-platforms")
        with Vertical(id="overlay"):
            with Horizontal(id="login-box"):
                yield Label("Steam username: ")
                yield Input(max_length=20, id="login-input")
            with Horizontal(id="waiting-box"):
                yield Spinner(id="spinner")
                yield Label(" Downloading...")

    def on_mount(self) -> None:
        self.render_state()
        for command in initial_commands():
            self.execute(command)

    # Messages in

    def action_quit_key(self) -> None:
        self.post_message(StateMessage(KeyPressed(QUIT_KEY)))

    def on_key(self, event: events.Key) -> None:
        if self.session_state.view is not View.DETAILS or isinstance(self.focused, Input):
            return
        event.stop()
        self.post_message(StateMessage(KeyPressed(event.key)))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "search-input":
            self.post_message(StateMessage(SearchSubmitted(event.value)))
        elif event.input.id == "login-input":
            self.post_message(StateMessage(LoginSubmitted(event.value)))

    def on_state_message(self, event: StateMessage) -> None:
        self.session_state, commands = update(self.session_state, event.msg)
        self.render_state()
        for command in commands:
            self.execute(command)

    # Commands out

    def execute(self, command: Command) -> None:
        if isinstance(command, LoadCatalog):
            self.run_worker(self._load_catalog(), group="catalog", exit_on_error=False)
        elif isinstance(command, FetchDetails):
            self.run_worker(self._fetch_details(command.appid), group="details", exit_on_error=False)
        elif isinstance(command, ResolveUsername):
            self.run_worker(self._resolve_username(), group="credentials", exit_on_error=False)
        elif isinstance(command, SaveUsername):
            self.run_worker(self._save_username(command.username), group="credentials", exit_on_error=False)
        elif isinstance(command, Download):
            self.run_worker(self._download(command), group="download", exit_on_error=False)
        elif isinstance(command, ClearErrorAfter):
            token = command.token
            self.set_timer(command.delay, lambda: self.post_message(StateMessage(ErrorCleared(token))))
        elif isinstance(command, Quit):
            self.exit()
        else:
            raise TypeError(f"Unhandled command: {command!r}")

    async def _load_catalog(self) -> None:
        try:
            catalog = await self.catalog_cache.load()
        except FetchError as e:
            logger.error(f"Failed to load catalog: {e}")
            self.post_message(StateMessage(TaskFailed(TaskKind.CATALOG, e)))
            return
        except Exception as e:
            logger.exception("Unexpected error loading catalog: %s", e)
            self.post_message(StateMessage(TaskFailed(TaskKind.CATALOG, FetchError(describe(e), e))))
            return
        self.post_message(StateMessage(CatalogLoaded(catalog)))

    async def _fetch_details(self, appid: int) -> None:
        try:
            details = await self.details_manager.fetch_app_details(appid)
        except FetchError as e:
            logger.warning(f"Failed to fetch details for {appid}: {e}")
            self.post_message(StateMessage(TaskFailed(TaskKind.DETAILS, e, appid=appid)))
            return
        except Exception as e:
            logger.exception("Unexpected error fetching details for %s: %s", appid, e)
            error = FetchError(describe(e), e)
            self.post_message(StateMessage(TaskFailed(TaskKind.DETAILS, error, appid=appid)))
            return
        self.post_message(StateMessage(DetailsLoaded(appid, details)))

    async def _resolve_username(self) -> None:
        username = await asyncio.to_thread(self.credentials.get_cached_username)
        self.post_message(StateMessage(UsernameResolved(username)))

    async def _save_username(self, username: str) -> None:
        if self.log_filter:
            self.log_filter.remember(username)
        if not await asyncio.to_thread(self.credentials.save_username, username):
            logger.warning("Username was not cached; you will be asked again next time")

    async def _download(self, command: Download) -> None:
        try:
            await self.downloader.download(command.appid, command.platform, command.username)
        except ProcessError as e:
            logger.error(f"Download of {command.appid} failed: {e}")
            self.post_message(StateMessage(TaskFailed(TaskKind.DOWNLOAD, e, appid=command.appid)))
            return
        except Exception as e:
            logger.exception("Unexpected error downloading %s: %s", command.appid, e)
            error = ProcessError(describe(e), original_error=e)
            self.post_message(StateMessage(TaskFailed(TaskKind.DOWNLOAD, error, appid=command.appid)))
            return
        self.post_message(StateMessage(DownloadDone(command.appid)))

    # Rendering

    def render_state(self) -> None:
        state = self.session_state
        previous = self._rendered
        self._rendered = state

        if state.catalog is not self._suggested_catalog:
            self._suggested_catalog = state.catalog
            self.query_one("#search-input", Input).suggester = SuggestFromList(state.catalog.names, case_sensitive=True)

        error = state.error_message or ""
        self.query_one("#search-error", Static).update(Text(error))
        self.query_one("#details-error", Static).update(Text(error))

        in_details = state.view is View.DETAILS
        self.query_one("#search-view").display = not in_details
        self.query_one("#details-view").display = in_details
        self.query_one("#overlay").display = in_details and (state.login_prompt_active or state.waiting)
        self.query_one("#login-box").display = state.login_prompt_active
        self.query_one("#waiting-box").display = state.waiting and not state.login_prompt_active

        if not in_details:
            self.query_one("#search-input", Input).focus()
            return

        self._render_details(state.details)
        self._render_platforms(state)

        login_input = self.query_one("#login-input", Input)
        if state.login_prompt_active:
            if previous is None or not previous.login_prompt_active:
                login_input.value = ""
            login_input.focus()
        else:
            self.set_focus(None)

    def _render_details(self, details: GameDetails | None) -> None:
        title = self.query_one("#details-title", Static)
        meta = self.query_one("#details-meta", Static)
        description = self.query_one("#details-description", Static)

        if details is None:
            title.update("Loading...")
            meta.update("")
            description.update("")
            return

        title.update(Text(details.title))
        lines = []
        if details.developers:
            lines.append(f"Developer: {', '.join(details.developers)}")
        if details.release_date.date:
            prefix = "Coming soon" if details.release_date.coming_soon else "Released"
            lines.append(f"{prefix}: {details.release_date.date}")
        if details.website:
            lines.append(details.website)
        meta.update(Text("\n".join(lines)))
        description.update(Text(details.description))

    def _render_platforms(self, state: SessionState) -> None:
        widget = self.query_one("#details-platforms", Static)
        if state.details is None:
            widget.update("")
            return

        platforms = state.platforms
        if not platforms:
            widget.update(Text("No downloadable platforms", style=UNFOCUSED_STYLE))
            return

        buttons = Text()
        for i, platform in enumerate(platforms):
            if i:
                buttons.append(" | ")
            style = FOCUSED_STYLE if i == state.focus_index else UNFOCUSED_STYLE
            buttons.append(f"[ {platform.label} ]", style=style)
        widget.update(buttons)
