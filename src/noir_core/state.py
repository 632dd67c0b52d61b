"""
The view state machine.

``update`` folds one message into the session state and returns the commands
the front end must run. It does no I/O itself: every command is executed
elsewhere and answers with at most one message, which is folded in turn.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from .constants import ERROR_CLEAR_DELAY, Platform
from .exceptions import InputError, NoirException
from .models import Catalog, GameDetails

QUIT_KEY = "ctrl+c"


class View(Enum):
    SEARCH = "search"
    DETAILS = "details"


class TaskKind(Enum):
    CATALOG = "catalog"
    DETAILS = "details"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class SessionState:
    view: View = View.SEARCH
    catalog: Catalog = field(default_factory=Catalog)
    details: GameDetails | None = None
    pending_appid: int | None = None
    error_message: str | None = None
    error_token: int = 0
    waiting: bool = False
    focus_index: int = 0
    login_prompt_active: bool = False

    @property
    def platforms(self) -> list[Platform]:
        if self.details is None:
            return []
        return self.details.supported_platforms

    @property
    def focused_platform(self) -> Platform | None:
        platforms = self.platforms
        if not platforms:
            return None
        return platforms[self.focus_index]

    @property
    def loading_details(self) -> bool:
        return self.view is View.DETAILS and self.details is None


# Messages


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class SearchSubmitted:
    text: str


@dataclass(frozen=True)
class LoginSubmitted:
    username: str


@dataclass(frozen=True)
class CatalogLoaded:
    catalog: Catalog


@dataclass(frozen=True)
class DetailsLoaded:
    appid: int
    details: GameDetails


@dataclass(frozen=True)
class UsernameResolved:
    username: str | None


@dataclass(frozen=True)
class DownloadDone:
    appid: int


@dataclass(frozen=True)
class TaskFailed:
    kind: TaskKind
    error: NoirException
    appid: int | None = None


@dataclass(frozen=True)
class ErrorCleared:
    token: int


Message = (
    KeyPressed
    | SearchSubmitted
    | LoginSubmitted
    | CatalogLoaded
    | DetailsLoaded
    | UsernameResolved
    | DownloadDone
    | TaskFailed
    | ErrorCleared
)


# Commands


@dataclass(frozen=True)
class LoadCatalog:
    pass


@dataclass(frozen=True)
class FetchDetails:
    appid: int


@dataclass(frozen=True)
class ResolveUsername:
    pass


@dataclass(frozen=True)
class SaveUsername:
    username: str


@dataclass(frozen=True)
class Download:
    appid: int
    platform: Platform
    username: str


@dataclass(frozen=True)
class ClearErrorAfter:
    token: int
    delay: float = ERROR_CLEAR_DELAY


@dataclass(frozen=True)
class Quit:
    pass


Command = LoadCatalog | FetchDetails | ResolveUsername | SaveUsername | Download | ClearErrorAfter | Quit

Result = tuple[SessionState, list[Command]]


def initial_state() -> SessionState:
    return SessionState()


def initial_commands() -> list[Command]:
    return [LoadCatalog()]


def show_error(state: SessionState, message: str) -> Result:
    token = state.error_token + 1
    return replace(state, error_message=message, error_token=token), [ClearErrorAfter(token)]


def update(state: SessionState, msg: Message) -> Result:
    if isinstance(msg, KeyPressed) and msg.key == QUIT_KEY:
        return state, [Quit()]

    if isinstance(msg, KeyPressed):
        if state.view is View.SEARCH:
            # the search field consumes its own keys
            return state, []
        return _update_details_keys(state, msg.key)

    if isinstance(msg, SearchSubmitted):
        return _submit_search(state, msg.text)

    if isinstance(msg, LoginSubmitted):
        return _submit_login(state, msg.username)

    if isinstance(msg, CatalogLoaded):
        return replace(state, catalog=msg.catalog), []

    if isinstance(msg, DetailsLoaded):
        if state.view is not View.DETAILS or msg.appid != state.pending_appid:
            return state, []
        return replace(state, details=msg.details, focus_index=0), []

    if isinstance(msg, UsernameResolved):
        return _resolve_username(state, msg.username)

    if isinstance(msg, DownloadDone):
        return replace(state, waiting=False), []

    if isinstance(msg, TaskFailed):
        return _task_failed(state, msg)

    if isinstance(msg, ErrorCleared):
        if msg.token != state.error_token:
            return state, []
        return replace(state, error_message=None), []

    raise TypeError(f"Unhandled message: {msg!r}")


def _submit_search(state: SessionState, text: str) -> Result:
    if state.view is not View.SEARCH:
        return state, []

    appid = state.catalog.resolve(text)
    if appid is None:
        return show_error(state, str(InputError(text)))

    state = replace(state, view=View.DETAILS, focus_index=0, details=None, pending_appid=appid)
    return state, [FetchDetails(appid)]


def _update_details_keys(state: SessionState, key: str) -> Result:
    if state.login_prompt_active or state.waiting:
        return state, []

    if key == "escape":
        return replace(state, view=View.SEARCH, focus_index=0, details=None, pending_appid=None), []

    count = len(state.platforms)
    if key == "left":
        return replace(state, focus_index=max(0, state.focus_index - 1)), []
    if key == "right":
        return replace(state, focus_index=max(0, min(count - 1, state.focus_index + 1))), []
    if key == "enter" and count:
        return state, [ResolveUsername()]

    return state, []


def _resolve_username(state: SessionState, username: str | None) -> Result:
    if state.view is not View.DETAILS or state.login_prompt_active or state.waiting:
        return state, []

    platform = state.focused_platform
    if platform is None:
        return state, []
    if username is None:
        return replace(state, login_prompt_active=True), []

    return replace(state, waiting=True), [Download(state.pending_appid, platform, username)]


def _submit_login(state: SessionState, username: str) -> Result:
    if state.view is not View.DETAILS or not state.login_prompt_active:
        return state, []

    username = username.strip()
    platform = state.focused_platform
    if not username or platform is None:
        return state, []

    state = replace(state, login_prompt_active=False, waiting=True)
    return state, [SaveUsername(username), Download(state.pending_appid, platform, username)]


def _task_failed(state: SessionState, msg: TaskFailed) -> Result:
    if msg.kind is TaskKind.DOWNLOAD:
        state = replace(state, waiting=False)
    elif msg.kind is TaskKind.DETAILS:
        if msg.appid != state.pending_appid or state.view is not View.DETAILS:
            return state, []
        state = replace(state, view=View.SEARCH, focus_index=0, details=None, pending_appid=None)

    return show_error(state, f"{msg.kind.value} failed: {msg.error}")
