from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .constants import Platform


@dataclass(frozen=True)
class Game:
    appid: int
    name: str


@dataclass(frozen=True)
class Catalog(Mapping):
    """
    Immutable name -> appid index of every app in the store.

    Lookups are exact and case-sensitive. When two apps share a name the one
    read last wins.
    """

    _index: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def from_games(cls, games: Iterable[Game]) -> "Catalog":
        index: dict[str, int] = {}
        for game in games:
            index[game.name] = game.appid
        return cls(MappingProxyType(index))

    @classmethod
    def from_response(cls, data: Any) -> "Catalog":
        """Build a catalog from a decoded ``{applist: {apps: [...]}}`` body."""
        apps = data["applist"]["apps"]
        return cls.from_games(Game(appid=int(app["appid"]), name=str(app["name"])) for app in apps)

    def resolve(self, name: str) -> int | None:
        return self._index.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._index)

    def __getitem__(self, name: str) -> int:
        return self._index[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Catalog(<{len(self)} apps>)"


@dataclass(frozen=True)
class ReleaseDate:
    coming_soon: bool = False
    date: str = ""


@dataclass(frozen=True)
class PlatformSupport:
    macos: bool = False
    linux: bool = False
    windows: bool = False

    def supported(self) -> list[Platform]:
        platforms = []
        if self.macos:
            platforms.append(Platform.MACOS)
        if self.linux:
            platforms.append(Platform.LINUX)
        if self.windows:
            platforms.append(Platform.WINDOWS)
        return platforms


@dataclass(frozen=True)
class GameDetails:
    appid: int
    title: str = ""
    description: str = ""
    developers: tuple[str, ...] = ()
    release_date: ReleaseDate = ReleaseDate()
    website: str = ""
    platforms: PlatformSupport = PlatformSupport()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GameDetails":
        """Decode the ``data`` object of an appdetails response."""
        release = _object(payload.get("release_date"))
        platforms = _object(payload.get("platforms"))
        developers = payload.get("developers", payload.get("developer"))
        if isinstance(developers, str):
            developers = [developers]
        elif not isinstance(developers, list):
            developers = []
        return cls(
            appid=int(payload.get("steam_appid") or 0),
            title=_text(payload.get("name")),
            description=_text(payload.get("short_description")),
            developers=tuple(d for d in developers if isinstance(d, str)),
            release_date=ReleaseDate(
                coming_soon=bool(release.get("coming_soon", False)),
                date=_text(release.get("date")),
            ),
            website=_text(payload.get("website")),
            platforms=PlatformSupport(
                macos=bool(platforms.get("mac", False)),
                linux=bool(platforms.get("linux", False)),
                windows=bool(platforms.get("windows", False)),
            ),
        )

    @property
    def supported_platforms(self) -> list[Platform]:
        return self.platforms.supported()


def _object(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""
