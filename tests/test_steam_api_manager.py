import asyncio
import json

import aiohttp
import pytest

from conftest import FakeResponse
from noir_core.constants import Platform
from noir_core.exceptions import DetailsUnavailable, FetchError
from noir_core.models import GameDetails, PlatformSupport, ReleaseDate
from noir_core.steam_api_manager import SteamAPIManager

PORTAL = {
    "type": "game",
    "name": "Portal",
    "steam_appid": 400,
    "short_description": "Portal is a new single player game from Valve.",
    "developers": ["Valve"],
    "publishers": ["Valve"],
    "platforms": {"windows": True, "mac": False, "linux": True},
    "release_date": {"coming_soon": False, "date": "10 Oct, 2007"},
    "website": "http://www.whatistheorangebox.com/",
}


def envelope(appid, payload, success=True):
    return json.dumps({str(appid): {"success": success, "data": payload}}).encode()


@pytest.mark.asyncio
async def test_fetch_unwraps_both_levels(make_session):
    session = make_session(FakeResponse(200, envelope(400, PORTAL)))
    manager = SteamAPIManager(session)

    details = await manager.fetch_app_details(400)

    assert details == GameDetails(
        appid=400,
        title="Portal",
        description="Portal is a new single player game from Valve.",
        developers=("Valve",),
        release_date=ReleaseDate(coming_soon=False, date="10 Oct, 2007"),
        website="http://www.whatistheorangebox.com/",
        platforms=PlatformSupport(macos=False, linux=True, windows=True),
    )
    assert details.supported_platforms == [Platform.LINUX, Platform.WINDOWS]
    assert session.get.call_args.kwargs["params"] == {"appids": "400"}


@pytest.mark.asyncio
async def test_success_false_is_an_error(make_session):
    body = json.dumps({"400": {"success": False}}).encode()
    manager = SteamAPIManager(make_session(FakeResponse(200, body)))

    with pytest.raises(DetailsUnavailable) as exc_info:
        await manager.fetch_app_details(400)

    assert exc_info.value.appid == 400
    assert isinstance(exc_info.value, FetchError)


def test_unwrap_requires_matching_outer_key():
    with pytest.raises(FetchError):
        SteamAPIManager.unwrap({"620": {"success": True, "data": PORTAL}}, 400)


def test_unwrap_requires_data():
    with pytest.raises(FetchError):
        SteamAPIManager.unwrap({"400": {"success": True}}, 400)


def test_unwrap_rejects_non_object_body():
    with pytest.raises(FetchError):
        SteamAPIManager.unwrap([], 400)


def test_unwrap_tolerates_wrong_nested_types():
    payload = {"name": "Portal", "steam_appid": 400, "release_date": "2007", "platforms": "all"}
    details = SteamAPIManager.unwrap({"400": {"success": True, "data": payload}}, 400)

    assert details.title == "Portal"
    assert details.release_date == ReleaseDate()
    assert details.platforms == PlatformSupport()


def test_unwrap_bad_appid_raises_fetch_error():
    with pytest.raises(FetchError):
        SteamAPIManager.unwrap({"400": {"success": True, "data": {"steam_appid": "abc"}}}, 400)


@pytest.mark.asyncio
async def test_invalid_json_raises_fetch_error(make_session):
    manager = SteamAPIManager(make_session(FakeResponse(200, b"null-ish garbage")))

    with pytest.raises(FetchError):
        await manager.fetch_app_details(400)


@pytest.mark.asyncio
async def test_network_error_raises_fetch_error(make_session):
    manager = SteamAPIManager(make_session(aiohttp.ClientConnectionError("reset")))

    with pytest.raises(FetchError):
        await manager.fetch_app_details(400)


@pytest.mark.asyncio
async def test_http_error_raises_fetch_error(make_session):
    manager = SteamAPIManager(make_session(FakeResponse(429, b"")))

    with pytest.raises(FetchError):
        await manager.fetch_app_details(400)


@pytest.mark.asyncio
async def test_timeout_raises_fetch_error(make_session):
    manager = SteamAPIManager(make_session(asyncio.TimeoutError()))

    with pytest.raises(FetchError) as exc_info:
        await manager.fetch_app_details(400)

    assert "timed out" in str(exc_info.value)
