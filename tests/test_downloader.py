import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from noir_core.constants import Platform
from noir_core.downloader import DownloadOrchestrator, render_script
from noir_core.exceptions import ProcessError


def test_render_script_content():
    script = render_script(400, Platform.LINUX, "/games/400", "gordon")

    assert script == (
        "@ShutdownOnFailedCommand 1\n"
        "@NoPromptForPassword 1\n"
        "@sSteamCmdForcePlatformType linux\n"
        "force_install_dir /games/400\n"
        "login gordon\n"
        "app_update 400 validate\n"
        "quit\n"
    )


def test_render_script_is_deterministic():
    a = render_script(620, Platform.WINDOWS, Path("/tmp/620"), "alyx")
    b = render_script(620, Platform.WINDOWS, Path("/tmp/620"), "alyx")
    assert a.encode() == b.encode()
    assert a != render_script(620, Platform.MACOS, Path("/tmp/620"), "alyx")


def test_install_dir_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert DownloadOrchestrator().install_dir_for(400) == tmp_path / "400"
    assert DownloadOrchestrator(base_dir="/srv/games").install_dir_for(400) == Path("/srv/games/400")


def make_process(returncode=0, output=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(output, None))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


@pytest.mark.asyncio
async def test_download_runs_steamcmd_with_script(tmp_path):
    seen = {}
    proc = make_process()

    async def fake_exec(*args, **kwargs):
        seen["args"] = args
        seen["script"] = Path(args[2]).read_text()
        return proc

    orchestrator = DownloadOrchestrator(steamcmd="/opt/steamcmd", base_dir=tmp_path)
    with patch("noir_core.downloader.asyncio.create_subprocess_exec", side_effect=fake_exec):
        await orchestrator.download(400, Platform.MACOS, "gordon")

    assert seen["args"][:2] == ("/opt/steamcmd", "+runscript")
    assert seen["script"] == render_script(400, Platform.MACOS, tmp_path / "400", "gordon")
    # temp script is cleaned up
    assert not Path(seen["args"][2]).exists()


@pytest.mark.asyncio
async def test_non_zero_exit_raises_process_error():
    proc = make_process(returncode=5, output=b"Login Failure: Invalid Password\n")

    with patch("noir_core.downloader.asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
        with pytest.raises(ProcessError) as exc_info:
            await DownloadOrchestrator().download(400, Platform.LINUX, "gordon")

    assert exc_info.value.returncode == 5


@pytest.mark.asyncio
async def test_spawn_failure_raises_process_error():
    with patch(
        "noir_core.downloader.asyncio.create_subprocess_exec",
        AsyncMock(side_effect=FileNotFoundError("steamcmd")),
    ):
        with pytest.raises(ProcessError) as exc_info:
            await DownloadOrchestrator().download(400, Platform.LINUX, "gordon")

    assert isinstance(exc_info.value.original_error, FileNotFoundError)


@pytest.mark.asyncio
async def test_cancelled_download_kills_process():
    proc = make_process()

    async def hang():
        await asyncio.sleep(3600)

    proc.communicate = AsyncMock(side_effect=hang)

    with patch("noir_core.downloader.asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
        task = asyncio.create_task(DownloadOrchestrator().download(400, Platform.LINUX, "gordon"))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    proc.kill.assert_called_once()
