import asyncio
import logging
import os
import tempfile
from pathlib import Path

from .constants import STEAMCMD_BINARY, Platform
from .exceptions import ProcessError

logger = logging.getLogger(__name__)

SCRIPT_TEMPLATE = """\
@ShutdownOnFailedCommand 1
@NoPromptForPassword 1
@sSteamCmdForcePlatformType {platform}
force_install_dir {install_dir}
login {username}
app_update {appid} validate
quit
"""

# Lines of steamcmd output kept for the log when a download fails
OUTPUT_TAIL_LINES = 20


def render_script(appid: int, platform: Platform, install_dir: str | Path, username: str) -> str:
    return SCRIPT_TEMPLATE.format(
        platform=platform.value,
        install_dir=install_dir,
        username=username,
        appid=appid,
    )


class DownloadOrchestrator:
    """
    Drives steamcmd with a generated run script.

    The download runs as an asyncio subprocess, so awaiting it never blocks the
    event loop and cancelling the awaiting task kills steamcmd.
    """

    def __init__(self, steamcmd: str = STEAMCMD_BINARY, base_dir: str | Path | None = None):
        self.steamcmd = steamcmd
        self.base_dir = base_dir

    def install_dir_for(self, appid: int) -> Path:
        base = Path(self.base_dir) if self.base_dir else Path(os.getcwd())
        return base / str(appid)

    def write_script(self, appid: int, platform: Platform, username: str) -> Path:
        script = render_script(appid, platform, self.install_dir_for(appid), username)
        fd, path = tempfile.mkstemp(prefix="steamcmd-download", suffix=".txt")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(script)
        return Path(path)

    async def download(self, appid: int, platform: Platform, username: str) -> None:
        """
        Runs ``steamcmd +runscript <script>`` and waits for it to exit.

        Raises:
            ProcessError: if the script cannot be written, steamcmd cannot be started,
                or it exits with a non-zero status.
        """
        try:
            script_path = self.write_script(appid, platform, username)
        except OSError as e:
            raise ProcessError(f"Could not write steamcmd script: {e}", original_error=e) from e

        logger.info(f"Downloading app {appid} for {platform.value} into {self.install_dir_for(appid)}")
        try:
            await self._run(script_path)
        finally:
            script_path.unlink(missing_ok=True)
        logger.info(f"Download of app {appid} finished")

    async def _run(self, script_path: Path) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.steamcmd,
                "+runscript",
                str(script_path),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise ProcessError(f"Could not start {self.steamcmd}: {e}", original_error=e) from e

        try:
            output, _ = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            raise

        if proc.returncode != 0:
            tail = output.decode("utf-8", errors="replace").splitlines()[-OUTPUT_TAIL_LINES:]
            logger.error(f"{self.steamcmd} failed with exit code {proc.returncode}:\n" + "\n".join(tail))
            raise ProcessError(f"{self.steamcmd} failed", returncode=proc.returncode)
