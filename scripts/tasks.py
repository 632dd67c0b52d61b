import datetime
import os
import pathlib
import shutil
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent / "src"))

from noir_core.cache import resolve_cache_dir  # noqa: E402
from noir_core.constants import CATALOG_CACHE_FILE, CATALOG_TTL, USERNAME_CACHE_FILE, USERNAME_TTL  # noqa: E402


def show_cache():
    print("📦 Inspecting noir cache...")
    cache_dir = resolve_cache_dir()
    print(f"📁 {cache_dir}")
    for name, ttl in ((CATALOG_CACHE_FILE, CATALOG_TTL), (USERNAME_CACHE_FILE, USERNAME_TTL)):
        path = cache_dir / name
        if not path.exists():
            print(f"⚠️  {name}: missing")
            continue
        age = datetime.datetime.now().timestamp() - path.stat().st_mtime
        status = "fresh" if age < ttl else "stale"
        print(f"✅ {name}: {path.stat().st_size} bytes, {datetime.timedelta(seconds=int(age))} old ({status})")


def clear_cache():
    print("🧹 Removing noir cache files...")
    cache_dir = resolve_cache_dir()
    for name in (CATALOG_CACHE_FILE, USERNAME_CACHE_FILE):
        (cache_dir / name).unlink(missing_ok=True)
    print("✅ noir cache cleared")


def clean_cache():
    print("🧹 Cleaning Python cache files...")
    for p in pathlib.Path(".").rglob("__pycache__"):
        shutil.rmtree(p)
    for p in pathlib.Path(".").rglob("*.pyc"):
        p.unlink()
    print("✅ Python cache cleaned")


def clean_venv():
    print("🧹 Removing virtual environment...")
    shutil.rmtree(".venv", ignore_errors=True)
    print("✅ Virtual environment removed")


def clean_test():
    print("🧹 Cleaning test artifacts...")
    for p in [".pytest_cache", "htmlcov"]:
        shutil.rmtree(p, ignore_errors=True)
    pathlib.Path(".coverage").unlink(missing_ok=True)
    print("✅ Test artifacts cleaned")


def clean_build():
    print("🧹 Cleaning build artifacts...")
    for p in ["dist", "build"]:
        shutil.rmtree(p, ignore_errors=True)
    for p in pathlib.Path(".").rglob("*.egg-info"):
        shutil.rmtree(p)
    print("✅ Build artifacts cleaned")


def check_env():
    print("🔍 Checking environment configuration...")
    if os.path.exists(".env"):
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found (defaults will be used)")
    steamcmd = os.getenv("STEAMCMD_PATH", "steamcmd")
    if shutil.which(steamcmd):
        print(f"✅ {steamcmd} found")
    else:
        print(f"⚠️  {steamcmd} not found on PATH; downloads will fail")


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/tasks.py <command>")
        sys.exit(1)

    command = sys.argv[1]

    commands = {
        "show-cache": show_cache,
        "clear-cache": clear_cache,
        "clean-cache": clean_cache,
        "clean-venv": clean_venv,
        "clean-test": clean_test,
        "clean-build": clean_build,
        "check-env": check_env,
    }

    if command in commands:
        commands[command]()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
