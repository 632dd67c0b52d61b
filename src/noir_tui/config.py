import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")  # defaults to <cache-root>/noir/noir.log
STEAMCMD_PATH = os.getenv("STEAMCMD_PATH", "steamcmd")
DOWNLOAD_DIR = os.getenv("DOWNLOAD_DIR", "")  # defaults to the working directory
