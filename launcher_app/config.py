# launcher_app/config.py

import os
import sys
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()


def _default_install_path() -> Path:
    if sys.platform == "win32":
        program_files = (
            os.getenv("ProgramFiles(x86)")
            or os.getenv("ProgramFiles")
            or "C:\\Program Files"
        )
        return Path(program_files) / "MLXGames"
    return Path.home() / "MLXGames"


# Base URL of the launcher backend
API_URL = os.getenv("LAUNCHER_API_URL", "http://127.0.0.1:3001").rstrip("/")

INSTALL_PATH = Path(os.getenv("LAUNCHER_INSTALL_PATH", str(_default_install_path())))
DESKTOP_DIR = Path(os.getenv("LAUNCHER_DESKTOP_DIR", str(Path.home() / "Desktop")))

DOWNLOAD_CHUNK_SIZE = int(os.getenv("LAUNCHER_DOWNLOAD_CHUNK_SIZE", str(256 * 1024)))
REQUEST_TIMEOUT = float(os.getenv("LAUNCHER_REQUEST_TIMEOUT", "30"))

COOKIE_PASSWORD = os.getenv("COOKIE_PASSWORD", "mlx-launcher-cookies")
LOG_LEVEL = os.getenv("LAUNCHER_LOG_LEVEL", "INFO").upper()
