# launcher_server/core/config.py

import os
from pathlib import Path
from dotenv import load_dotenv


load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _split_env_list(value: str) -> set[str]:
    return {item.strip().lower() for item in value.split(",") if item.strip()}


# -------------------------------
# Storage
# -------------------------------

DATA_DIR = Path(os.getenv("LAUNCHER_DATA_DIR", "data"))
GAMES_STORAGE = Path(os.getenv("LAUNCHER_GAMES_STORAGE", str(DATA_DIR / "games-storage")))
DATABASE_URL = os.getenv(
    "LAUNCHER_DATABASE_URL",
    f"sqlite:///{(DATA_DIR / 'launcher.db').as_posix()}",
)

# Uploaded archives above this size are rejected
MAX_UPLOAD_BYTES = int(os.getenv("LAUNCHER_MAX_UPLOAD_BYTES", str(50 * 1024 ** 3)))


# -------------------------------
# Auth
# -------------------------------

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "mlx-launcher-change-me")
ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10

# Tokens live between one week and one month
ACCESS_TOKEN_EXPIRE_DAYS = min(max(int(os.getenv("LAUNCHER_TOKEN_EXPIRE_DAYS", "30")), 7), 30)

ADMIN_USERNAMES = _split_env_list(os.getenv("LAUNCHER_ADMIN_USERNAMES", ""))


# -------------------------------
# Server
# -------------------------------

HOST = os.getenv("LAUNCHER_HOST", "0.0.0.0")
PORT = int(os.getenv("LAUNCHER_PORT", "3001"))
PUBLIC_URL = os.getenv("LAUNCHER_PUBLIC_URL", f"http://localhost:{PORT}").rstrip("/")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("LAUNCHER_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LAUNCHER_LOG_LEVEL", "INFO").upper()

# Optional route groups and startup behaviour
ENABLE_ADMIN_ROUTES = _env_flag("LAUNCHER_ENABLE_ADMIN_ROUTES", "true")
ENABLE_UPLOADS = _env_flag("LAUNCHER_ENABLE_UPLOADS", "true")
SEED_CATALOG = _env_flag("LAUNCHER_SEED_CATALOG", "true")

DEFAULT_INSTALL_PATH = os.getenv(
    "LAUNCHER_DEFAULT_INSTALL_PATH",
    str(Path(os.getenv("APPDATA") or Path.home()) / "MLXGames"),
)

DEFAULT_GAMES = [
    {
        "name": "my summer car",
        "emoji": "💻",
        "description": "test",
        "download_url": "https://drive.google.com/uc?export=download&id=1kHwV-CIXxmYIhI6YVofFA4X83bzhdzDl",
        "executable": "setup.exe",
    }
]
