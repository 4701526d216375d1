# launcher_app/services/launcher.py

import asyncio
import functools
import logging
import subprocess
from pathlib import Path

from launcher_app.services import api
from launcher_app.services.errors import LauncherClientError
from launcher_app.services.installer import Installer, ProgressCallback, game_folder_name
from launcher_app.services.session import LauncherSession


logger = logging.getLogger(__name__)


def _as_result(func):
    """
    Turns the wrapped coroutine into the {success, data|error} shape the UI expects.
    """
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            data = await func(self, *args, **kwargs)
        except LauncherClientError as e:
            logger.error("%s failed: %s", func.__name__, e)
            return {"success": False, "error": str(e)}
        except Exception as e:
            logger.exception("%s failed", func.__name__)
            return {"success": False, "error": str(e)}
        return {"success": True, "data": data}
    return wrapper


class Launcher:
    """
    Operations exposed to the desktop UI.
    Holds one explicit session; nothing about the user lives at module level.
    """

    def __init__(self, session: LauncherSession | None = None, installer: Installer | None = None):
        self.session = session or LauncherSession()
        self.installer = installer or Installer(self.session)

    async def _call(self, func, *args):
        return await asyncio.to_thread(func, self.session, *args)

    # -------------------------------
    # Account
    # -------------------------------

    @_as_result
    async def register(self, username, email, password):
        result = await self._call(api.register_user, username, email, password)
        return result["user"]

    @_as_result
    async def login(self, username, password):
        return await self._call(api.login_user, username, password)

    @_as_result
    async def logout(self):
        self.session.sign_out()
        return None

    @_as_result
    async def get_user_data(self):
        return self.session.to_dict()

    @_as_result
    async def change_install_path(self, path):
        if not path:
            raise LauncherClientError("No folder selected")
        target = Path(path).expanduser()
        await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        self.session.install_path = target
        return {"path": str(target)}

    # -------------------------------
    # Catalog & library
    # -------------------------------

    @_as_result
    async def get_games(self):
        return await self._call(api.list_games)

    @_as_result
    async def get_library(self):
        return await self._call(api.list_library)

    @_as_result
    async def add_to_library(self, game_id):
        return await self._call(api.add_to_library, game_id)

    # -------------------------------
    # Downloads
    # -------------------------------

    @_as_result
    async def get_downloads(self):
        return await self._call(api.list_downloads)

    @_as_result
    async def create_download(self, game_id):
        return await self._call(api.create_download, game_id)

    @_as_result
    async def download_game(self, download_link, game_id, game_name, on_progress: ProgressCallback | None = None):
        path = await self.installer.download(
            download_link, self.session.install_path, game_name, game_id, on_progress
        )
        return {"filePath": str(path), "fileName": path.name}

    @_as_result
    async def extract_game(self, file_path, game_folder):
        extract_path = await self.installer.extract(
            Path(file_path), Path(self.session.install_path) / game_folder_name(game_folder)
        )
        return {"extractPath": str(extract_path)}

    @_as_result
    async def complete_download(self, download_id, install_path, game_name, executable):
        return await self.installer.finalize(download_id, Path(install_path), game_name, executable)

    @_as_result
    async def install_game(self, game_id, on_progress: ProgressCallback | None = None):
        record = await self._call(api.create_download, game_id)
        install_path = await self.installer.install(record, on_progress)
        return {"downloadId": record["id"], "installPath": str(install_path)}

    # -------------------------------
    # Launch
    # -------------------------------

    @_as_result
    async def launch_game(self, executable, game_path):
        game_path = Path(game_path)
        exe_path = game_path / executable
        if not exe_path.is_file():
            raise LauncherClientError(f"Executable not found: {exe_path}")

        try:
            process = subprocess.Popen([str(exe_path)], cwd=str(game_path))
        except OSError as e:
            raise LauncherClientError(f"Could not launch {exe_path.name}: {e}") from e
        logger.info("Launched %s (pid %s)", exe_path, process.pid)
        return {"message": "Game launched", "pid": process.pid}
