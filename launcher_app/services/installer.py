# launcher_app/services/installer.py

import asyncio
import inspect
import logging
import re
import time
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

import aiofiles
import aiofiles.os
import httpx

from launcher_app import config
from launcher_app.services import api
from launcher_app.services.errors import ApiError, TransferError, ExtractionError
from launcher_app.services.session import LauncherSession
from launcher_app.services.shortcuts import ShortcutCreator, get_shortcut_creator


logger = logging.getLogger(__name__)


@dataclass
class ProgressEvent:
    game_id: int | None
    downloaded: int
    total: int
    percent: int

    def to_dict(self) -> dict:
        return {
            "gameId": self.game_id,
            "progress": self.percent,
            "downloaded": self.downloaded,
            "total": self.total,
        }


ProgressCallback = Callable[[ProgressEvent], Awaitable[Any] | Any]


def compute_percent(downloaded: int, total: int) -> int:
    if total <= 0:
        return 0
    return min(100, int(downloaded / total * 100 + 0.5))


def archive_file_name(game_name: str, timestamp_ms: int | None = None) -> str:
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    base = re.sub(r"\s+", "_", game_name.strip())
    return f"{base}_{stamp}.zip"


def game_folder_name(game_name: str) -> str:
    folder = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", game_name).strip().strip(".")
    return folder or "game"


async def _emit(callback: ProgressCallback | None, event: ProgressEvent):
    if callback is None:
        return
    result = callback(event)
    if inspect.isawaitable(result):
        await result


async def _discard(path: Path):
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove partial download %s: %s", path, e)


def _describe_transfer_error(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"Download failed with status {error.response.status_code}"
    return f"Download failed: {error}" if str(error) else f"Download failed: {type(error).__name__}"


class Installer:
    """
    Client half of the download/install workflow.

    download -> extract -> finalize are usable one at a time (the UI calls
    them step by step) or chained by install(), which also reports each
    phase to the server ledger.
    """

    def __init__(
        self,
        session: LauncherSession,
        client: httpx.AsyncClient | None = None,
        shortcut_creator: ShortcutCreator | None = None,
        chunk_size: int = config.DOWNLOAD_CHUNK_SIZE,
    ):
        self.session = session
        self.client = client
        self.shortcut_creator = shortcut_creator
        self.chunk_size = chunk_size

    # -------------------------------
    # Transfer
    # -------------------------------

    async def download(
        self,
        link: str,
        destination_dir: Path,
        game_name: str,
        game_id: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Path:
        """
        Streams `link` into destination_dir and returns the archive path.

        Bytes land in a .tmp sibling first and are renamed only once the
        stream ends, so the final path never holds a partial file. On any
        failure the .tmp file is removed and TransferError is raised.
        """
        destination_dir = Path(destination_dir)
        await aiofiles.os.makedirs(destination_dir, exist_ok=True)

        final_path = destination_dir / archive_file_name(game_name)
        temp_path = final_path.with_name(final_path.name + ".tmp")

        client = self.client or httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT, follow_redirects=True)
        downloaded = 0
        logger.info("Downloading %s -> %s", link, final_path)
        try:
            async with client.stream("GET", link) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length") or 0)

                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in response.aiter_bytes(self.chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)
                        await _emit(on_progress, ProgressEvent(
                            game_id=game_id,
                            downloaded=downloaded,
                            total=total,
                            percent=compute_percent(downloaded, total),
                        ))

            await aiofiles.os.replace(temp_path, final_path)
        except (httpx.HTTPError, OSError) as e:
            await _discard(temp_path)
            logger.error("Transfer of %s failed after %d bytes: %s", link, downloaded, e)
            raise TransferError(_describe_transfer_error(e)) from e
        except Exception:
            await _discard(temp_path)
            raise
        finally:
            if self.client is None:
                await client.aclose()

        logger.info("Downloaded %d bytes to %s", downloaded, final_path)
        return final_path

    # -------------------------------
    # Extraction
    # -------------------------------

    async def extract(self, archive_path: Path, destination_dir: Path) -> Path:
        """
        Unpacks a zip archive and deletes it afterwards.
        Not atomic: a failure part-way leaves the files written so far.
        """
        archive_path = Path(archive_path)
        destination_dir = Path(destination_dir)

        def _extract():
            destination_dir.mkdir(parents=True, exist_ok=True)
            root = destination_dir.resolve()
            with zipfile.ZipFile(archive_path) as zf:
                for member in zf.infolist():
                    target = (root / member.filename).resolve()
                    if target != root and root not in target.parents:
                        raise ExtractionError(f"Unsafe path in archive: {member.filename}")
                    zf.extract(member, root)

        logger.info("Extracting %s -> %s", archive_path, destination_dir)
        try:
            await asyncio.to_thread(_extract)
        except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
            logger.error("Extraction of %s failed: %s", archive_path, e)
            raise ExtractionError(f"Extraction failed: {e}") from e

        try:
            await aiofiles.os.remove(archive_path)
        except OSError as e:
            logger.warning("Could not delete archive %s: %s", archive_path, e)
        return destination_dir

    # -------------------------------
    # Completion
    # -------------------------------

    async def finalize(
        self,
        download_id: str,
        install_path: Path,
        game_name: str,
        executable: str | None,
        create_shortcut: bool = True,
    ) -> dict:
        """
        Creates the desktop shortcut, then reports the install to the server,
        which marks the ledger entry installed and grants the game.
        """
        install_path = Path(install_path)
        if create_shortcut and executable:
            creator = self.shortcut_creator or get_shortcut_creator()
            result = await asyncio.to_thread(
                creator.create_shortcut, game_name, install_path / executable, install_path
            )
            if not result.success:
                logger.warning("Shortcut for %s skipped: %s", game_name, result.error)

        return await asyncio.to_thread(api.complete_download, self.session, download_id, install_path)

    async def report(self, download_id: str, status: str, progress: int | None = None, error: str | None = None):
        """
        Best-effort ledger update; a failed report never fails the install.
        """
        try:
            await asyncio.to_thread(api.report_download_status, self.session, download_id, status, progress, error)
        except ApiError as e:
            logger.warning("Could not record %s for download %s: %s", status, download_id, e)

    async def install(self, record: dict, on_progress: ProgressCallback | None = None) -> Path:
        download_id = record["id"]
        game_name = record["gameName"]
        install_root = Path(self.session.install_path)

        await self.report(download_id, "downloading", progress=0)
        try:
            archive = await self.download(
                record["downloadLink"], install_root, game_name, record.get("gameId"), on_progress
            )
        except TransferError as e:
            await self.report(download_id, "failed", error=str(e))
            raise

        await self.report(download_id, "downloaded", progress=100)
        await self.report(download_id, "extracting")
        try:
            extract_path = await self.extract(archive, install_root / game_folder_name(game_name))
        except ExtractionError as e:
            await self.report(download_id, "failed", error=str(e))
            raise

        try:
            await self.finalize(download_id, extract_path, game_name, record.get("executable"))
        except ApiError as e:
            await self.report(download_id, "failed", error=str(e))
            raise
        logger.info("Installed %s into %s", game_name, extract_path)
        return extract_path
