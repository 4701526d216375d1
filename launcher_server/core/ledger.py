# launcher_server/core/ledger.py

import logging
from datetime import datetime
from enum import Enum

from launcher_server.core.accounts import grant_library
from launcher_server.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from launcher_server.core.repository import SqlRepository
from launcher_server.core.utils import archive_link
from launcher_server.models.download import DownloadRecord


logger = logging.getLogger(__name__)


class DownloadStatus(str, Enum):
    READY = "ready"
    DOWNLOADING = "downloading"
    DOWNLOADED = "downloaded"
    EXTRACTING = "extracting"
    INSTALLED = "installed"
    FAILED = "failed"


# Completion is reported by the client, so installed is reachable from every
# live state; a failed record can only be retried.
TRANSITIONS = {
    DownloadStatus.READY: {
        DownloadStatus.DOWNLOADING, DownloadStatus.FAILED, DownloadStatus.INSTALLED,
    },
    DownloadStatus.DOWNLOADING: {
        DownloadStatus.DOWNLOADING, DownloadStatus.DOWNLOADED,
        DownloadStatus.FAILED, DownloadStatus.INSTALLED,
    },
    DownloadStatus.DOWNLOADED: {
        DownloadStatus.EXTRACTING, DownloadStatus.FAILED, DownloadStatus.INSTALLED,
    },
    DownloadStatus.EXTRACTING: {
        DownloadStatus.INSTALLED, DownloadStatus.FAILED,
    },
    DownloadStatus.FAILED: {
        DownloadStatus.DOWNLOADING,
    },
    DownloadStatus.INSTALLED: set(),
}


def record_to_dict(record: DownloadRecord) -> dict:
    return {
        "id": record.id,
        "userId": record.user_id,
        "gameId": record.game_id,
        "gameName": record.game_name,
        "fileName": record.file_name,
        "executable": record.executable,
        "downloadLink": record.download_link,
        "status": record.status,
        "progress": record.progress,
        "error": record.error,
        "installPath": record.install_path,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
        "installedAt": record.installed_at.isoformat() if record.installed_at else None,
    }


def parse_status(value: str) -> DownloadStatus:
    try:
        return DownloadStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown download status: {value}")


class DownloadLedger:
    """
    Server half of the download/install state machine.

    The client drives every transition after create(); the ledger only
    checks that the move is legal and that the record belongs to the caller.
    """

    def __init__(self, repo: SqlRepository):
        self.repo = repo

    def create(self, user_id: str, game_id: int) -> DownloadRecord:
        game = self.repo.get_game(game_id)
        if game is None:
            raise NotFoundError("Game not found")
        if self.repo.get_user(user_id) is None:
            raise NotFoundError("User not found")

        link = archive_link(game.file_name) if game.file_name else game.download_url
        if not link:
            raise NotFoundError("Game has no downloadable archive")

        record = self.repo.add_record(
            user_id=user_id,
            game_id=game.id,
            game_name=game.name,
            file_name=game.file_name,
            executable=game.executable,
            download_link=link,
            status=DownloadStatus.READY.value,
            progress=0,
        )
        game.downloads = (game.downloads or 0) + 1
        self.repo.commit()
        logger.info("Created download %s for user %s game %s", record.id, user_id, game.id)
        return record

    def list_for_user(self, user_id: str) -> list[DownloadRecord]:
        return self.repo.list_records(user_id)

    def get_owned(self, user_id: str, download_id: str) -> DownloadRecord:
        record = self.repo.get_record(download_id)
        if record is None:
            raise NotFoundError("Download not found")
        if record.user_id != user_id:
            raise PermissionDeniedError("Unauthorized")
        return record

    def _move(self, record: DownloadRecord, target: DownloadStatus):
        current = DownloadStatus(record.status)
        if target not in TRANSITIONS[current]:
            raise ConflictError(f"Cannot move download from {current.value} to {target.value}")
        if current != target:
            logger.info("Download %s: %s -> %s", record.id, current.value, target.value)
        record.status = target.value

    def report(self, user_id: str, download_id: str, status: str,
               progress: int | None = None, error: str | None = None) -> DownloadRecord:
        """
        Records an intermediate phase reported by the client.
        Completion goes through complete() so the library is granted.
        """
        target = parse_status(status)
        if target == DownloadStatus.INSTALLED:
            raise ValidationError("Use the complete endpoint to finish an install")

        record = self.get_owned(user_id, download_id)
        self._move(record, target)

        if progress is not None:
            record.progress = max(0, min(100, int(progress)))
        elif target in (DownloadStatus.DOWNLOADED, DownloadStatus.EXTRACTING):
            record.progress = 100

        record.error = error if target == DownloadStatus.FAILED else None
        self.repo.commit()
        return record

    def complete(self, user_id: str, download_id: str, install_path: str) -> DownloadRecord:
        if not install_path:
            raise ValidationError("installPath is required")

        record = self.get_owned(user_id, download_id)
        if record.status != DownloadStatus.INSTALLED.value:
            self._move(record, DownloadStatus.INSTALLED)
            record.install_path = install_path
            record.installed_at = datetime.now()
            record.progress = 100
            record.error = None

        if grant_library(self.repo, user_id, record.game_id):
            logger.info("Granted game %s to user %s", record.game_id, user_id)
        self.repo.commit()
        return record
