# launcher_server/api/files.py

from datetime import datetime
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from launcher_server.api.auth import get_repository
from launcher_server.core import config
from launcher_server.core.repository import SqlRepository
from launcher_server.core.utils import resolve_archive


router = APIRouter()


@router.get("/games-files/{file_name}")
def download_archive(file_name: str):
    """
    Serves a stored game archive as an attachment.
    Raises a 404 error if the file does not exist.
    """
    path = resolve_archive(file_name)
    return FileResponse(
        path=path,
        filename=path.name,
        media_type="application/octet-stream",
    )


@router.get("/api/health")
def health(repo: SqlRepository = Depends(get_repository)):
    return {
        "status": "Server is running",
        "port": config.PORT,
        "gamesAvailable": repo.count_games(),
        "timestamp": datetime.now().isoformat(),
    }
