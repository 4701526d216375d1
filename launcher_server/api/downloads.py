# launcher_server/api/downloads.py

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends

from launcher_server.api.auth import get_current_user, get_repository
from launcher_server.core.ledger import DownloadLedger, record_to_dict
from launcher_server.core.repository import SqlRepository
from launcher_server.models.user import User


router = APIRouter(prefix="/api/downloads")


class DownloadCreateRequest(BaseModel):
    game_id: int = Field(alias="gameId")


class DownloadStatusRequest(BaseModel):
    download_id: str = Field(alias="downloadId")
    status: str
    progress: int | None = None
    error: str | None = None


class DownloadCompleteRequest(BaseModel):
    download_id: str = Field(alias="downloadId")
    install_path: str | None = Field(default=None, alias="installPath")


def get_ledger(repo: SqlRepository = Depends(get_repository)) -> DownloadLedger:
    return DownloadLedger(repo)


@router.get("")
def list_downloads(
    current_user: User = Depends(get_current_user),
    ledger: DownloadLedger = Depends(get_ledger),
):
    return [record_to_dict(record) for record in ledger.list_for_user(current_user.id)]


@router.post("/create")
def create_download(
    req: DownloadCreateRequest,
    current_user: User = Depends(get_current_user),
    ledger: DownloadLedger = Depends(get_ledger),
):
    return record_to_dict(ledger.create(current_user.id, req.game_id))


@router.post("/status")
def report_status(
    req: DownloadStatusRequest,
    current_user: User = Depends(get_current_user),
    ledger: DownloadLedger = Depends(get_ledger),
):
    record = ledger.report(current_user.id, req.download_id, req.status, req.progress, req.error)
    return record_to_dict(record)


@router.post("/complete")
def complete_download(
    req: DownloadCompleteRequest,
    current_user: User = Depends(get_current_user),
    ledger: DownloadLedger = Depends(get_ledger),
):
    record = ledger.complete(current_user.id, req.download_id, req.install_path)
    return {"message": "Installation completed", "download": record_to_dict(record)}
