# launcher_server/api/admin.py

from pydantic import BaseModel
from fastapi import APIRouter, Depends, UploadFile, File

from launcher_server.api.auth import get_repository, require_admin
from launcher_server.core.catalog import add_game, update_game, remove_game, refresh_archive_size, game_to_dict
from launcher_server.core.repository import SqlRepository
from launcher_server.core.utils import save_archive, format_bytes


# -------------------------------
# Catalog administration
# -------------------------------

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


class GameFields(BaseModel):
    """
    Request schema for add-game and update-game.
    Fields left out of an update keep their stored value.
    """
    name: str | None = None
    emoji: str | None = None
    description: str | None = None
    downloadUrl: str | None = None
    fileName: str | None = None
    executable: str | None = None
    sizeLabel: str | None = None


@router.post("/add-game")
def create_game(req: GameFields, repo: SqlRepository = Depends(get_repository)):
    game = add_game(repo, req.model_dump(exclude_unset=True))
    return {"message": "Game added", "game": game_to_dict(game)}


@router.put("/update-game/{game_id}")
def edit_game(game_id: int, req: GameFields, repo: SqlRepository = Depends(get_repository)):
    game = update_game(repo, game_id, req.model_dump(exclude_unset=True))
    return {"message": "Game updated", "game": game_to_dict(game)}


@router.delete("/delete-game/{game_id}")
def delete_game(game_id: int, repo: SqlRepository = Depends(get_repository)):
    remove_game(repo, game_id)
    return {"message": "Game deleted"}


# -------------------------------
# Archive upload
# -------------------------------

upload_router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


@upload_router.post("/upload-game")
def upload_game(game: UploadFile = File(...), repo: SqlRepository = Depends(get_repository)):
    saved_path = save_archive(game)
    refresh_archive_size(repo, saved_path.name)
    return {
        "message": "Game file uploaded",
        "file": saved_path.name,
        "size": format_bytes(saved_path.stat().st_size),
    }
