# launcher_server/api/library.py

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends

from launcher_server.api.auth import get_current_user, get_repository
from launcher_server.core.accounts import add_to_library, list_library
from launcher_server.core.catalog import game_to_dict
from launcher_server.core.repository import SqlRepository
from launcher_server.models.user import User


router = APIRouter(prefix="/api/library")


class LibraryAddRequest(BaseModel):
    game_id: int = Field(alias="gameId")


@router.get("")
def read_library(
    current_user: User = Depends(get_current_user),
    repo: SqlRepository = Depends(get_repository),
):
    return [game_to_dict(game) for game in list_library(repo, current_user.id)]


@router.post("/add")
def add_library_game(
    req: LibraryAddRequest,
    current_user: User = Depends(get_current_user),
    repo: SqlRepository = Depends(get_repository),
):
    library = add_to_library(repo, current_user.id, req.game_id)
    return {"message": "Game added", "library": library}
