# launcher_server/api/games.py

from fastapi import APIRouter, Depends

from launcher_server.api.auth import get_repository
from launcher_server.core.catalog import list_games, get_game, game_to_dict
from launcher_server.core.repository import SqlRepository


router = APIRouter(prefix="/api/games")


@router.get("")
def read_games(repo: SqlRepository = Depends(get_repository)):
    return [game_to_dict(game) for game in list_games(repo)]


@router.get("/{game_id}")
def read_game(game_id: int, repo: SqlRepository = Depends(get_repository)):
    return game_to_dict(get_game(repo, game_id))
