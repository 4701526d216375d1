# launcher_server/core/catalog.py

import logging

from launcher_server.core.errors import ValidationError, NotFoundError
from launcher_server.core.repository import SqlRepository
from launcher_server.core.utils import archive_size_label
from launcher_server.models.game import Game


logger = logging.getLogger(__name__)

# Request keys accepted by add/update, mapped to column names
EDITABLE_FIELDS = {
    "name": "name",
    "emoji": "emoji",
    "description": "description",
    "downloadUrl": "download_url",
    "fileName": "file_name",
    "executable": "executable",
    "sizeLabel": "size_label",
}


def game_to_dict(game: Game) -> dict:
    return {
        "id": game.id,
        "name": game.name,
        "emoji": game.emoji,
        "description": game.description,
        "downloadUrl": game.download_url,
        "fileName": game.file_name,
        "executable": game.executable,
        "sizeLabel": game.size_label,
        "downloads": game.downloads,
        "createdAt": game.created_at.isoformat() if game.created_at else None,
    }


def list_games(repo: SqlRepository) -> list[Game]:
    return repo.list_games()


def get_game(repo: SqlRepository, game_id: int) -> Game:
    game = repo.get_game(game_id)
    if game is None:
        raise NotFoundError("Game not found")
    return game


def _columns(fields: dict) -> dict:
    return {
        column: fields[key]
        for key, column in EDITABLE_FIELDS.items()
        if key in fields and fields[key] is not None
    }


def add_game(repo: SqlRepository, fields: dict) -> Game:
    values = _columns(fields)

    if not (values.get("name") or "").strip():
        raise ValidationError("Game name is required")
    if not values.get("download_url") and not values.get("file_name"):
        raise ValidationError("Either downloadUrl or fileName is required")
    if values.get("file_name"):
        values["size_label"] = archive_size_label(values["file_name"])

    game = repo.add_game(**values)
    repo.commit()
    logger.info("Added game %s (%s)", game.id, game.name)
    return game


def update_game(repo: SqlRepository, game_id: int, fields: dict) -> Game:
    game = get_game(repo, game_id)
    values = _columns(fields)

    if "name" in values and not values["name"].strip():
        raise ValidationError("Game name cannot be empty")
    if values.get("file_name") and values["file_name"] != game.file_name:
        values["size_label"] = archive_size_label(values["file_name"])

    for column, value in values.items():
        setattr(game, column, value)
    repo.commit()
    logger.info("Updated game %s", game.id)
    return game


def remove_game(repo: SqlRepository, game_id: int):
    game = get_game(repo, game_id)
    repo.delete_game(game)
    repo.commit()
    logger.info("Deleted game %s", game_id)


def refresh_archive_size(repo: SqlRepository, file_name: str) -> int:
    """
    Recomputes sizeLabel for every game served from `file_name`,
    after the stored archive has been replaced by an upload.
    """
    games = repo.list_games_by_file(file_name)
    if not games:
        return 0
    size_label = archive_size_label(file_name)
    for game in games:
        game.size_label = size_label
    repo.commit()
    logger.info("Refreshed size of %d game(s) using %s", len(games), file_name)
    return len(games)
