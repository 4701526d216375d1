# launcher_server/core/utils.py

import os
from pathlib import Path
from urllib.parse import quote
from fastapi import UploadFile

from launcher_server.core import config
from launcher_server.core.errors import ValidationError, NotFoundError, InternalError


SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]
UPLOAD_CHUNK_SIZE = 1024 * 1024


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {SIZE_UNITS[exponent]}"


def storage_dir() -> Path:
    path = Path(config.GAMES_STORAGE)
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_archive(file_name: str) -> Path:
    """
    Maps a stored archive name to its path inside the games storage.
    Names that point outside the storage directory are treated as missing.
    """
    root = storage_dir().resolve()
    candidate = (root / file_name).resolve()
    if candidate.parent != root or not candidate.is_file():
        raise NotFoundError("Game file not found")
    return candidate


def archive_size_label(file_name: str) -> str:
    try:
        path = resolve_archive(file_name)
    except NotFoundError:
        raise ValidationError("Game file not found in storage")
    return format_bytes(path.stat().st_size)


def archive_link(file_name: str) -> str:
    return f"{config.PUBLIC_URL}/games-files/{quote(file_name)}"


def save_archive(upload: UploadFile) -> Path:
    """
    Streams an uploaded archive into storage, replacing any archive of the
    same name only once the whole upload fits under the size limit.
    """
    file_name = Path(upload.filename or "").name
    if not file_name:
        raise ValidationError("No file provided")
    if file_name in (".", ".."):
        raise ValidationError("Invalid file name")

    target = storage_dir() / file_name
    partial = target.with_name(f".{file_name}.part")
    written = 0
    try:
        with partial.open("wb") as buffer:
            while True:
                chunk = upload.file.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > config.MAX_UPLOAD_BYTES:
                    raise ValidationError("File too large")
                buffer.write(chunk)
        os.replace(partial, target)
    except ValidationError:
        partial.unlink(missing_ok=True)
        raise
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise InternalError(f"Could not store {file_name}: {e}") from e
    return target
