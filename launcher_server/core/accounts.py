# launcher_server/core/accounts.py

import logging
from passlib.context import CryptContext

from launcher_server.core import config
from launcher_server.core.errors import ValidationError, ConflictError, AuthError, NotFoundError
from launcher_server.core.repository import SqlRepository
from launcher_server.models.user import User
from launcher_server.models.game import Game


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def user_to_public(repo: SqlRepository, user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "isAdmin": bool(user.is_admin),
        "library": sorted(repo.library_game_ids(user.id)),
        "installPath": user.install_path,
    }


# -------------------------------
# Registration & login
# -------------------------------

def register_user(repo: SqlRepository, username: str, email: str, password: str) -> User:
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise ValidationError("Missing fields")

    if repo.user_taken(username, email):
        raise ConflictError("User already exists")

    user = repo.add_user(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        is_admin=username.lower() in config.ADMIN_USERNAMES,
        install_path=config.DEFAULT_INSTALL_PATH,
    )
    repo.commit()
    logger.info("Registered user %s (admin=%s)", user.username, user.is_admin)
    return user


def authenticate_user(repo: SqlRepository, username_or_email: str, password: str) -> User:
    if not username_or_email or not password:
        raise ValidationError("Missing credentials")

    user = repo.find_user_by_login(username_or_email)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid credentials")
    return user


def get_user(repo: SqlRepository, user_id: str) -> User:
    user = repo.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


# -------------------------------
# Library
# -------------------------------

def add_to_library(repo: SqlRepository, user_id: str, game_id: int) -> list[int]:
    """
    Explicit add from the store page. Unlike grant_library this refuses
    games the user already owns.
    """
    get_user(repo, user_id)
    if repo.get_game(game_id) is None:
        raise NotFoundError("Game not found")
    if not repo.add_library_entry(user_id, game_id):
        raise ConflictError("Game already in library")
    repo.commit()
    return sorted(repo.library_game_ids(user_id))


def grant_library(repo: SqlRepository, user_id: str, game_id: int) -> bool:
    return repo.add_library_entry(user_id, game_id)


def list_library(repo: SqlRepository, user_id: str) -> list[Game]:
    get_user(repo, user_id)
    return repo.list_library_games(user_id)
