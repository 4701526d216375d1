# launcher_server/core/repository.py

from sqlalchemy import or_
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from launcher_server.models.user import User, LibraryEntry
from launcher_server.models.game import Game
from launcher_server.models.download import DownloadRecord


class SqlRepository:
    """
    Storage boundary for the catalog, accounts and the download ledger.

    The ledger state machine and the account helpers only talk to this
    object, never to the session, so swapping the backing store means
    writing another class with the same methods. Every mutating call is
    flushed but not committed; callers commit once per request.
    """

    def __init__(self, db: Session):
        self.db = db

    def commit(self):
        self.db.commit()

    # -------------------------------
    # Users
    # -------------------------------

    def get_user(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def find_user_by_login(self, username_or_email: str) -> User | None:
        return (
            self.db.query(User)
            .filter(or_(User.username == username_or_email, User.email == username_or_email))
            .first()
        )

    def user_taken(self, username: str, email: str) -> bool:
        return (
            self.db.query(User)
            .filter(or_(User.username == username, User.email == email))
            .first()
            is not None
        )

    def add_user(self, **fields) -> User:
        user = User(**fields)
        self.db.add(user)
        self.db.flush()
        return user

    # -------------------------------
    # Catalog
    # -------------------------------

    def list_games(self) -> list[Game]:
        return self.db.query(Game).order_by(Game.id).all()

    def count_games(self) -> int:
        return self.db.query(Game).count()

    def get_game(self, game_id: int) -> Game | None:
        return self.db.get(Game, game_id)

    def list_games_by_file(self, file_name: str) -> list[Game]:
        return self.db.query(Game).filter(Game.file_name == file_name).order_by(Game.id).all()

    def add_game(self, **fields) -> Game:
        game = Game(**fields)
        self.db.add(game)
        self.db.flush()
        return game

    def delete_game(self, game: Game):
        self.db.delete(game)
        self.db.flush()

    # -------------------------------
    # Library
    # -------------------------------

    def library_game_ids(self, user_id: str) -> set[int]:
        rows = self.db.query(LibraryEntry.game_id).filter(LibraryEntry.user_id == user_id).all()
        return {row[0] for row in rows}

    def add_library_entry(self, user_id: str, game_id: int) -> bool:
        """
        Returns False when the entry already existed, including one committed
        by a concurrent request since this session last looked.
        """
        stmt = (
            sqlite_insert(LibraryEntry.__table__)
            .values(user_id=user_id, game_id=game_id)
            .on_conflict_do_nothing(index_elements=["user_id", "game_id"])
        )
        return self.db.execute(stmt).rowcount > 0

    def list_library_games(self, user_id: str) -> list[Game]:
        return (
            self.db.query(Game)
            .join(LibraryEntry, LibraryEntry.game_id == Game.id)
            .filter(LibraryEntry.user_id == user_id)
            .order_by(Game.id)
            .all()
        )

    # -------------------------------
    # Download ledger
    # -------------------------------

    def add_record(self, **fields) -> DownloadRecord:
        record = DownloadRecord(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def get_record(self, download_id: str) -> DownloadRecord | None:
        return self.db.get(DownloadRecord, download_id)

    def list_records(self, user_id: str) -> list[DownloadRecord]:
        return (
            self.db.query(DownloadRecord)
            .filter(DownloadRecord.user_id == user_id)
            .order_by(DownloadRecord.created_at)
            .all()
        )
