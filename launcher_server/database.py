# launcher_server/database.py

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from launcher_server.core import config
from launcher_server.models import Base
from launcher_server.models.game import Game


logger = logging.getLogger(__name__)

is_sqlite = config.DATABASE_URL.startswith("sqlite")

if is_sqlite and ":memory:" not in config.DATABASE_URL and config.DATABASE_URL != "sqlite://":
    config.DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    config.DATABASE_URL,
    connect_args={"check_same_thread": False} if is_sqlite else {}
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def seed_catalog(db):
    """
    Inserts the default catalog when the games table is empty.
    """
    if db.query(Game).first() is not None:
        return 0
    for fields in config.DEFAULT_GAMES:
        db.add(Game(**fields))
    db.commit()
    logger.info("Seeded catalog with %d default game(s)", len(config.DEFAULT_GAMES))
    return len(config.DEFAULT_GAMES)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
