# launcher_server/models/game.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from . import Base


class Game(Base):
    """
    Catalog entry. AUTOINCREMENT keeps ids monotonic, so a deleted game's id
    is never handed out again.
    """
    __tablename__ = "games"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    emoji = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    download_url = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    executable = Column(String, nullable=True)
    size_label = Column(String, nullable=True)
    downloads = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
