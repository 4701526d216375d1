# launcher_server/models/download.py

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from . import Base


class DownloadRecord(Base):
    __tablename__ = "downloads"

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String, index=True, nullable=False)
    game_id = Column(Integer, index=True, nullable=False)
    game_name = Column(String, nullable=False)
    file_name = Column(String, nullable=True)
    executable = Column(String, nullable=True)
    download_link = Column(String, nullable=False)
    status = Column(String, default="ready", nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    error = Column(Text, nullable=True)
    install_path = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    installed_at = Column(DateTime, nullable=True)
