# launcher_server/models/user.py

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from . import Base


# -------------------------------
# User Model
# -------------------------------

class User(Base):
    """
    Database model for launcher accounts.
    Stores credentials, the admin flag and the default install location.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    install_path = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    library_entries = relationship(
        "LibraryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
    )


# -------------------------------
# Library Model
# -------------------------------

class LibraryEntry(Base):
    """
    One owned game per row. The unique constraint makes the library a set.
    game_id is not a foreign key so that entries survive catalog deletes.
    """
    __tablename__ = "library_entries"
    __table_args__ = (UniqueConstraint("user_id", "game_id", name="uq_library_user_game"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    game_id = Column(Integer, index=True, nullable=False)
    added_at = Column(DateTime, default=datetime.now)

    user = relationship("User", back_populates="library_entries")
