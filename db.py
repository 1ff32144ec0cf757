# db.py
"""
Database models and session management for the video recommendation service.
A single database connection is used, defaulting to PostgreSQL when the
environment variable is present.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    sessionmaker,
    Session,
)

# ==============================================================================
# --- Database Configuration ---
# ==============================================================================

# 1. Prioritize PostgreSQL using its environment variable.
DATABASE_URL = os.getenv("POSTGRES_DATABASE_URL")
connect_args = {}

# 2. Fallback to a local SQLite database ONLY if PostgreSQL is not configured.
if not DATABASE_URL:
    print("INFO: POSTGRES_DATABASE_URL not found, falling back to local SQLite database.")
    DATABASE_URL = "sqlite:///./app.db"
    connect_args = {"check_same_thread": False}

engine = create_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, future=True
)


# ==============================================================================
# --- ORM Model Definitions ---
# ==============================================================================

class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class User(Base):
    """Represents a viewer. Only the fields the recommendation feed needs are mapped."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="The unique external identifier for the user.",
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    watch_history: Mapped[List[WatchHistoryEntry]] = relationship(
        "WatchHistoryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="WatchHistoryEntry.watched_at.desc()",
    )


class Channel(Base):
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    icon: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    owner: Mapped[User] = relationship("User")


class Video(Base):
    """A video or short in the catalog. Deleted videos are only flagged, never removed."""
    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(
        String(64), default="General", index=True
    )
    url: Mapped[str] = mapped_column(String(512))
    thumbnail: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    duration: Mapped[float] = mapped_column(Float, default=0.0)
    is_short: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    channel_id: Mapped[int] = mapped_column(
        ForeignKey("channels.id", ondelete="CASCADE"), index=True
    )
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    channel: Mapped[Channel] = relationship("Channel")

    def to_dict(self) -> Dict[str, Any]:
        """The read-only record handed to the ML engine."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "views": self.views,
            "is_short": self.is_short,
        }


class WatchHistoryEntry(Base):
    """One entry of a user's watch history, with playback progress in seconds."""
    __tablename__ = "watch_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), index=True
    )
    watched_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    progress: Mapped[float] = mapped_column(Float, default=0.0)
    user: Mapped[User] = relationship("User", back_populates="watch_history")
    video: Mapped[Video] = relationship("Video")


# ==============================================================================
# --- Session Management ---
# ==============================================================================

def get_session() -> Iterator[Session]:
    """Provides a single database session for a request as a FastAPI dependency."""
    db: Optional[Session] = None
    try:
        db = SessionLocal()
        yield db
    finally:
        if db:
            db.close()
