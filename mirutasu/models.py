from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .clock import utcnow
from .db import Base

ANIME_STATUSES = ("watching", "completed", "planned", "dropped")
WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


# ---------- Auth ----------
class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(20), unique=True, nullable=False)
    hashed_password = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    oauth_accounts = relationship("OAuthAccount", back_populates="user", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    anime = relationship("Anime", back_populates="user", cascade="all, delete-orphan")
    games = relationship("UserGame", back_populates="user", cascade="all, delete-orphan")
    recurring_tasks = relationship("RecurringTask", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    __tablename__ = "sessions"
    id = Column(String(64), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")


class OAuthAccount(Base):
    __tablename__ = "oauth_accounts"
    __table_args__ = (UniqueConstraint("provider", "provider_user_id"),)
    id = Column(String(36), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    provider = Column(String(50), nullable=False)
    provider_user_id = Column(String(200), nullable=False)
    access_token = Column(Text)
    refresh_token = Column(Text)
    expires_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="oauth_accounts")


# ---------- Tasks ----------
class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_user_date", "user_id", "created_at"),
        Index("idx_tasks_type", "type"),
        Index("idx_tasks_completed", "completed"),
        # one generated task per origin and day
        UniqueConstraint("user_id", "external_id", name="uq_tasks_user_external"),
    )
    id = Column(String(36), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    type = Column(String(20), nullable=False)           # anime | game-daily | book-release
    title = Column(String(200), nullable=False)
    description = Column(String(500))
    priority = Column(String(10), default="medium", nullable=False)  # high | medium | low
    deadline = Column(DateTime)
    completed = Column(Boolean, default=False, nullable=False)
    source = Column(String(20), default="manual", nullable=False)    # manual | api | scraping | recurring
    external_id = Column(String(200))
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="tasks")


class RecurringTask(Base):
    __tablename__ = "recurring_tasks"
    id = Column(String(36), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    task_template = Column(JSON, nullable=False)
    recurrence_type = Column(String(10), nullable=False)  # daily | weekly | custom
    recurrence_data = Column(JSON, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    last_generated = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="recurring_tasks")


# ---------- Anime ----------
class Anime(Base):
    __tablename__ = "anime"
    __table_args__ = (Index("anime_user_status_idx", "user_id", "status"),)
    id = Column(String(36), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(300), nullable=False)
    mal_id = Column(Integer)                    # MyAnimeList id
    image_url = Column(String(500))
    status = Column(String(20), default="planned", nullable=False, index=True)
    current_episode = Column(Integer, default=0, nullable=False)
    total_episodes = Column(Integer)
    rating = Column(Integer)                    # 1-10
    notes = Column(Text)
    meta = Column("metadata", JSON)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="anime")


# ---------- Games ----------
class GameMaster(Base):
    __tablename__ = "game_masters"
    id = Column(String(50), primary_key=True)   # 'fgo', 'genshin', ...
    name = Column(String(200), nullable=False)
    platform = Column(String(10), nullable=False)
    daily_tasks = Column(JSON, nullable=False, default=list)
    icon_url = Column(String(500))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    players = relationship("UserGame", back_populates="game")


class UserGame(Base):
    __tablename__ = "user_games"
    user_id = Column(String(32), ForeignKey("users.id"), primary_key=True)
    game_id = Column(String(50), ForeignKey("game_masters.id"), primary_key=True)
    active = Column(Boolean, default=True, nullable=False)
    settings = Column(JSON)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="games")
    game = relationship("GameMaster", back_populates="players")
