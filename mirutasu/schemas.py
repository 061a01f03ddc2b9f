from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, PlainSerializer
from pydantic.alias_generators import to_camel

from .clock import iso_utc

TaskType = Literal["anime", "game-daily", "book-release"]
Priority = Literal["high", "medium", "low"]
AnimeStatus = Literal["watching", "completed", "planned", "dropped"]
Platform = Literal["mobile", "pc", "console", "multi"]
RecurrenceType = Literal["daily", "weekly", "custom"]
Weekday = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

HHMM = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

# stored naive UTC; sent with a trailing "Z"
UtcDateTime = Annotated[datetime, PlainSerializer(iso_utc, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM rows."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageOut(CamelModel):
    message: str


class SuccessOut(CamelModel):
    success: bool = True


# ---------- Auth ----------
class SignupIn(CamelModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=8, max_length=100)


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: str
    email: str
    username: str


class AuthOut(CamelModel):
    success: bool = True
    user: UserOut


class MeOut(CamelModel):
    user: UserOut


class ProfileCounts(CamelModel):
    tasks: int
    anime: int
    games: int
    recurring_tasks: int


class ProfileData(UserOut):
    created_at: UtcDateTime
    counts: ProfileCounts


class ProfileOut(CamelModel):
    success: bool = True
    data: ProfileData


# ---------- Tasks ----------
class TaskIn(CamelModel):
    type: TaskType
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    priority: Priority = "medium"
    deadline: Optional[datetime] = None


class TaskPatch(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    priority: Optional[Priority] = None
    deadline: Optional[datetime] = None
    completed: Optional[bool] = None


class TaskOut(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    description: Optional[str] = None
    priority: str
    deadline: Optional[UtcDateTime] = None
    completed: bool
    source: str
    external_id: Optional[str] = None
    meta: Optional[Dict[str, Any]] = Field(default=None, serialization_alias="metadata")
    created_at: UtcDateTime
    updated_at: UtcDateTime


class TaskSummary(CamelModel):
    total: int
    completed: int
    completion_rate: int


class TodayOut(CamelModel):
    tasks: List[TaskOut]
    summary: TaskSummary


class Pagination(CamelModel):
    limit: int
    offset: int
    count: int


class TaskListOut(CamelModel):
    tasks: List[TaskOut]
    pagination: Pagination


class BulkCompleteIn(CamelModel):
    task_ids: List[str] = Field(min_length=1, max_length=50)


class TaskBatchOut(CamelModel):
    tasks: List[TaskOut]
    count: int


class GenerateIn(CamelModel):
    target_date: Optional[date] = Field(default=None, alias="date")


class GeneratedOut(CamelModel):
    tasks: List[TaskOut]
    count: int
    date: str


# ---------- Anime ----------
class AnimeIn(CamelModel):
    title: str = Field(min_length=1)
    mal_id: Optional[int] = None
    image_url: Optional[HttpUrl] = None
    status: AnimeStatus = "planned"
    current_episode: int = Field(default=0, ge=0)
    total_episodes: Optional[int] = Field(default=None, ge=1)
    rating: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None


class AnimePatch(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    mal_id: Optional[int] = None
    image_url: Optional[HttpUrl] = None
    status: Optional[AnimeStatus] = None
    current_episode: Optional[int] = Field(default=None, ge=0)
    total_episodes: Optional[int] = Field(default=None, ge=1)
    rating: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None


class ProgressIn(CamelModel):
    current_episode: int = Field(ge=0)


class AnimeOut(CamelModel):
    id: str
    user_id: str
    title: str
    mal_id: Optional[int] = None
    image_url: Optional[str] = None
    status: str
    current_episode: int
    total_episodes: Optional[int] = None
    rating: Optional[int] = None
    notes: Optional[str] = None
    meta: Optional[Dict[str, Any]] = Field(default=None, serialization_alias="metadata")
    started_at: Optional[UtcDateTime] = None
    completed_at: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class AnimeListOut(CamelModel):
    success: bool = True
    data: List[AnimeOut]


class AnimeItemOut(CamelModel):
    success: bool = True
    data: AnimeOut


class AnimeDeletedOut(CamelModel):
    success: bool = True
    message: str


# ---------- Games ----------
class GameDailyTask(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    priority: Priority = "medium"
    reset_time: Optional[str] = Field(default=None, pattern=HHMM)
    category: Optional[str] = None


class GameOut(CamelModel):
    id: str
    name: str
    platform: Platform
    icon_url: Optional[str] = None
    daily_tasks: List[GameDailyTask] = Field(default_factory=list)


class GameDetailOut(GameOut):
    created_at: UtcDateTime
    updated_at: UtcDateTime


class GamesOut(CamelModel):
    games: List[GameDetailOut]


class NotificationSettings(CamelModel):
    enabled: bool
    before_reset: Optional[int] = None  # minutes before reset time


class UserGameSettings(CamelModel):
    enabled_tasks: List[str]
    custom_priorities: Optional[Dict[str, Priority]] = None
    notifications: Optional[NotificationSettings] = None


class AddUserGameIn(CamelModel):
    game_id: str = Field(min_length=1)
    settings: Optional[UserGameSettings] = None


class UserGameOut(CamelModel):
    game_id: str
    active: bool
    settings: Optional[UserGameSettings] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime
    game: GameOut


class UserGamesOut(CamelModel):
    user_games: List[UserGameOut]


# ---------- Recurring tasks ----------
class TaskTemplate(CamelModel):
    type: TaskType
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    priority: Priority = "medium"
    metadata: Optional[Dict[str, Any]] = None


class RecurrenceData(CamelModel):
    days: Optional[List[Weekday]] = None
    time: Optional[str] = Field(default=None, pattern=HHMM)
    interval: Optional[int] = Field(default=None, ge=1)


class RecurringTaskIn(CamelModel):
    task_template: TaskTemplate
    recurrence_type: RecurrenceType
    recurrence_data: RecurrenceData
    active: bool = True


class RecurringTaskPatch(CamelModel):
    task_template: Optional[TaskTemplate] = None
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_data: Optional[RecurrenceData] = None
    active: Optional[bool] = None


class RecurringTaskOut(CamelModel):
    id: str
    user_id: str
    task_template: TaskTemplate
    recurrence_type: str
    recurrence_data: RecurrenceData
    active: bool
    last_generated: Optional[UtcDateTime] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class RecurringTaskListOut(CamelModel):
    recurring_tasks: List[RecurringTaskOut]


# ---------- Statistics ----------
class RateStats(CamelModel):
    total: int = 0
    completed: int = 0
    completion_rate: int = 0


class WeekStats(RateStats):
    trend: str = "+0%"


class TypeStats(CamelModel):
    anime: RateStats = Field(default_factory=RateStats)
    game_tasks: RateStats = Field(default_factory=RateStats)
    book_releases: RateStats = Field(default_factory=RateStats)


class GameStats(CamelModel):
    active: int = 0


class StatisticsData(CamelModel):
    today: RateStats
    week: WeekStats
    by_type: TypeStats
    games: GameStats


class StatisticsOut(CamelModel):
    success: bool = True
    data: StatisticsData
