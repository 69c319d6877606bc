"""
Schemas for HabitFlow

Each Pydantic model describes one structure held by the habit store or returned
by the engine. Habits, the user profile and the assessment are persisted as
JSON blobs; everything else is derived on demand.
These schemas are also used for validation and for the /schema endpoint.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Literal

from days import day_key

Category = Literal["Health", "Productivity", "Learning", "Mindfulness", "Career"]
Difficulty = Literal["easy", "medium", "hard"]
Rarity = Literal["common", "rare", "epic", "legendary"]

CATEGORIES = ["Health", "Productivity", "Learning", "Mindfulness", "Career"]

GOAL_MIN = 1
GOAL_MAX = 480
DEFAULT_GOAL = 30


def _check_day_key(value: str) -> str:
    return day_key(value)


# Core entities
class Habit(BaseModel):
    id: str = Field(..., description="Opaque id derived from the creation time")
    title: str = Field(..., min_length=1, description="Habit display name")
    description: str = Field("", description="Free-text description")
    category: Category = Field("Health", description="Habit category")
    difficulty: Difficulty = Field("medium")
    goal: int = Field(DEFAULT_GOAL, ge=GOAL_MIN, le=GOAL_MAX, description="Daily goal in minutes")
    completed: bool = Field(False, description="Whether the habit is done today")
    completed_dates: List[str] = Field(
        default_factory=list,
        description="ISO dates YYYY-MM-DD with a completion, unique and sorted",
    )
    streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0, description="Highest streak ever reached")
    total_completions: int = Field(0, ge=0)
    created_at: str = Field(..., description="ISO date YYYY-MM-DD the habit was created")

    @field_validator("completed_dates")
    @classmethod
    def _unique_sorted_dates(cls, v: List[str]) -> List[str]:
        return sorted({_check_day_key(d) for d in v})

    @field_validator("created_at")
    @classmethod
    def _valid_created_at(cls, v: str) -> str:
        return _check_day_key(v)


class Badge(BaseModel):
    id: str = Field(..., description="Badge catalog id")
    name: str
    description: str
    icon: str
    rarity: Rarity = Field("common")
    earned_at: str = Field(..., description="ISO date YYYY-MM-DD the badge was earned")


class UserProfile(BaseModel):
    id: str = Field("1")
    name: str = Field("Alex Johnson")
    email: str = Field("alex@example.com")
    join_date: str = Field(..., description="ISO date YYYY-MM-DD")
    timezone: Optional[str] = Field(None, description="Informational only, days are local")
    preferences: Dict[str, Any] = Field(default_factory=dict)
    total_habits: int = Field(0)
    completed_today: int = Field(0)
    longest_streak: int = Field(0)
    badges: List[Badge] = Field(default_factory=list, description="Append-only list of earned badges")
    level: int = Field(1)
    xp: int = Field(0)
    xp_in_level: int = Field(0, description="XP progress within current level")
    xp_for_next: int = Field(100, description="XP needed to reach next level from start of level")


class Assessment(BaseModel):
    goals: Optional[List[str]] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    challenges: Optional[List[str]] = None
    lifestyle: Optional[str] = None
    profession: Optional[str] = None
    time_available: Optional[str] = None
    motivation: Optional[str] = None
    work_schedule: Optional[str] = None
    sleep_schedule: Optional[str] = None
    activity_level: Optional[str] = None
    bad_habits: Optional[str] = Field(None, description="Free text")
    stress_level: Optional[int] = Field(None, ge=1, le=10, description="Self-rated stress 1-10")


class Recommendation(BaseModel):
    id: str
    title: str
    description: str
    category: Category
    difficulty: Difficulty
    estimated_time: str = Field(..., description="e.g. '30 minutes'")
    benefits: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    priority: int = Field(0, description="Higher ranks first")
    reason: str = Field("", description="Why this was suggested for this assessment")


# Command inputs
class HabitIn(BaseModel):
    title: str
    description: str = ""
    category: Category = "Health"
    difficulty: Difficulty = "medium"
    goal: int = Field(DEFAULT_GOAL, ge=GOAL_MIN, le=GOAL_MAX)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v


class HabitUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    goal: Optional[int] = Field(None, ge=GOAL_MIN, le=GOAL_MAX)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    timezone: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None


# Derived views
class DayProgress(BaseModel):
    completed: int = Field(0)
    total: int = Field(0)
    percentage: int = Field(0)


class WeekDay(BaseModel):
    day: str = Field(..., description="Mon..Sun")
    date: str = Field(..., description="ISO date YYYY-MM-DD")
    completed: bool = Field(False, description="Every habit existing that day was completed")
    percentage: int = Field(0)


class CategoryStats(BaseModel):
    category: Category
    habits: int = Field(0)
    completions: int = Field(0)
    average_streak: int = Field(0)


class AnalyticsSummary(BaseModel):
    completion_rate: int = Field(0, description="Percent of habits completed at least once")
    average_streak: int = Field(0)
    total_completions: int = Field(0)
    consistency_score: int = Field(0)
    weekly_growth: int = Field(0)
    overall_progress: int = Field(0)
    categories: List[CategoryStats] = Field(default_factory=list)


class BadgeAward(BaseModel):
    badges: List[Badge] = Field(default_factory=list, description="Badges newly earned, catalog order")
    primary: Optional[Badge] = Field(None, description="Badge to surface as a notification")


class MutationResult(BaseModel):
    habit: Optional[Habit] = None
    profile: UserProfile
    award: BadgeAward = Field(default_factory=BadgeAward)


class Snapshot(BaseModel):
    habits: List[Habit] = Field(default_factory=list)
    userProfile: UserProfile
    assessment: Assessment = Field(default_factory=Assessment)
    exportDate: str = Field(..., description="ISO datetime of the export")


# Export schema metadata for /schema endpoint consumers
SCHEMA_MODELS = {
    "habit": Habit.model_json_schema(),
    "badge": Badge.model_json_schema(),
    "userprofile": UserProfile.model_json_schema(),
    "assessment": Assessment.model_json_schema(),
    "recommendation": Recommendation.model_json_schema(),
    "snapshot": Snapshot.model_json_schema(),
}
