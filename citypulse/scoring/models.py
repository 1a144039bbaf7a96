from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    ART = "ART"
    LIVE_MUSIC = "LIVE_MUSIC"
    BARS = "BARS"
    FOOD = "FOOD"
    COFFEE = "COFFEE"
    OUTDOORS = "OUTDOORS"
    FITNESS = "FITNESS"
    SEASONAL = "SEASONAL"
    POPUP = "POPUP"
    OTHER = "OTHER"
    RESTAURANT = "RESTAURANT"
    ACTIVITY_VENUE = "ACTIVITY_VENUE"


class PreferenceType(str, Enum):
    LIKE = "LIKE"
    DISLIKE = "DISLIKE"


class RelationshipStatus(str, Enum):
    SINGLE = "SINGLE"
    COUPLE = "COUPLE"


class FeedbackType(str, Enum):
    MORE = "MORE"
    LESS = "LESS"
    HIDE = "HIDE"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class TimeOfDay(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    LATE_NIGHT = "LATE_NIGHT"


class BudgetPreference(str, Enum):
    FREE = "FREE"
    UNDER_25 = "UNDER_25"
    UNDER_50 = "UNDER_50"
    UNDER_100 = "UNDER_100"
    ANY = "ANY"


class GoingWith(str, Enum):
    SOLO = "SOLO"
    DATE = "DATE"
    FRIENDS = "FRIENDS"
    FAMILY = "FAMILY"


class SocialIntent(str, Enum):
    MEET_PEOPLE = "MEET_PEOPLE"
    OWN_THING = "OWN_THING"
    EITHER = "EITHER"


class ReasonType(str, Enum):
    CATEGORY_MATCH = "CATEGORY_MATCH"
    NEIGHBORHOOD_MATCH = "NEIGHBORHOOD_MATCH"
    SIMILAR_TASTE = "SIMILAR_TASTE"
    TRENDING = "TRENDING"
    WEEKEND_PREFERENCE = "WEEKEND_PREFERENCE"
    TIME_PREFERENCE = "TIME_PREFERENCE"
    VENUE_FAVORITE = "VENUE_FAVORITE"
    EXPLORATION = "EXPLORATION"
    HIGH_RATED = "HIGH_RATED"
    FREE_EVENT = "FREE_EVENT"
    GOING_WITH_MATCH = "GOING_WITH_MATCH"
    DATE_NIGHT_MATCH = "DATE_NIGHT_MATCH"
    FRIENDS_MATCH = "FRIENDS_MATCH"
    FAMILY_MATCH = "FAMILY_MATCH"
    SOLO_MATCH = "SOLO_MATCH"
    VIBE_MATCH = "VIBE_MATCH"
    SOCIAL_MATCH = "SOCIAL_MATCH"
    BUDGET_MATCH = "BUDGET_MATCH"
    DOG_FRIENDLY_MATCH = "DOG_FRIENDLY_MATCH"
    SOBER_FRIENDLY_MATCH = "SOBER_FRIENDLY_MATCH"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── User aggregates ──────────────────────────────────────────────────────


class CategoryPreference(_Record):
    type: PreferenceType
    intensity: int = Field(..., ge=1, le=5)


class UserPreferences(_Record):
    categories: dict[Category, CategoryPreference] = Field(default_factory=dict)
    relationship_status: RelationshipStatus | None = None


class FeedbackData(_Record):
    more_categories: dict[Category, int] = Field(default_factory=dict)
    less_categories: dict[Category, int] = Field(default_factory=dict)
    more_venues: dict[str, int] = Field(default_factory=dict)
    less_venues: dict[str, int] = Field(default_factory=dict)
    hidden_event_ids: frozenset[str] = Field(default_factory=frozenset)


class ConstraintsData(_Record):
    preferred_days: list[DayOfWeek] = Field(default_factory=list)
    preferred_times: list[TimeOfDay] = Field(default_factory=list)
    budget_max: BudgetPreference = BudgetPreference.ANY
    neighborhoods: list[str] = Field(default_factory=list)
    home_neighborhood: str | None = None
    free_events_only: bool = False
    discovery_mode: bool = False


class FeedViewData(_Record):
    seen_counts: dict[str, int] = Field(default_factory=dict)
    interacted_event_ids: frozenset[str] = Field(default_factory=frozenset)


class InteractionData(_Record):
    saved_categories: dict[Category, int] = Field(default_factory=dict)
    top_neighborhoods: list[str] = Field(default_factory=list)
    going_with_history: dict[GoingWith, int] = Field(default_factory=dict)


class DetailedPreferences(_Record):
    """Per-dimension intensities (0-5, ``None`` when unanswered) plus lifestyle flags."""

    going_solo: int | None = Field(default=None, ge=0, le=5)
    going_date: int | None = Field(default=None, ge=0, le=5)
    going_friends: int | None = Field(default=None, ge=0, le=5)
    going_family: int | None = Field(default=None, ge=0, le=5)
    time_weeknight: int | None = Field(default=None, ge=0, le=5)
    time_weekend: int | None = Field(default=None, ge=0, le=5)
    time_morning: int | None = Field(default=None, ge=0, le=5)
    time_daytime: int | None = Field(default=None, ge=0, le=5)
    time_evening: int | None = Field(default=None, ge=0, le=5)
    time_late_night: int | None = Field(default=None, ge=0, le=5)
    budget: BudgetPreference = BudgetPreference.ANY
    vibe_chill: int | None = Field(default=None, ge=0, le=5)
    vibe_moderate: int | None = Field(default=None, ge=0, le=5)
    vibe_high_energy: int | None = Field(default=None, ge=0, le=5)
    social_intent: SocialIntent = SocialIntent.EITHER
    has_dog: bool = False
    dog_friendly_only: bool = False
    prefer_sober_friendly: bool = False
    avoid_bars: bool = False


class ScoringContext(_Record):
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    feedback: FeedbackData | None = None
    constraints: ConstraintsData | None = None
    feed_views: FeedViewData | None = None
    interactions: InteractionData | None = None
    global_trending: frozenset[str] = Field(default_factory=frozenset)
    detailed_preferences: DetailedPreferences | None = None
    now: datetime | None = None


# ── Candidates and results ───────────────────────────────────────────────


class EventCandidate(_Record):
    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    category: Category
    tags: list[str] = Field(default_factory=list)
    venue_name: str = ""
    address: str = ""
    neighborhood: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    price_range: str = ""
    source: str = ""
    source_url: str | None = None
    image_url: str | None = None
    google_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    apple_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    save_count: int = Field(default=0, ge=0)
    is_dog_friendly: bool = False
    is_drinking_optional: bool = False
    is_alcohol_free: bool = False


class ScoreBreakdown(_Record):
    category_score: float = 0.0
    time_score: float = 0.0
    price_score: float = 0.0
    relationship_score: float = 0.0
    feedback_score: float = 0.0
    constraint_score: float = 0.0
    diversity_score: float = 0.0
    trending_score: float = 0.0
    companion_score: float = 0.0
    timing_score: float = 0.0
    budget_score: float = 0.0
    vibe_score: float = 0.0
    social_score: float = 0.0
    dog_friendly_score: float = 0.0
    sober_friendly_score: float = 0.0
    going_with_score: float = 0.0

    @property
    def total(self) -> float:
        return sum(getattr(self, name) for name in type(self).model_fields)


class ScoredEvent(EventCandidate):
    score: float
    score_breakdown: ScoreBreakdown
    recommendation_reason: str = ""
    reason_type: ReasonType = ReasonType.SIMILAR_TASTE
    is_exploration_pick: bool = False
    is_trending_pick: bool = False
