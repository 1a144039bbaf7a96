from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..scoring.models import Category, PreferenceType


class ItemType(str, Enum):
    EVENT = "EVENT"
    PLACE = "PLACE"


class ItemStatus(str, Enum):
    WANT = "WANT"
    DONE = "DONE"
    PASS = "PASS"


class RecommendationTier(str, Enum):
    collaborative = "collaborative"
    content_based = "content_based"
    trending = "trending"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Item(_Record):
    id: str = Field(..., min_length=1)
    type: ItemType
    title: str
    description: str = ""
    category: Category
    tags: list[str] = Field(default_factory=list)
    venue_name: str = ""
    address: str = ""
    neighborhood: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    price_range: str = ""
    source: str = ""
    source_url: str | None = None
    image_url: str | None = None
    hours: str | None = None


# ── Per-user signal records ──────────────────────────────────────────────


class PreferenceRecord(_Record):
    user_id: str
    category: Category
    preference_type: PreferenceType
    intensity: int = Field(..., ge=1, le=5)


class UserItemStatus(_Record):
    user_id: str
    item_id: str
    status: ItemStatus
    updated_at: datetime | None = None


class UserItemRating(_Record):
    user_id: str
    item_id: str
    rating: int = Field(..., ge=1, le=5)


class ItemStatusRecord(_Record):
    """A user's status on an item, joined with the item fields taste vectors need."""

    item_id: str
    status: ItemStatus
    category: Category
    tags: list[str] = Field(default_factory=list)
    title: str = ""
    updated_at: datetime | None = None


class RatingRecord(_Record):
    item_id: str
    rating: int = Field(..., ge=1, le=5)
    category: Category
    tags: list[str] = Field(default_factory=list)


class UserSignals(_Record):
    """Sets compared by the similarity engine."""

    user_id: str
    liked_categories: frozenset[Category] = Field(default_factory=frozenset)
    engaged_item_ids: frozenset[str] = Field(default_factory=frozenset)


class InteractionCount(_Record):
    statuses: int = 0
    ratings: int = 0


# ── Output ───────────────────────────────────────────────────────────────


class ScoredItem(_Record):
    item: Item
    score: float
    reason: str
    tier: RecommendationTier
