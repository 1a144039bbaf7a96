from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..recommendations.models import ItemType
from ..scoring.models import Category


class CandidateItem(BaseModel):
    """An item the curator is allowed to pick."""

    id: str
    type: ItemType
    title: str
    category: Category
    tags: list[str] = Field(default_factory=list)
    start_time: datetime | None = None
    venue_name: str = ""
    price_range: str = ""
    score: float = 0.0


class UserTasteSummary(BaseModel):
    liked_categories: list[Category] = Field(default_factory=list)
    disliked_categories: list[Category] = Field(default_factory=list)
    preferred_tags: list[str] = Field(default_factory=list)
    avg_rating: float | None = None
    total_done: int = 0
    total_pass: int = 0
    recent_activity: list[str] = Field(default_factory=list)


class SuggestionOutput(BaseModel):
    """Strict shape of a curator response.

    Field aliases match the JSON keys the model is asked to produce.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    weekly_pick_ids: list[str] = Field(..., alias="weeklyPickIds", min_length=1, max_length=10)
    monthly_pick_ids: list[str] = Field(..., alias="monthlyPickIds", min_length=1, max_length=20)
    reasons_by_id: dict[str, str] = Field(..., alias="reasonsById")
    summary_text: str = Field(..., alias="summaryText", min_length=10, max_length=500)
