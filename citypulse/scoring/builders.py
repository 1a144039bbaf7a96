"""
Builders that turn raw per-user records into scoring aggregates.

Each builder returns a fresh frozen model; nothing here keeps state between
calls.
"""
from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from .models import (
    Category,
    CategoryPreference,
    ConstraintsData,
    DetailedPreferences,
    FeedbackData,
    FeedbackType,
    FeedViewData,
    GoingWith,
    InteractionData,
    PreferenceType,
    RelationshipStatus,
    UserPreferences,
)

TOP_NEIGHBORHOODS = 5
_LIFESTYLE_FLAGS = ("has_dog", "dog_friendly_only", "prefer_sober_friendly", "avoid_bars")


class PreferenceRow(BaseModel):
    category: Category
    preference_type: PreferenceType
    intensity: int


class FeedbackRow(BaseModel):
    event_id: str
    feedback_type: FeedbackType
    category: Category | None = None
    venue_name: str | None = None


class FeedViewRow(BaseModel):
    event_id: str
    seen_count: int = 0
    interacted: bool = False


class InteractionRow(BaseModel):
    category: Category
    neighborhood: str | None = None
    going_with: GoingWith | None = None


def build_user_preferences(
    preferences: Iterable[PreferenceRow],
    relationship_status: RelationshipStatus | None = None,
) -> UserPreferences:
    categories = {
        p.category: CategoryPreference(type=p.preference_type, intensity=p.intensity)
        for p in preferences
    }
    return UserPreferences(categories=categories, relationship_status=relationship_status)


def build_feedback_data(feedback: Iterable[FeedbackRow]) -> FeedbackData:
    more_categories: Counter = Counter()
    less_categories: Counter = Counter()
    more_venues: Counter = Counter()
    less_venues: Counter = Counter()
    hidden: set[str] = set()

    for fb in feedback:
        if fb.feedback_type == FeedbackType.HIDE:
            hidden.add(fb.event_id)
            continue
        is_more = fb.feedback_type == FeedbackType.MORE
        if fb.category:
            (more_categories if is_more else less_categories)[fb.category] += 1
        if fb.venue_name:
            (more_venues if is_more else less_venues)[fb.venue_name] += 1

    return FeedbackData(
        more_categories=dict(more_categories),
        less_categories=dict(less_categories),
        more_venues=dict(more_venues),
        less_venues=dict(less_venues),
        hidden_event_ids=frozenset(hidden),
    )


def build_constraints_data(constraints: Mapping[str, Any] | None) -> ConstraintsData | None:
    if constraints is None:
        return None
    return ConstraintsData.model_validate(dict(constraints))


def build_feed_view_data(views: Iterable[FeedViewRow]) -> FeedViewData:
    seen_counts: dict[str, int] = {}
    interacted: set[str] = set()
    for view in views:
        seen_counts[view.event_id] = view.seen_count
        if view.interacted:
            interacted.add(view.event_id)
    return FeedViewData(seen_counts=seen_counts, interacted_event_ids=frozenset(interacted))


def build_detailed_preferences(prefs: Mapping[str, Any] | None) -> DetailedPreferences | None:
    """Lifestyle flags missing from *prefs* default to ``False``."""
    if prefs is None:
        return None
    data = dict(prefs)
    for flag in _LIFESTYLE_FLAGS:
        if data.get(flag) is None:
            data[flag] = False
    return DetailedPreferences.model_validate(data)


def build_interaction_data(interactions: Iterable[InteractionRow]) -> InteractionData:
    saved_categories: Counter = Counter()
    neighborhoods: Counter = Counter()
    going_with: Counter = Counter()

    for row in interactions:
        saved_categories[row.category] += 1
        if row.neighborhood:
            neighborhoods[row.neighborhood] += 1
        if row.going_with:
            going_with[row.going_with] += 1

    return InteractionData(
        saved_categories=dict(saved_categories),
        top_neighborhoods=[name for name, _ in neighborhoods.most_common(TOP_NEIGHBORHOODS)],
        going_with_history=dict(going_with),
    )
