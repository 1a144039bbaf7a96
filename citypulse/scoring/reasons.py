"""
Recommendation reason generator.

Collects every applicable reason for a scored event, each with a fixed
priority, and returns the highest-priority one. Ties between equal
priorities go to the reason listed first in ``_REASON_ORDER``, which
follows the order reasons are collected in.
"""
from __future__ import annotations

from typing import NamedTuple

from .components import average_rating, is_free, time_of_day
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import (
    DayOfWeek,
    EventCandidate,
    PreferenceType,
    ReasonType,
    ScoreBreakdown,
    ScoringContext,
    SocialIntent,
)

DEFAULT_REASON = "Recommended for you"
DEFAULT_REASON_TYPE = ReasonType.SIMILAR_TASTE

_WEEKEND_DAYS = {DayOfWeek.FRIDAY, DayOfWeek.SATURDAY, DayOfWeek.SUNDAY}

# Tie-break order for reasons with equal priority.
_REASON_ORDER = [
    ReasonType.CATEGORY_MATCH,
    ReasonType.NEIGHBORHOOD_MATCH,
    ReasonType.TRENDING,
    ReasonType.WEEKEND_PREFERENCE,
    ReasonType.TIME_PREFERENCE,
    ReasonType.VENUE_FAVORITE,
    ReasonType.HIGH_RATED,
    ReasonType.FREE_EVENT,
    ReasonType.DATE_NIGHT_MATCH,
    ReasonType.FRIENDS_MATCH,
    ReasonType.FAMILY_MATCH,
    ReasonType.SOLO_MATCH,
    ReasonType.VIBE_MATCH,
    ReasonType.SOCIAL_MATCH,
    ReasonType.BUDGET_MATCH,
    ReasonType.DOG_FRIENDLY_MATCH,
    ReasonType.SOBER_FRIENDLY_MATCH,
]
_ORDER_INDEX = {reason_type: i for i, reason_type in enumerate(_REASON_ORDER)}


class Reason(NamedTuple):
    text: str
    reason_type: ReasonType
    priority: int


def format_category(category: str) -> str:
    """``LIVE_MUSIC`` -> ``live music``."""
    return str(getattr(category, "value", category)).replace("_", " ").lower()


def collect_reasons(
    event: EventCandidate,
    breakdown: ScoreBreakdown,
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[Reason]:
    reasons: list[Reason] = []
    interactions = context.interactions
    constraints = context.constraints
    detailed = context.detailed_preferences

    pref = context.preferences.categories.get(event.category)
    if pref is not None and pref.type == PreferenceType.LIKE and pref.intensity >= 3:
        category_name = format_category(event.category)
        saved = interactions.saved_categories.get(event.category, 0) if interactions else 0
        if saved > 0:
            plural = "s" if saved > 1 else ""
            reasons.append(Reason(
                f"Because you saved {saved} {category_name} event{plural}",
                ReasonType.CATEGORY_MATCH,
                10,
            ))
        else:
            reasons.append(Reason(f"Matches your love for {category_name}", ReasonType.CATEGORY_MATCH, 8))

    if event.neighborhood and interactions and event.neighborhood in interactions.top_neighborhoods:
        reasons.append(Reason(
            f"Popular in {event.neighborhood}, your top neighborhood",
            ReasonType.NEIGHBORHOOD_MATCH,
            9,
        ))

    if breakdown.trending_score >= config.trending_pick_threshold:
        reasons.append(Reason("Trending this week", ReasonType.TRENDING, 7))

    if constraints is not None:
        event_day = event.start_time.weekday()
        if event_day >= 4 and _WEEKEND_DAYS.intersection(constraints.preferred_days):
            reasons.append(Reason("Matches your weekend preference", ReasonType.WEEKEND_PREFERENCE, 6))

        slot = time_of_day(event.start_time.hour)
        if slot in constraints.preferred_times:
            label = slot.value.lower().replace("_", " ")
            reasons.append(Reason(f"Perfect for your {label} plans", ReasonType.TIME_PREFERENCE, 5))

    if context.feedback is not None and event.venue_name in context.feedback.more_venues:
        reasons.append(Reason(
            f"At {event.venue_name}, a venue you love",
            ReasonType.VENUE_FAVORITE,
            8,
        ))

    rating = average_rating(event.google_rating, event.apple_rating)
    if rating is not None and rating >= 4.5:
        reasons.append(Reason(f"Highly rated ({rating:.1f} stars)", ReasonType.HIGH_RATED, 4))

    if is_free(event.price_range, config):
        reasons.append(Reason("Free event", ReasonType.FREE_EVENT, 3))

    if detailed is not None:
        if breakdown.companion_score >= 15:
            if (detailed.going_date or 0) >= 3:
                reasons.append(Reason("Perfect for date night", ReasonType.DATE_NIGHT_MATCH, 9))
            if (detailed.going_friends or 0) >= 3:
                reasons.append(Reason("Great for going with friends", ReasonType.FRIENDS_MATCH, 9))
            if (detailed.going_family or 0) >= 3:
                reasons.append(Reason("Family-friendly outing", ReasonType.FAMILY_MATCH, 9))
            if (detailed.going_solo or 0) >= 3:
                reasons.append(Reason("Great for solo adventures", ReasonType.SOLO_MATCH, 8))

        if breakdown.vibe_score >= 12:
            if (detailed.vibe_chill or 0) >= 3:
                reasons.append(Reason("Matches your chill vibe", ReasonType.VIBE_MATCH, 7))
            if (detailed.vibe_high_energy or 0) >= 3:
                reasons.append(Reason("High energy, just how you like it", ReasonType.VIBE_MATCH, 7))

        if breakdown.social_score >= 10:
            if detailed.social_intent == SocialIntent.MEET_PEOPLE:
                reasons.append(Reason("Great for meeting new people", ReasonType.SOCIAL_MATCH, 8))
            elif detailed.social_intent == SocialIntent.OWN_THING:
                reasons.append(Reason("Perfect for doing your own thing", ReasonType.SOCIAL_MATCH, 7))

    if breakdown.budget_score >= 5:
        reasons.append(Reason("Budget-friendly choice", ReasonType.BUDGET_MATCH, 4))

    if breakdown.dog_friendly_score >= 15:
        reasons.append(Reason("Bring your pup!", ReasonType.DOG_FRIENDLY_MATCH, 9))

    if breakdown.sober_friendly_score >= 15:
        reasons.append(Reason("Great without drinking", ReasonType.SOBER_FRIENDLY_MATCH, 8))

    return reasons


def pick_reason(reasons: list[Reason]) -> tuple[str, ReasonType]:
    if not reasons:
        return DEFAULT_REASON, DEFAULT_REASON_TYPE
    best = min(
        reasons,
        key=lambda r: (-r.priority, _ORDER_INDEX.get(r.reason_type, len(_REASON_ORDER))),
    )
    return best.text, best.reason_type


def generate_reason(
    event: EventCandidate,
    breakdown: ScoreBreakdown,
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> tuple[str, ReasonType]:
    """Return ``(reason, reason_type)`` for the highest-priority applicable reason."""
    return pick_reason(collect_reasons(event, breakdown, context, config))
