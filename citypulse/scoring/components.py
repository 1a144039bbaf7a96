"""
Independent, additive score components.

Each function takes the candidate plus the relevant slice of the user's
context and returns a bounded number of points. None of them raise on
malformed input; missing context always contributes 0.
"""
from __future__ import annotations

import re
from datetime import datetime

from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import (
    BudgetPreference,
    Category,
    ConstraintsData,
    DayOfWeek,
    DetailedPreferences,
    EventCandidate,
    FeedbackData,
    FeedViewData,
    PreferenceType,
    RelationshipStatus,
    SocialIntent,
    TimeOfDay,
    UserPreferences,
)

_NUMBER_RE = re.compile(r"\d+")

_WEEKDAYS = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
]


# ── Helpers ──────────────────────────────────────────────────────────────


def day_of_week(moment: datetime) -> DayOfWeek:
    return _WEEKDAYS[moment.weekday()]


def time_of_day(hour: int) -> TimeOfDay:
    if 6 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.LATE_NIGHT


def hours_until(start_time: datetime, now: datetime | None = None) -> float:
    if now is None:
        now = datetime.now(start_time.tzinfo)
    return (start_time.timestamp() - now.timestamp()) / 3600


def is_free(price_range: str, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> bool:
    return price_range.strip().lower() in config.free_price_labels


def parse_price(price_range: str, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    """Return the highest number in a free-text price range.

    Free labels parse to 0; text without any digits falls back to
    ``config.default_price`` (a medium price).
    """
    if is_free(price_range, config):
        return 0
    numbers = _NUMBER_RE.findall(price_range)
    if not numbers:
        return config.default_price
    return max(float(n) for n in numbers)


def average_rating(google_rating: float | None, apple_rating: float | None) -> float | None:
    if google_rating and apple_rating:
        return (google_rating + apple_rating) / 2
    return google_rating or apple_rating or None


def _lower_tags(event: EventCandidate) -> set[str]:
    return {t.lower() for t in event.tags}


def _active(intensity: int | None) -> bool:
    return bool(intensity and intensity > 0)


# ── Core components ──────────────────────────────────────────────────────


def category_score(
    category: Category,
    preferences: UserPreferences,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """Category fit (0-50)."""
    pref = preferences.categories.get(category)
    if pref is None:
        return config.neutral_category_score
    if pref.type == PreferenceType.LIKE:
        return config.like_base + pref.intensity * config.intensity_step
    return config.dislike_base - pref.intensity * config.intensity_step


def time_score(
    start_time: datetime,
    now: datetime | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """Step function of hours until start (0-20); past events score 0."""
    hours = hours_until(start_time, now)
    if hours < 0:
        return 0
    for max_hours, points in config.time_bands:
        if hours <= max_hours:
            return points
    return 0


def price_score(price_range: str, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    """Free events score highest (0-10)."""
    if is_free(price_range, config):
        return config.free_price_score
    if not _NUMBER_RE.search(price_range):
        return config.unknown_price_score
    max_price = parse_price(price_range, config)
    for ceiling, points in config.price_bands:
        if max_price <= ceiling:
            return points
    return config.expensive_price_score


def relationship_score(
    category: Category,
    relationship_status: RelationshipStatus | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if relationship_status is None:
        return config.relationship_neutral_score
    if relationship_status == RelationshipStatus.COUPLE:
        friendly = config.couple_friendly_categories
    else:
        friendly = config.singles_friendly_categories
    return config.relationship_match_score if category in friendly else config.relationship_neutral_score


def feedback_score(
    event: EventCandidate,
    feedback: FeedbackData | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """More/less counters for the category and venue, clamped to +/- ``feedback_cap``."""
    if feedback is None:
        return 0
    score = (
        feedback.more_categories.get(event.category, 0) - feedback.less_categories.get(event.category, 0)
    ) * config.category_feedback_step
    score += (
        feedback.more_venues.get(event.venue_name, 0) - feedback.less_venues.get(event.venue_name, 0)
    ) * config.venue_feedback_step
    return max(-config.feedback_cap, min(config.feedback_cap, score))


def constraint_score(
    event: EventCandidate,
    constraints: ConstraintsData | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """Day / time / neighborhood bonuses and budget near-exclusion penalties."""
    if constraints is None:
        return 0

    score = 0.0
    if constraints.preferred_days and day_of_week(event.start_time) in constraints.preferred_days:
        score += config.preferred_day_bonus

    if constraints.preferred_times and time_of_day(event.start_time.hour) in constraints.preferred_times:
        score += config.preferred_time_bonus

    if event.neighborhood and event.neighborhood in constraints.neighborhoods:
        score += config.neighborhood_bonus

    if constraints.home_neighborhood and event.neighborhood == constraints.home_neighborhood:
        score += config.home_neighborhood_bonus

    # Over-budget and non-free items are penalised, not filtered.
    if constraints.budget_max != BudgetPreference.ANY:
        if parse_price(event.price_range, config) > config.budget_limit(constraints.budget_max):
            score += config.over_budget_penalty

    if constraints.free_events_only and not is_free(event.price_range, config):
        score += config.not_free_penalty

    return score


def diversity_score(
    event: EventCandidate,
    feed_views: FeedViewData | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """Penalty for items shown repeatedly without any interaction."""
    if feed_views is None:
        return 0
    seen = feed_views.seen_counts.get(event.id, 0)
    if seen >= config.stale_view_threshold and event.id not in feed_views.interacted_event_ids:
        return -seen * config.stale_view_penalty
    return 0


def trending_score(
    event: EventCandidate,
    global_trending: frozenset[str] | set[str] | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if global_trending and event.id in global_trending:
        return config.global_trending_score
    if event.save_count >= config.high_save_count:
        return config.high_save_score
    if event.save_count >= config.medium_save_count:
        return config.medium_save_score
    return 0


# ── Detailed preference components ───────────────────────────────────────


def companion_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None:
        return 0

    tags = _lower_tags(event)
    score = 0.0
    if _active(prefs.going_solo) and tags & config.solo_friendly_tags:
        score += prefs.going_solo * config.companion_step
    if _active(prefs.going_date) and (
        tags & config.date_friendly_tags or event.category in config.couple_friendly_categories
    ):
        score += prefs.going_date * config.companion_step
    if _active(prefs.going_friends) and (
        tags & config.friends_friendly_tags or event.category in config.friends_friendly_categories
    ):
        score += prefs.going_friends * config.companion_step
    if _active(prefs.going_family) and (
        tags & config.family_friendly_tags or event.category in config.family_friendly_categories
    ):
        score += prefs.going_family * config.companion_step
    return min(score, config.companion_cap)


def timing_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None:
        return 0

    score = 0.0
    # Friday counts as weekend.
    if event.start_time.weekday() >= 4:
        day_intensity = prefs.time_weekend
    else:
        day_intensity = prefs.time_weeknight
    if _active(day_intensity):
        score += day_intensity * config.timing_step

    slot = time_of_day(event.start_time.hour)
    slot_intensity = {
        TimeOfDay.MORNING: prefs.time_morning,
        TimeOfDay.AFTERNOON: prefs.time_daytime,
        TimeOfDay.EVENING: prefs.time_evening,
        TimeOfDay.LATE_NIGHT: prefs.time_late_night,
    }[slot]
    if _active(slot_intensity):
        score += slot_intensity * config.timing_step

    return min(score, config.timing_cap)


def budget_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None or prefs.budget == BudgetPreference.ANY:
        return 0
    price = parse_price(event.price_range, config)
    if price == 0:
        return config.free_budget_bonus
    if price <= config.budget_limit(prefs.budget):
        return 0
    return config.detailed_over_budget_penalty


def vibe_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None:
        return 0

    tags = _lower_tags(event)
    score = 0.0
    for intensity, keywords in (
        (prefs.vibe_chill, config.chill_vibe_tags),
        (prefs.vibe_moderate, config.moderate_vibe_tags),
        (prefs.vibe_high_energy, config.high_energy_vibe_tags),
    ):
        if _active(intensity) and tags & keywords:
            score += intensity * config.vibe_step
    return min(score, config.vibe_cap)


def social_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None or prefs.social_intent == SocialIntent.EITHER:
        return 0

    if prefs.social_intent == SocialIntent.MEET_PEOPLE:
        keywords, categories = config.social_meetup_tags, config.meet_people_categories
    else:
        keywords, categories = config.solo_activity_tags, config.own_thing_categories

    if _lower_tags(event) & keywords:
        return config.social_tag_score
    if event.category in categories:
        return config.social_category_score
    return 0


def dog_friendly_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None:
        return 0
    if event.is_dog_friendly:
        return config.dog_friendly_score if prefs.has_dog else 0
    # Dog-friendly-only users see other items heavily penalised, not filtered.
    return config.dog_only_penalty if prefs.dog_friendly_only else 0


def sober_friendly_score(
    event: EventCandidate,
    prefs: DetailedPreferences | None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    if prefs is None:
        return 0

    score = 0.0
    if prefs.prefer_sober_friendly:
        if event.is_alcohol_free:
            score += config.alcohol_free_score
        elif event.is_drinking_optional:
            score += config.drinking_optional_score
    if prefs.avoid_bars and event.category == Category.BARS:
        score += config.avoid_bars_penalty
    return score
