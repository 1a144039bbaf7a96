"""
Tunable weights, caps and keyword dictionaries for event scoring.

Every constant the scorer and diversity ranker use lives here so tests and
experiments can pass a modified copy (``dataclasses.replace``) instead of
patching module globals.
"""
from __future__ import annotations

from dataclasses import dataclass

from .models import BudgetPreference, Category

_C = Category


@dataclass(frozen=True)
class ScoringConfig:
    # Category fit
    neutral_category_score: float = 25
    like_base: float = 30
    dislike_base: float = 20
    intensity_step: float = 4

    # (max hours until start, points); past events and anything later score 0
    time_bands: tuple[tuple[float, float], ...] = (
        (24, 20),
        (72, 15),
        (168, 10),
        (336, 5),
    )

    # (max price, points); free scores ``free_price_score``
    price_bands: tuple[tuple[float, float], ...] = ((20, 7), (50, 5), (100, 3))
    free_price_score: float = 10
    unknown_price_score: float = 5
    expensive_price_score: float = 0
    default_price: float = 50
    free_price_labels: frozenset[str] = frozenset({"free", "$0", "0"})
    budget_limits: tuple[tuple[BudgetPreference, float], ...] = (
        (BudgetPreference.FREE, 0),
        (BudgetPreference.UNDER_25, 25),
        (BudgetPreference.UNDER_50, 50),
        (BudgetPreference.UNDER_100, 100),
    )

    # Relationship fit
    relationship_match_score: float = 10
    relationship_neutral_score: float = 5
    couple_friendly_categories: frozenset[Category] = frozenset(
        {_C.ART, _C.FOOD, _C.COFFEE, _C.LIVE_MUSIC, _C.SEASONAL, _C.RESTAURANT}
    )
    singles_friendly_categories: frozenset[Category] = frozenset(
        {_C.BARS, _C.LIVE_MUSIC, _C.FITNESS, _C.OUTDOORS, _C.POPUP}
    )
    friends_friendly_categories: frozenset[Category] = frozenset(
        {_C.BARS, _C.LIVE_MUSIC, _C.FOOD, _C.OUTDOORS, _C.FITNESS, _C.POPUP}
    )
    family_friendly_categories: frozenset[Category] = frozenset(
        {_C.ART, _C.OUTDOORS, _C.SEASONAL, _C.FOOD, _C.ACTIVITY_VENUE}
    )

    # Explicit more/less feedback
    category_feedback_step: float = 5
    venue_feedback_step: float = 8
    feedback_cap: float = 20
    hidden_sentinel_score: float = -1000
    visible_score_cutoff: float = -100

    # Constraints
    preferred_day_bonus: float = 10
    preferred_time_bonus: float = 10
    neighborhood_bonus: float = 15
    home_neighborhood_bonus: float = 5
    over_budget_penalty: float = -50
    not_free_penalty: float = -100

    # Staleness
    stale_view_threshold: int = 3
    stale_view_penalty: float = 3

    # Trending
    global_trending_score: float = 15
    high_save_count: int = 10
    high_save_score: float = 10
    medium_save_count: int = 5
    medium_save_score: float = 5
    trending_pick_threshold: float = 10

    # Detailed preferences
    companion_step: float = 5
    companion_cap: float = 25
    timing_step: float = 2
    timing_cap: float = 20
    free_budget_bonus: float = 5
    detailed_over_budget_penalty: float = -15
    vibe_step: float = 4
    vibe_cap: float = 20
    social_tag_score: float = 15
    social_category_score: float = 8
    meet_people_categories: frozenset[Category] = frozenset({_C.BARS, _C.LIVE_MUSIC, _C.FITNESS})
    own_thing_categories: frozenset[Category] = frozenset({_C.COFFEE, _C.ART, _C.OUTDOORS})
    dog_friendly_score: float = 20
    dog_only_penalty: float = -50
    alcohol_free_score: float = 20
    drinking_optional_score: float = 15
    avoid_bars_penalty: float = -15

    # Going-with adjustment
    going_with_category_bonus: float = 15
    going_with_date_tag_bonus: float = 10
    going_with_solo_bonus: float = 10
    solo_categories: frozenset[Category] = frozenset({_C.COFFEE, _C.ART, _C.FITNESS, _C.OUTDOORS})

    # Keyword dictionaries (lower-case tags)
    date_friendly_tags: frozenset[str] = frozenset(
        {"romantic", "date night", "date-friendly", "intimate", "upscale", "dinner", "sunset"}
    )
    solo_friendly_tags: frozenset[str] = frozenset(
        {
            "solo-friendly", "self-care", "self-paced", "meditation", "yoga", "workshop",
            "class", "reading", "coffee", "museum", "gallery", "exhibition",
        }
    )
    friends_friendly_tags: frozenset[str] = frozenset(
        {
            "group", "friends-group", "social", "party", "trivia", "game-night",
            "brunch", "happy-hour", "bar-crawl", "festival", "concert",
        }
    )
    family_friendly_tags: frozenset[str] = frozenset(
        {
            "family-friendly", "kid-friendly", "all-ages", "children", "family",
            "outdoor", "park", "zoo", "aquarium",
        }
    )
    chill_vibe_tags: frozenset[str] = frozenset(
        {
            "chill", "relaxed", "low-key", "casual", "acoustic", "coffee",
            "brunch", "yoga", "meditation", "spa", "self-care",
        }
    )
    moderate_vibe_tags: frozenset[str] = frozenset(
        {
            "moderate", "fun", "social", "dinner", "live-music", "comedy",
            "trivia", "workshop", "outdoor",
        }
    )
    high_energy_vibe_tags: frozenset[str] = frozenset(
        {
            "high-energy", "party", "club", "dancing", "festival", "concert",
            "rave", "sports", "fitness", "adventure", "edm", "electronic",
        }
    )
    social_meetup_tags: frozenset[str] = frozenset(
        {
            "meetup", "networking", "social", "singles", "community", "class",
            "workshop", "group-activity", "tour", "walking-tour",
        }
    )
    solo_activity_tags: frozenset[str] = frozenset(
        {
            "solo-friendly", "self-paced", "exhibition", "museum", "gallery",
            "coffee", "reading", "self-care",
        }
    )

    def budget_limit(self, budget: BudgetPreference) -> float:
        for name, limit in self.budget_limits:
            if name == budget:
                return limit
        return float("inf")


@dataclass(frozen=True)
class DiversityConfig:
    top_n: int = 20
    max_per_category: int = 3
    max_per_venue: int = 2
    exploration_probability: float = 0.2
    # Insertion slots are ``start + randrange(span)``, clamped to the head length.
    exploration_slot_start: int = 5
    exploration_slot_span: int = 5
    trending_slot_start: int = 3
    trending_slot_span: int = 2
    exploration_reason: str = "Try something new?"


DEFAULT_SCORING_CONFIG = ScoringConfig()
DEFAULT_DIVERSITY_CONFIG = DiversityConfig()
