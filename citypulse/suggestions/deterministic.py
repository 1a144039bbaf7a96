"""
Deterministic curator.

Used whenever AI curation is disabled or fails. Given the same candidates it
always returns the same picks, reasons and summary:

- weekly picks: upcoming events, soonest first, higher score breaking ties;
- monthly picks: round-robin across category buckets (score order inside a
  bucket), at most ``max_per_category`` from any one category;
- reasons: a fixed phrase per category, rotated by pick position.
"""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from ..llm.models import CandidateItem, UserTasteSummary
from ..recommendations.models import ItemType
from ..scoring.models import Category
from ..scoring.reasons import format_category


@dataclass(frozen=True)
class CurationConfig:
    weekly_count: int = 8
    monthly_count: int = 15
    max_per_category: int = 3
    candidate_pool_size: int = 100
    summary_categories: int = 3

    # Candidate pool proximity bonus: (max hours until start, bonus)
    proximity_bands: tuple[tuple[float, float], ...] = ((168, 10), (720, 5))

    # Taste summary thresholds
    liked_threshold: float = 2
    disliked_threshold: float = -1
    preferred_tag_threshold: float = 1
    max_preferred_tags: int = 10
    recent_activity_count: int = 5


DEFAULT_CURATION_CONFIG = CurationConfig()


class CuratedPicks(BaseModel):
    weekly_picks: list[CandidateItem] = Field(default_factory=list)
    monthly_picks: list[CandidateItem] = Field(default_factory=list)
    reasons_by_id: dict[str, str] = Field(default_factory=dict)
    summary_text: str = ""
    is_ai_generated: bool = False


CATEGORY_REASONS: dict[Category, tuple[str, ...]] = {
    Category.ART: ("Perfect for art lovers", "A cultural gem", "Inspiring creative experience"),
    Category.LIVE_MUSIC: ("Great live performance", "Music you'll love", "Can't miss this show"),
    Category.BARS: ("Top nightlife pick", "Perfect for a night out", "Craft drinks await"),
    Category.FOOD: ("Delicious culinary experience", "Foodie favorite", "Must-try flavors"),
    Category.COFFEE: ("Coffee culture at its best", "Perfect caffeine fix", "Cozy coffee spot"),
    Category.OUTDOORS: ("Get outside and explore", "Nature calling", "Adventure awaits"),
    Category.FITNESS: ("Stay active and healthy", "Great workout option", "Fitness goals"),
    Category.SEASONAL: ("Limited time experience", "Seasonal favorite", "Don't miss this"),
    Category.POPUP: ("Unique pop-up experience", "Here today, gone tomorrow", "Exclusive find"),
    Category.OTHER: ("Something special", "Unique experience", "Worth checking out"),
    Category.RESTAURANT: ("Top dining pick", "Delicious food awaits", "Culinary excellence"),
    Category.ACTIVITY_VENUE: ("Fun activity spot", "Great for groups", "Entertainment awaits"),
}


def generate_deterministic_reason(candidate: CandidateItem, index: int) -> str:
    reasons = CATEGORY_REASONS.get(candidate.category, CATEGORY_REASONS[Category.OTHER])
    return reasons[index % len(reasons)]


def _start_key(candidate: CandidateItem) -> float:
    return candidate.start_time.timestamp() if candidate.start_time else float("inf")


def select_weekly(candidates: list[CandidateItem], count: int) -> list[CandidateItem]:
    by_score = sorted(candidates, key=lambda c: -c.score)
    events = [c for c in by_score if c.type == ItemType.EVENT and c.start_time is not None]
    # Stable sort: equal start times keep score order.
    events.sort(key=_start_key)
    return events[:count]


def select_monthly(
    candidates: list[CandidateItem],
    count: int,
    max_per_category: int,
) -> list[CandidateItem]:
    buckets: dict[Category, list[CandidateItem]] = {}
    for candidate in sorted(candidates, key=lambda c: -c.score):
        buckets.setdefault(candidate.category, []).append(candidate)

    picks: list[CandidateItem] = []
    picked_ids: set[str] = set()
    taken: dict[Category, int] = {}
    added = True
    while len(picks) < count and added:
        added = False
        for category, bucket in buckets.items():
            if len(picks) >= count:
                break
            if not bucket or taken.get(category, 0) >= max_per_category:
                continue
            candidate = bucket.pop(0)
            taken[category] = taken.get(category, 0) + 1
            if candidate.id not in picked_ids:
                picks.append(candidate)
                picked_ids.add(candidate.id)
                added = True
    return picks


def deterministic_summary(taste_summary: UserTasteSummary, city_name: str, config: CurationConfig) -> str:
    top = [format_category(c) for c in taste_summary.liked_categories[: config.summary_categories]]
    if top:
        return (
            f"Based on your love for {' and '.join(top)}, we've curated these picks just for you. "
            "Discover new favorites this week and explore more throughout the month."
        )
    return (
        "Here are our top picks for you this week and month. We've selected a diverse mix "
        f"of events and places to help you discover {city_name}."
    )


def generate_deterministic_suggestions(
    candidates: list[CandidateItem],
    taste_summary: UserTasteSummary,
    config: CurationConfig = DEFAULT_CURATION_CONFIG,
    city_name: str = "Denver",
) -> CuratedPicks:
    weekly = select_weekly(candidates, config.weekly_count)
    monthly = select_monthly(candidates, config.monthly_count, config.max_per_category)

    reasons: dict[str, str] = {}
    for i, pick in enumerate(weekly):
        reasons[pick.id] = generate_deterministic_reason(pick, i)
    for i, pick in enumerate(monthly):
        reasons.setdefault(pick.id, generate_deterministic_reason(pick, i))

    return CuratedPicks(
        weekly_picks=weekly,
        monthly_picks=monthly,
        reasons_by_id=reasons,
        summary_text=deterministic_summary(taste_summary, city_name, config),
        is_ai_generated=False,
    )
