"""
Taste vector builder.

A taste vector maps categories and tags to signed weights aggregated from:

- explicit preferences: LIKE adds ``+intensity``, DISLIKE ``-intensity``;
- item statuses: DONE and WANT add a bonus (DONE stronger), PASS subtracts
  one; PASS hits tags at half weight because a tag is weaker evidence than a
  category;
- ratings: 4-5 add ``(rating - 3) * rating_scale``, 1-2 subtract
  symmetrically, 3 is neutral. Tags get half of the rating weight.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping

from ..scoring.models import Category, PreferenceType
from .models import ItemStatus, ItemStatusRecord, PreferenceRecord, RatingRecord


@dataclass(frozen=True)
class TasteConfig:
    done_weight: float = 3
    want_weight: float = 2
    pass_weight: float = -3
    pass_tag_factor: float = 0.5
    rating_scale: float = 1.5
    rating_tag_factor: float = 0.5

    # Item match
    category_match_weight: float = 10
    tag_match_weight: float = 2

    # (max hours until start, boost); items without a start time get ``place_boost``
    recency_bands: tuple[tuple[float, float], ...] = ((24, 15), (72, 12), (168, 8), (336, 5))
    place_boost: float = 5
    distant_boost: float = 2


DEFAULT_TASTE_CONFIG = TasteConfig()


@dataclass(frozen=True)
class TasteVector:
    categories: Mapping[Category, float] = field(default_factory=dict)
    tags: Mapping[str, float] = field(default_factory=dict)

    def category_weight(self, category: Category) -> float:
        return self.categories.get(category, 0.0)

    def top_categories(self, k: int) -> list[Category]:
        """Up to *k* positively weighted categories, strongest first."""
        positive = [(cat, w) for cat, w in self.categories.items() if w > 0]
        positive.sort(key=lambda cw: (-cw[1], cw[0].value))
        return [cat for cat, _ in positive[:k]]


def _status_weight(status: ItemStatus, config: TasteConfig) -> float:
    if status == ItemStatus.DONE:
        return config.done_weight
    if status == ItemStatus.WANT:
        return config.want_weight
    return config.pass_weight


def build_taste_vector(
    preferences: Iterable[PreferenceRecord] = (),
    statuses: Iterable[ItemStatusRecord] = (),
    ratings: Iterable[RatingRecord] = (),
    config: TasteConfig = DEFAULT_TASTE_CONFIG,
) -> TasteVector:
    categories: dict[Category, float] = defaultdict(float)
    tags: dict[str, float] = defaultdict(float)

    for pref in preferences:
        weight = pref.intensity if pref.preference_type == PreferenceType.LIKE else -pref.intensity
        categories[pref.category] += weight

    for status in statuses:
        weight = _status_weight(status.status, config)
        categories[status.category] += weight
        tag_weight = weight * config.pass_tag_factor if status.status == ItemStatus.PASS else weight
        for tag in status.tags:
            tags[tag] += tag_weight

    for rating in ratings:
        if rating.rating == 3:
            continue
        weight = (rating.rating - 3) * config.rating_scale
        categories[rating.category] += weight
        for tag in rating.tags:
            tags[tag] += weight * config.rating_tag_factor

    return TasteVector(categories=dict(categories), tags=dict(tags))


def score_item_match(
    category: Category,
    tags: Iterable[str],
    vector: TasteVector,
    config: TasteConfig = DEFAULT_TASTE_CONFIG,
) -> float:
    """How well an item matches the taste vector (category dominates tags)."""
    score = vector.category_weight(category) * config.category_match_weight
    for tag in tags:
        score += vector.tags.get(tag, 0.0) * config.tag_match_weight
    return score


def recency_boost(
    start_time: datetime | None,
    now: datetime | None = None,
    config: TasteConfig = DEFAULT_TASTE_CONFIG,
) -> float:
    if start_time is None:
        return config.place_boost
    if now is None:
        now = datetime.now(start_time.tzinfo)
    hours = (start_time.timestamp() - now.timestamp()) / 3600
    if hours < 0:
        return 0
    for max_hours, boost in config.recency_bands:
        if hours <= max_hours:
            return boost
    return config.distant_boost
