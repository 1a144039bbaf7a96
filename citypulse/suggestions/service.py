"""
"Suggested for you" weekly and monthly picks.

1. Build the user's taste vector and a scored candidate pool (upcoming
   events and places, PASSed items removed).
2. If AI curation is enabled, let the curator pick from the pool.
3. Otherwise, or when the curator returns nothing usable, fall back to the
   deterministic curator.
"""
from __future__ import annotations

import logging
from datetime import datetime

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.curator import generate_ai_suggestions
from ..llm.models import CandidateItem, SuggestionOutput, UserTasteSummary
from ..recommendations.models import ItemStatus
from ..recommendations.store import ItemStore
from ..recommendations.taste import DEFAULT_TASTE_CONFIG, TasteConfig, TasteVector, build_taste_vector, score_item_match
from .deterministic import (
    DEFAULT_CURATION_CONFIG,
    CuratedPicks,
    CurationConfig,
    generate_deterministic_suggestions,
)

logger = logging.getLogger(__name__)


def proximity_bonus(
    start_time: datetime | None,
    now: datetime,
    config: CurationConfig = DEFAULT_CURATION_CONFIG,
) -> float:
    """Bonus for events happening within the next week or month."""
    if start_time is None:
        return 0
    hours = (start_time.timestamp() - now.timestamp()) / 3600
    if hours <= 0:
        return 0
    for max_hours, bonus in config.proximity_bands:
        if hours <= max_hours:
            return bonus
    return 0


def build_user_taste_summary(
    user_id: str,
    vector: TasteVector,
    store: ItemStore,
    config: CurationConfig = DEFAULT_CURATION_CONFIG,
) -> UserTasteSummary:
    ranked = sorted(vector.categories.items(), key=lambda cw: (-cw[1], cw[0].value))
    liked = [cat for cat, weight in ranked if weight > config.liked_threshold]
    disliked = [cat for cat, weight in reversed(ranked) if weight < config.disliked_threshold]

    tags = sorted(
        (item for item in vector.tags.items() if item[1] > config.preferred_tag_threshold),
        key=lambda tw: (-tw[1], tw[0]),
    )

    ratings = store.get_ratings(user_id)
    avg_rating = sum(r.rating for r in ratings) / len(ratings) if ratings else None

    statuses = store.get_item_statuses(user_id)
    recent = sorted(
        statuses,
        key=lambda s: s.updated_at.timestamp() if s.updated_at else float("-inf"),
        reverse=True,
    )[: config.recent_activity_count]

    return UserTasteSummary(
        liked_categories=liked,
        disliked_categories=disliked,
        preferred_tags=[tag for tag, _ in tags[: config.max_preferred_tags]],
        avg_rating=avg_rating,
        total_done=sum(1 for s in statuses if s.status == ItemStatus.DONE),
        total_pass=sum(1 for s in statuses if s.status == ItemStatus.PASS),
        recent_activity=[f'{s.status.value} "{s.title}" ({s.category.value})' for s in recent],
    )


def generate_candidate_pool(
    user_id: str,
    vector: TasteVector,
    store: ItemStore,
    now: datetime,
    config: CurationConfig = DEFAULT_CURATION_CONFIG,
    taste_config: TasteConfig = DEFAULT_TASTE_CONFIG,
) -> list[CandidateItem]:
    passed = {s.item_id for s in store.get_item_statuses(user_id) if s.status == ItemStatus.PASS}
    items = store.find_items(exclude_ids=passed, now=now)

    candidates = [
        CandidateItem(
            id=item.id,
            type=item.type,
            title=item.title,
            category=item.category,
            tags=item.tags,
            start_time=item.start_time,
            venue_name=item.venue_name,
            price_range=item.price_range,
            score=score_item_match(item.category, item.tags, vector, taste_config)
            + proximity_bonus(item.start_time, now, config),
        )
        for item in items
    ]
    candidates.sort(key=lambda c: (-c.score, c.id))
    return candidates[: config.candidate_pool_size]


def _from_ai(output: SuggestionOutput, candidates: list[CandidateItem]) -> CuratedPicks:
    by_id = {c.id: c for c in candidates}
    return CuratedPicks(
        weekly_picks=[by_id[i] for i in output.weekly_pick_ids if i in by_id],
        monthly_picks=[by_id[i] for i in output.monthly_pick_ids if i in by_id],
        reasons_by_id=output.reasons_by_id,
        summary_text=output.summary_text,
        is_ai_generated=True,
    )


def get_suggestions(
    user_id: str,
    *,
    store: ItemStore,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    config: CurationConfig = DEFAULT_CURATION_CONFIG,
    taste_config: TasteConfig = DEFAULT_TASTE_CONFIG,
    city_name: str = "Denver",
    now: datetime | None = None,
) -> CuratedPicks:
    """Weekly and monthly picks for a user. Never returns None."""
    now = now or datetime.now()

    vector = build_taste_vector(
        store.get_preferences(user_id),
        store.get_item_statuses(user_id),
        store.get_ratings(user_id),
        taste_config,
    )
    candidates = generate_candidate_pool(user_id, vector, store, now, config, taste_config)
    summary = build_user_taste_summary(user_id, vector, store, config)

    if llm_config.enabled and candidates:
        output = generate_ai_suggestions(summary, candidates, llm_config, city_name=city_name)
        if output is not None:
            return _from_ai(output, candidates)
        logger.info("Falling back to deterministic suggestions for %s", user_id)

    return generate_deterministic_suggestions(candidates, summary, config, city_name=city_name)
