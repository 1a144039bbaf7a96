"""
Three-tier recommendation cascade.

1. Collaborative: items that similar users marked WANT/DONE, weighted by the
   summed similarity of those users (DONE counts more than WANT), plus the
   item's taste-vector match and a recency boost.
2. Content-based: items in the user's strongest liked categories, scored by
   taste-vector match plus recency boost.
3. Trending: items ranked by status and rating counts.

Each later tier only runs when the earlier ones are short of ``limit``. Items
already picked, the excluded item and anything the user has already
interacted with are never returned. A tier that raises contributes nothing.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..scoring.reasons import format_category
from .models import ItemStatus, ItemType, RecommendationTier, ScoredItem
from .similarity import DEFAULT_SIMILARITY_CONFIG, LinearScanSimilarity, SimilarityConfig, SimilarityEngine
from .store import ItemStore
from .taste import (
    DEFAULT_TASTE_CONFIG,
    TasteConfig,
    TasteVector,
    build_taste_vector,
    recency_boost,
    score_item_match,
)

logger = logging.getLogger(__name__)

COLLABORATIVE_REASON = "People like you also liked this"


@dataclass(frozen=True)
class CascadeConfig:
    taste: TasteConfig = DEFAULT_TASTE_CONFIG
    similarity: SimilarityConfig = DEFAULT_SIMILARITY_CONFIG
    similarity_weight: float = 50
    done_weight: float = 1.5
    want_weight: float = 1.0
    top_categories: int = 4
    content_pool_multiplier: int = 2
    rating_count_weight: float = 2
    default_limit: int = 12
    city_name: str = field(default_factory=lambda: os.getenv("CITYPULSE_CITY_NAME", "Denver"))


DEFAULT_CASCADE_CONFIG = CascadeConfig()


@dataclass(frozen=True)
class _Request:
    user_id: str
    item_type: ItemType | None
    excluded: frozenset[str]
    vector: TasteVector
    now: datetime


def _by_score(items: list[ScoredItem]) -> list[ScoredItem]:
    return sorted(items, key=lambda s: (-s.score, s.item.id))


# ── Tiers ────────────────────────────────────────────────────────────────


def collaborative_tier(
    request: _Request,
    limit: int,
    store: ItemStore,
    engine: SimilarityEngine,
    config: CascadeConfig = DEFAULT_CASCADE_CONFIG,
) -> list[ScoredItem]:
    target = store.get_user_signals(request.user_id)
    similar = engine.find_similar_users(target, store.list_peer_signals(request.user_id))
    if not similar:
        return []

    similarity_by_user = {s.user_id: s.similarity for s in similar}
    candidates = store.find_items_with_status(
        user_ids=list(similarity_by_user),
        item_type=request.item_type,
        exclude_ids=request.excluded,
        now=request.now,
    )

    scored: list[ScoredItem] = []
    for item, statuses in candidates:
        similarity_score = sum(
            similarity_by_user.get(s.user_id, 0.0)
            * (config.done_weight if s.status == ItemStatus.DONE else config.want_weight)
            for s in statuses
        )
        match = score_item_match(item.category, item.tags, request.vector, config.taste)
        boost = recency_boost(item.start_time, request.now, config.taste)
        scored.append(ScoredItem(
            item=item,
            score=similarity_score * config.similarity_weight + match + boost,
            reason=COLLABORATIVE_REASON,
            tier=RecommendationTier.collaborative,
        ))
    return _by_score(scored)[:limit]


def content_based_tier(
    request: _Request,
    limit: int,
    store: ItemStore,
    config: CascadeConfig = DEFAULT_CASCADE_CONFIG,
) -> list[ScoredItem]:
    top_categories = request.vector.top_categories(config.top_categories)
    if not top_categories:
        return []

    items = store.find_items(
        item_type=request.item_type,
        categories=top_categories,
        exclude_ids=request.excluded,
        now=request.now,
        limit=limit * config.content_pool_multiplier,
    )
    scored = [
        ScoredItem(
            item=item,
            score=score_item_match(item.category, item.tags, request.vector, config.taste)
            + recency_boost(item.start_time, request.now, config.taste),
            reason=f"Because you like {format_category(item.category)}",
            tier=RecommendationTier.content_based,
        )
        for item in items
    ]
    return _by_score(scored)[:limit]


def trending_tier(
    request: _Request,
    limit: int,
    store: ItemStore,
    config: CascadeConfig = DEFAULT_CASCADE_CONFIG,
) -> list[ScoredItem]:
    items = store.find_items(item_type=request.item_type, exclude_ids=request.excluded, now=request.now)
    counts = store.count_interactions([item.id for item in items])
    scored = [
        ScoredItem(
            item=item,
            score=counts[item.id].statuses + counts[item.id].ratings * config.rating_count_weight,
            reason=f"Trending in {config.city_name}",
            tier=RecommendationTier.trending,
        )
        for item in items
    ]
    return _by_score(scored)[:limit]


# ── Orchestration ────────────────────────────────────────────────────────


def _run_tier(name: str, tier: Callable[[], list[ScoredItem]]) -> list[ScoredItem]:
    try:
        return tier()
    except Exception:
        logger.warning("%s tier failed, treating as empty", name, exc_info=True)
        return []


def _extend(results: list[ScoredItem], extra: list[ScoredItem], limit: int) -> None:
    seen = {r.item.id for r in results}
    for scored in extra:
        if len(results) >= limit:
            return
        if scored.item.id not in seen:
            results.append(scored)
            seen.add(scored.item.id)


def get_item_recommendations(
    user_id: str,
    exclude_item_id: str = "",
    *,
    store: ItemStore,
    item_type: ItemType | None = None,
    limit: int | None = None,
    config: CascadeConfig = DEFAULT_CASCADE_CONFIG,
    similarity_engine: SimilarityEngine | None = None,
    now: datetime | None = None,
) -> list[ScoredItem]:
    """Return up to ``limit`` de-duplicated recommendations for a user.

    Collaborative results come first, then content-based, then trending.
    """
    limit = config.default_limit if limit is None else limit
    if limit <= 0:
        return []

    now = now or datetime.now()
    engine = similarity_engine or LinearScanSimilarity(config.similarity)

    statuses = store.get_item_statuses(user_id)
    vector = build_taste_vector(
        store.get_preferences(user_id),
        statuses,
        store.get_ratings(user_id),
        config.taste,
    )
    excluded = {s.item_id for s in statuses}
    if exclude_item_id:
        excluded.add(exclude_item_id)
    request = _Request(
        user_id=user_id,
        item_type=item_type,
        excluded=frozenset(excluded),
        vector=vector,
        now=now,
    )

    results: list[ScoredItem] = []
    _extend(
        results,
        _run_tier("Collaborative", lambda: collaborative_tier(request, limit, store, engine, config)),
        limit,
    )

    if len(results) < limit:
        request_ = _with_excluded(request, results)
        needed = limit - len(results)
        _extend(
            results,
            _run_tier("Content-based", lambda: content_based_tier(request_, needed, store, config)),
            limit,
        )

    if len(results) < limit:
        request_ = _with_excluded(request, results)
        needed = limit - len(results)
        _extend(
            results,
            _run_tier("Trending", lambda: trending_tier(request_, needed, store, config)),
            limit,
        )

    logger.debug(
        "Recommendations for %s: %d results (%s)",
        user_id,
        len(results),
        ", ".join(sorted({r.tier.value for r in results})) or "none",
    )
    return results


def _with_excluded(request: _Request, picked: list[ScoredItem]) -> _Request:
    return _Request(
        user_id=request.user_id,
        item_type=request.item_type,
        excluded=request.excluded | {p.item.id for p in picked},
        vector=request.vector,
        now=request.now,
    )


def get_recommended_places(user_id: str, *, store: ItemStore, limit: int = 12, **kwargs) -> list[ScoredItem]:
    return get_item_recommendations(user_id, store=store, item_type=ItemType.PLACE, limit=limit, **kwargs)


def get_recommended_events(user_id: str, *, store: ItemStore, limit: int = 12, **kwargs) -> list[ScoredItem]:
    return get_item_recommendations(user_id, store=store, item_type=ItemType.EVENT, limit=limit, **kwargs)
