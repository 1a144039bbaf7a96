"""
Diversity ranker.

Greedy single pass over a score-sorted list:

1. Admit items into the head (``top_n``) while their category and venue are
   still under the per-category / per-venue caps; everything else is
   deferred to the remainder in its original order.
2. With ``exploration_probability`` (always, in discovery mode) splice one
   remainder item from a category the user has not saved yet into the head.
3. If the head holds no trending pick, splice the first trending item from
   the remainder.

Splices only take items that keep the head within both caps. When a splice
overflows a full head, the displaced last item moves to the front of the
remainder so nothing is lost or duplicated.
"""
from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable

from .config import (
    DEFAULT_DIVERSITY_CONFIG,
    DEFAULT_SCORING_CONFIG,
    DiversityConfig,
    ScoringConfig,
)
from .models import ReasonType, ScoredEvent, ScoringContext

logger = logging.getLogger(__name__)


class _Head:
    def __init__(self, config: DiversityConfig) -> None:
        self.config = config
        self.items: list[ScoredEvent] = []
        self.categories: Counter = Counter()
        self.venues: Counter = Counter()

    def fits(self, event: ScoredEvent) -> bool:
        return (
            self.categories[event.category] < self.config.max_per_category
            and self.venues[event.venue_name] < self.config.max_per_venue
        )

    def append(self, event: ScoredEvent) -> None:
        self.items.append(event)
        self.categories[event.category] += 1
        self.venues[event.venue_name] += 1

    def splice(self, position: int, event: ScoredEvent) -> ScoredEvent | None:
        """Insert *event* at *position*; return the displaced tail item, if any."""
        self.items.insert(position, event)
        self.categories[event.category] += 1
        self.venues[event.venue_name] += 1
        if len(self.items) <= self.config.top_n:
            return None
        dropped = self.items.pop()
        self.categories[dropped.category] -= 1
        self.venues[dropped.venue_name] -= 1
        return dropped


def _take_first(
    remaining: list[ScoredEvent],
    predicate: Callable[[ScoredEvent], bool],
) -> ScoredEvent | None:
    for i, event in enumerate(remaining):
        if predicate(event):
            return remaining.pop(i)
    return None


def _slot(rng: random.Random, start: int, span: int, head: _Head) -> int:
    offset = rng.randrange(span) if span > 0 else 0
    # Never past the last head slot, so a full head keeps the splice.
    return max(0, min(start + offset, len(head.items), head.config.top_n - 1))


def apply_diversity_rules(
    events: list[ScoredEvent],
    context: ScoringContext,
    config: DiversityConfig = DEFAULT_DIVERSITY_CONFIG,
    rng: random.Random | None = None,
    scoring_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[ScoredEvent]:
    """Return ``head + remainder`` for a score-sorted list of events."""
    rng = rng or random.Random()
    head = _Head(config)
    remaining: list[ScoredEvent] = []

    for event in events:
        if len(head.items) < config.top_n and head.fits(event):
            head.append(event)
        else:
            remaining.append(event)

    discovery_mode = bool(context.constraints and context.constraints.discovery_mode)
    if discovery_mode or rng.random() < config.exploration_probability:
        explored = set(context.interactions.saved_categories) if context.interactions else set()
        pick = _take_first(
            remaining,
            lambda e: e.category not in explored and head.fits(e),
        )
        if pick is not None:
            pick = pick.model_copy(update={
                "is_exploration_pick": True,
                "recommendation_reason": config.exploration_reason,
                "reason_type": ReasonType.EXPLORATION,
            })
            position = _slot(rng, config.exploration_slot_start, config.exploration_slot_span, head)
            dropped = head.splice(position, pick)
            if dropped is not None:
                remaining.insert(0, dropped)
            logger.debug("Exploration pick %s spliced at %d", pick.id, position)

    if not any(e.is_trending_pick for e in head.items):
        pick = _take_first(
            remaining,
            lambda e: e.score_breakdown.trending_score >= scoring_config.trending_pick_threshold
            and head.fits(e),
        )
        if pick is not None:
            pick = pick.model_copy(update={"is_trending_pick": True})
            position = _slot(rng, config.trending_slot_start, config.trending_slot_span, head)
            dropped = head.splice(position, pick)
            if dropped is not None:
                remaining.insert(0, dropped)
            logger.debug("Trending pick %s spliced at %d", pick.id, position)

    return head.items + remaining
