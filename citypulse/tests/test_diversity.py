from __future__ import annotations

import random
from collections import Counter
from datetime import datetime, timedelta

import pytest

from citypulse.scoring.config import DiversityConfig
from citypulse.scoring.diversity import apply_diversity_rules
from citypulse.scoring.models import (
    Category,
    ConstraintsData,
    InteractionData,
    ReasonType,
    ScoreBreakdown,
    ScoredEvent,
    ScoringContext,
)

NOW = datetime(2026, 3, 4, 12, 0)
CATEGORIES = list(Category)
NO_EXPLORATION = DiversityConfig(exploration_probability=0.0)


def _scored(event_id, category, venue=None, score=50.0, trending=0.0) -> ScoredEvent:
    return ScoredEvent(
        id=event_id,
        title=event_id,
        category=category,
        venue_name=venue or f"venue-{event_id}",
        start_time=NOW + timedelta(days=1),
        score=score,
        score_breakdown=ScoreBreakdown(trending_score=trending),
        recommendation_reason="",
        is_trending_pick=trending >= 10,
    )


def _by_score(events):
    return sorted(events, key=lambda e: e.score, reverse=True)


def _assert_caps(events, config: DiversityConfig):
    categories = Counter(e.category for e in events)
    venues = Counter(e.venue_name for e in events)
    assert max(categories.values()) <= config.max_per_category
    assert max(venues.values()) <= config.max_per_venue


@pytest.mark.parametrize("seed", range(5))
def test_head_respects_category_cap(seed):
    rng = random.Random(seed)
    events = _by_score(
        _scored(f"e{i}", CATEGORIES[i % 10], score=rng.uniform(0, 100), trending=rng.choice([0, 0, 10]))
        for i in range(60)
    )
    config = DiversityConfig()
    ranked = apply_diversity_rules(events, ScoringContext(), config, random.Random(seed))

    _assert_caps(ranked[: config.top_n], config)
    assert sorted(e.id for e in ranked) == sorted(e.id for e in events)


def test_head_respects_venue_cap():
    events = _by_score(
        _scored(f"e{i}", CATEGORIES[i % 10], venue=f"venue-{i % 5}", score=100 - i)
        for i in range(50)
    )
    config = DiversityConfig(top_n=10)
    ranked = apply_diversity_rules(events, ScoringContext(), config, random.Random(1))

    _assert_caps(ranked[:10], config)
    assert len(ranked) == 50


def test_single_category_falls_through_to_remainder():
    events = [_scored(f"e{i}", Category.ART, score=100 - i) for i in range(30)]
    ranked = apply_diversity_rules(events, ScoringContext(), NO_EXPLORATION, random.Random(0))

    # Only three fit the head; the rest keep their original order.
    assert [e.id for e in ranked] == [f"e{i}" for i in range(30)]
    assert len({e.id for e in ranked}) == 30


def test_exploration_pick_in_discovery_mode():
    events = [_scored(f"art{i}", Category.ART, score=100 - i) for i in range(8)]
    events.append(_scored("food", Category.FOOD, score=1))
    context = ScoringContext(
        constraints=ConstraintsData(discovery_mode=True),
        interactions=InteractionData(saved_categories={Category.ART: 2}),
    )

    ranked = apply_diversity_rules(events, context, DiversityConfig(), random.Random(0))

    # Head holds three ART events, so the insert slot is clamped to 3.
    assert ranked[3].id == "food"
    assert ranked[3].is_exploration_pick
    assert ranked[3].reason_type == ReasonType.EXPLORATION
    assert ranked[3].recommendation_reason == "Try something new?"
    assert [e.id for e in ranked].count("food") == 1


def test_no_exploration_when_every_category_was_saved():
    events = [_scored(f"art{i}", Category.ART, score=100 - i) for i in range(5)]
    context = ScoringContext(
        constraints=ConstraintsData(discovery_mode=True),
        interactions=InteractionData(saved_categories={Category.ART: 1}),
    )
    ranked = apply_diversity_rules(events, context, DiversityConfig(), random.Random(0))
    assert not any(e.is_exploration_pick for e in ranked)


def test_trending_pick_is_guaranteed_near_the_front():
    events = [_scored(f"e{i:02d}", CATEGORIES[i % 8], score=100 - i) for i in range(24)]
    events.append(_scored("hot", CATEGORIES[8], score=1, trending=10))

    ranked = apply_diversity_rules(events, ScoringContext(), NO_EXPLORATION, random.Random(0))
    ids = [e.id for e in ranked]

    assert ids.index("hot") in (3, 4)
    assert ranked[ids.index("hot")].is_trending_pick
    # The head overflowed by one; the displaced item leads the remainder.
    assert ids[20] == "e19"
    assert len(ids) == 25
    assert len(set(ids)) == 25


def test_existing_trending_pick_prevents_splice():
    config = DiversityConfig(top_n=3, exploration_probability=0.0)
    late = _scored("late-hot", Category.FOOD, score=1, trending=15).model_copy(update={"is_trending_pick": False})
    events = [
        _scored("a", Category.ART, score=90, trending=10),
        _scored("b", Category.BARS, score=80),
        _scored("c", Category.COFFEE, score=70),
        late,
    ]
    ranked = apply_diversity_rules(events, ScoringContext(), config, random.Random(0))
    assert [e.id for e in ranked] == ["a", "b", "c", "late-hot"]
    assert not ranked[-1].is_trending_pick


def test_full_head_displaces_last_item_for_trending_pick():
    config = DiversityConfig(top_n=3, exploration_probability=0.0)
    events = [
        _scored("a", Category.ART, score=90),
        _scored("b", Category.BARS, score=80),
        _scored("c", Category.COFFEE, score=70),
        _scored("hot", Category.FOOD, score=1, trending=10),
    ]
    ranked = apply_diversity_rules(events, ScoringContext(), config, random.Random(0))
    assert [e.id for e in ranked] == ["a", "b", "hot", "c"]
    assert ranked[2].is_trending_pick


def test_same_seed_same_order():
    events = _by_score(
        _scored(f"e{i}", CATEGORIES[i % 6], score=(i * 37) % 101, trending=10 if i % 9 == 0 else 0)
        for i in range(40)
    )
    context = ScoringContext(constraints=ConstraintsData(discovery_mode=True))
    first = apply_diversity_rules(events, context, DiversityConfig(), random.Random(42))
    second = apply_diversity_rules(events, context, DiversityConfig(), random.Random(42))
    assert [e.id for e in first] == [e.id for e in second]
