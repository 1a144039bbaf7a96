from __future__ import annotations

import random

from . import components as c
from .config import (
    DEFAULT_DIVERSITY_CONFIG,
    DEFAULT_SCORING_CONFIG,
    DiversityConfig,
    ScoringConfig,
)
from .diversity import apply_diversity_rules
from .models import (
    EventCandidate,
    GoingWith,
    ReasonType,
    ScoreBreakdown,
    ScoredEvent,
    ScoringContext,
)
from .reasons import generate_reason


def _hidden(event: EventCandidate, config: ScoringConfig) -> ScoredEvent:
    breakdown = ScoreBreakdown(feedback_score=config.hidden_sentinel_score)
    return ScoredEvent(
        **event.model_dump(),
        score=breakdown.total,
        score_breakdown=breakdown,
        recommendation_reason="",
        reason_type=ReasonType.CATEGORY_MATCH,
    )


def score_event(
    event: EventCandidate,
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoredEvent:
    """Score a single candidate against the user's context.

    Hidden events short-circuit to ``config.hidden_sentinel_score`` carried
    entirely by the feedback component. The total is always the plain sum of
    the breakdown fields.
    """
    if context.feedback is not None and event.id in context.feedback.hidden_event_ids:
        return _hidden(event, config)

    detailed = context.detailed_preferences
    breakdown = ScoreBreakdown(
        category_score=c.category_score(event.category, context.preferences, config),
        time_score=c.time_score(event.start_time, context.now, config),
        price_score=c.price_score(event.price_range, config),
        relationship_score=c.relationship_score(
            event.category, context.preferences.relationship_status, config
        ),
        feedback_score=c.feedback_score(event, context.feedback, config),
        constraint_score=c.constraint_score(event, context.constraints, config),
        diversity_score=c.diversity_score(event, context.feed_views, config),
        trending_score=c.trending_score(event, context.global_trending, config),
        companion_score=c.companion_score(event, detailed, config),
        timing_score=c.timing_score(event, detailed, config),
        budget_score=c.budget_score(event, detailed, config),
        vibe_score=c.vibe_score(event, detailed, config),
        social_score=c.social_score(event, detailed, config),
        dog_friendly_score=c.dog_friendly_score(event, detailed, config),
        sober_friendly_score=c.sober_friendly_score(event, detailed, config),
    )

    reason, reason_type = generate_reason(event, breakdown, context, config)

    return ScoredEvent(
        **event.model_dump(),
        score=breakdown.total,
        score_breakdown=breakdown,
        recommendation_reason=reason,
        reason_type=reason_type,
        is_trending_pick=breakdown.trending_score >= config.trending_pick_threshold,
    )


def score_and_rank_events(
    events: list[EventCandidate],
    context: ScoringContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    diversity_config: DiversityConfig = DEFAULT_DIVERSITY_CONFIG,
    rng: random.Random | None = None,
) -> list[ScoredEvent]:
    """Score, drop hidden events, sort by score and apply diversity rules."""
    scored = [score_event(event, context, config) for event in events]
    visible = [e for e in scored if e.score > config.visible_score_cutoff]
    visible.sort(key=lambda e: e.score, reverse=True)
    return apply_diversity_rules(visible, context, diversity_config, rng, config)


def _going_with_bonus(event: ScoredEvent, going_with: GoingWith, config: ScoringConfig) -> float:
    if going_with == GoingWith.DATE:
        bonus = config.going_with_category_bonus if event.category in config.couple_friendly_categories else 0
        if any(tag.lower() in config.date_friendly_tags for tag in event.tags):
            bonus += config.going_with_date_tag_bonus
        return bonus
    if going_with == GoingWith.FRIENDS:
        return config.going_with_category_bonus if event.category in config.friends_friendly_categories else 0
    if going_with == GoingWith.FAMILY:
        return config.going_with_category_bonus if event.category in config.family_friendly_categories else 0
    return config.going_with_solo_bonus if event.category in config.solo_categories else 0


def adjust_score_for_going_with(
    event: ScoredEvent,
    going_with: GoingWith,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoredEvent:
    """Re-score an event for an explicit "going with" selection."""
    bonus = _going_with_bonus(event, going_with, config)
    breakdown = event.score_breakdown.model_copy(
        update={"going_with_score": event.score_breakdown.going_with_score + bonus}
    )
    update = {"score": breakdown.total, "score_breakdown": breakdown}
    if bonus > 10:
        update["recommendation_reason"] = f"Great for {going_with.value.lower()} plans"
        update["reason_type"] = ReasonType.GOING_WITH_MATCH
    return event.model_copy(update=update)
