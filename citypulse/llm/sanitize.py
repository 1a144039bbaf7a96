"""
Trust boundary for curator output.

Model output is untrusted: every pick ID is checked against the candidate
set that was actually supplied. Unknown IDs are dropped, duplicates are
collapsed and reasons for IDs that did not survive are pruned. If either
pick list ends up too short the whole result is rejected.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Union

from .models import SuggestionOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    output: SuggestionOutput
    dropped_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Rejected:
    reason: str


SanitizeResult = Union[Accepted, Rejected]


def _known_unique(ids: Iterable[str], valid_ids: AbstractSet[str], dropped: list[str]) -> list[str]:
    kept: list[str] = []
    for pick_id in ids:
        if pick_id not in valid_ids:
            dropped.append(pick_id)
        elif pick_id not in kept:
            kept.append(pick_id)
    return kept


def sanitize_suggestions(
    output: SuggestionOutput,
    valid_ids: AbstractSet[str],
    min_weekly: int = 3,
    min_monthly: int = 5,
) -> SanitizeResult:
    dropped: list[str] = []
    weekly = _known_unique(output.weekly_pick_ids, valid_ids, dropped)
    monthly = _known_unique(output.monthly_pick_ids, valid_ids, dropped)

    if dropped:
        logger.warning("Curator returned %d unknown IDs: %s", len(dropped), dropped)

    if len(weekly) < min_weekly or len(monthly) < min_monthly:
        return Rejected(
            f"too few valid picks after filtering "
            f"(weekly={len(weekly)}/{min_weekly}, monthly={len(monthly)}/{min_monthly})"
        )

    picked = set(weekly) | set(monthly)
    reasons = {pick_id: text for pick_id, text in output.reasons_by_id.items() if pick_id in picked}

    clean = output.model_copy(update={
        "weekly_pick_ids": weekly,
        "monthly_pick_ids": monthly,
        "reasons_by_id": reasons,
    })
    return Accepted(output=clean, dropped_ids=tuple(dropped))
