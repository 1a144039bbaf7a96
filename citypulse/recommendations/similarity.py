"""
User similarity.

Users are compared on two sets: liked categories and items marked WANT/DONE.
Each set is scored with Jaccard similarity and the two are blended, with the
behavioural (item) overlap weighted higher than category overlap.

Callers depend only on the ``SimilarityEngine`` protocol, so the vectorised
linear scan here can be swapped for an indexed nearest-neighbour lookup.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Protocol, Sequence

import numpy as np
from sklearn.preprocessing import MultiLabelBinarizer

from .models import UserSignals


@dataclass(frozen=True)
class SimilarityConfig:
    category_weight: float = 0.3
    item_weight: float = 0.7
    min_similarity: float = 0.05
    neighborhood_size: int = 20


DEFAULT_SIMILARITY_CONFIG = SimilarityConfig()


@dataclass(frozen=True)
class UserSimilarity:
    user_id: str
    similarity: float


def jaccard_similarity(a: AbstractSet, b: AbstractSet) -> float:
    """``|A & B| / |A | B|``; 0 when both sets are empty."""
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


def _labels(values: Iterable) -> list[str]:
    return sorted(str(getattr(v, "value", v)) for v in values)


def jaccard_against(target: AbstractSet, others: Sequence[AbstractSet]) -> np.ndarray:
    """Jaccard similarity of *target* against every set in *others* at once."""
    if not others:
        return np.zeros(0)
    rows = [_labels(target)] + [_labels(o) for o in others]
    vocabulary = sorted(set().union(*rows))
    if not vocabulary:
        return np.zeros(len(others))

    matrix = MultiLabelBinarizer(classes=vocabulary).fit_transform(rows)
    target_row, other_rows = matrix[0], matrix[1:]
    intersection = other_rows @ target_row
    union = other_rows.sum(axis=1) + target_row.sum() - intersection
    return np.divide(
        intersection,
        union,
        out=np.zeros(len(others), dtype=float),
        where=union > 0,
    )


class SimilarityEngine(Protocol):
    def find_similar_users(
        self,
        target: UserSignals,
        candidates: Sequence[UserSignals],
    ) -> list[UserSimilarity]:
        ...


class LinearScanSimilarity:
    """Scores the target against every eligible user in one vectorised pass."""

    def __init__(self, config: SimilarityConfig = DEFAULT_SIMILARITY_CONFIG) -> None:
        self.config = config

    def find_similar_users(
        self,
        target: UserSignals,
        candidates: Sequence[UserSignals],
    ) -> list[UserSimilarity]:
        others = [c for c in candidates if c.user_id != target.user_id]
        if not others:
            return []

        category_sim = jaccard_against(target.liked_categories, [o.liked_categories for o in others])
        item_sim = jaccard_against(target.engaged_item_ids, [o.engaged_item_ids for o in others])
        combined = self.config.category_weight * category_sim + self.config.item_weight * item_sim

        similar = [
            UserSimilarity(user_id=other.user_id, similarity=float(score))
            for other, score in zip(others, combined)
            if score > self.config.min_similarity
        ]
        similar.sort(key=lambda s: (-s.similarity, s.user_id))
        return similar[: self.config.neighborhood_size]
