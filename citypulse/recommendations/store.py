"""
Item store collaborator.

The cascade only talks to the ``ItemStore`` protocol. ``InMemoryItemStore``
keeps the catalogue and interaction tables in pandas DataFrames and answers
the same filter / join / count queries a database-backed store would.
"""
from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol, Sequence

import numpy as np
import pandas as pd
from pydantic import BaseModel, Field

from ..scoring.models import Category, PreferenceType
from .models import (
    InteractionCount,
    Item,
    ItemStatus,
    ItemStatusRecord,
    ItemType,
    PreferenceRecord,
    RatingRecord,
    UserItemRating,
    UserItemStatus,
    UserSignals,
)

ENGAGED_STATUSES = (ItemStatus.WANT, ItemStatus.DONE)


class ItemStore(Protocol):
    def get_preferences(self, user_id: str) -> list[PreferenceRecord]: ...

    def get_item_statuses(self, user_id: str) -> list[ItemStatusRecord]: ...

    def get_ratings(self, user_id: str) -> list[RatingRecord]: ...

    def get_user_signals(self, user_id: str) -> UserSignals: ...

    def list_peer_signals(self, user_id: str) -> list[UserSignals]: ...

    def find_items(
        self,
        *,
        item_type: ItemType | None = None,
        categories: Sequence[Category] | None = None,
        exclude_ids: Iterable[str] = (),
        now: datetime | None = None,
        limit: int | None = None,
    ) -> list[Item]: ...

    def find_items_with_status(
        self,
        *,
        user_ids: Sequence[str],
        statuses: Sequence[ItemStatus] = ENGAGED_STATUSES,
        item_type: ItemType | None = None,
        exclude_ids: Iterable[str] = (),
        now: datetime | None = None,
    ) -> list[tuple[Item, list[UserItemStatus]]]: ...

    def count_interactions(self, item_ids: Sequence[str]) -> dict[str, InteractionCount]: ...


class StoreSnapshot(BaseModel):
    """Serialisable contents of an in-memory store."""

    items: list[Item] = Field(default_factory=list)
    statuses: list[UserItemStatus] = Field(default_factory=list)
    ratings: list[UserItemRating] = Field(default_factory=list)
    preferences: list[PreferenceRecord] = Field(default_factory=list)
    users: list[str] | None = Field(
        default=None,
        description="Users eligible as neighbours; defaults to everyone with a preference or status",
    )


def _timestamp(moment: datetime | None) -> float:
    return np.nan if moment is None else moment.timestamp()


class InMemoryItemStore:
    def __init__(
        self,
        items: Iterable[Item] = (),
        statuses: Iterable[UserItemStatus] = (),
        ratings: Iterable[UserItemRating] = (),
        preferences: Iterable[PreferenceRecord] = (),
        users: Iterable[str] | None = None,
    ) -> None:
        self._items: dict[str, Item] = {item.id: item for item in items}
        self._statuses = list(statuses)
        self._ratings = list(ratings)
        self._preferences = list(preferences)

        self._items_df = pd.DataFrame(
            [
                {
                    "id": item.id,
                    "type": item.type.value,
                    "category": item.category.value,
                    "start_ts": _timestamp(item.start_time),
                }
                for item in self._items.values()
            ],
            columns=["id", "type", "category", "start_ts"],
        )
        self._items_df["start_ts"] = self._items_df["start_ts"].astype(float)

        self._status_df = pd.DataFrame(
            [{"user_id": s.user_id, "item_id": s.item_id, "status": s.status.value} for s in self._statuses],
            columns=["user_id", "item_id", "status"],
        )
        self._rating_df = pd.DataFrame(
            [{"user_id": r.user_id, "item_id": r.item_id, "rating": r.rating} for r in self._ratings],
            columns=["user_id", "item_id", "rating"],
        )

        if users is None:
            users = {p.user_id for p in self._preferences} | {s.user_id for s in self._statuses}
        self._users = sorted(set(users))

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> "InMemoryItemStore":
        return cls(
            items=snapshot.items,
            statuses=snapshot.statuses,
            ratings=snapshot.ratings,
            preferences=snapshot.preferences,
            users=snapshot.users,
        )

    # ── Per-user signals ──────────────────────────────────────────────────

    def get_preferences(self, user_id: str) -> list[PreferenceRecord]:
        return [p for p in self._preferences if p.user_id == user_id]

    def get_item_statuses(self, user_id: str) -> list[ItemStatusRecord]:
        records: list[ItemStatusRecord] = []
        for s in self._statuses:
            item = self._items.get(s.item_id)
            if s.user_id != user_id or item is None:
                continue
            records.append(ItemStatusRecord(
                item_id=item.id,
                status=s.status,
                category=item.category,
                tags=item.tags,
                title=item.title,
                updated_at=s.updated_at,
            ))
        return records

    def get_ratings(self, user_id: str) -> list[RatingRecord]:
        records: list[RatingRecord] = []
        for r in self._ratings:
            item = self._items.get(r.item_id)
            if r.user_id != user_id or item is None:
                continue
            records.append(RatingRecord(item_id=item.id, rating=r.rating, category=item.category, tags=item.tags))
        return records

    def get_user_signals(self, user_id: str) -> UserSignals:
        liked = frozenset(
            p.category
            for p in self._preferences
            if p.user_id == user_id and p.preference_type == PreferenceType.LIKE
        )
        engaged = frozenset(
            s.item_id for s in self._statuses if s.user_id == user_id and s.status in ENGAGED_STATUSES
        )
        return UserSignals(user_id=user_id, liked_categories=liked, engaged_item_ids=engaged)

    def list_peer_signals(self, user_id: str) -> list[UserSignals]:
        return [self.get_user_signals(other) for other in self._users if other != user_id]

    # ── Item queries ──────────────────────────────────────────────────────

    def _item_mask(
        self,
        item_type: ItemType | None,
        exclude_ids: Iterable[str],
        now: datetime | None,
    ) -> pd.Series:
        df = self._items_df
        mask = ~df["id"].isin(list(exclude_ids))
        if item_type is not None:
            mask = mask & (df["type"] == item_type.value)
        # Events must still be upcoming; places have no start time.
        reference = (now or datetime.now()).timestamp()
        is_event = df["type"] == ItemType.EVENT.value
        mask = mask & (~is_event | (df["start_ts"] > reference))
        return mask

    def find_items(
        self,
        *,
        item_type: ItemType | None = None,
        categories: Sequence[Category] | None = None,
        exclude_ids: Iterable[str] = (),
        now: datetime | None = None,
        limit: int | None = None,
    ) -> list[Item]:
        df = self._items_df
        mask = self._item_mask(item_type, exclude_ids, now)
        if categories is not None:
            mask = mask & df["category"].isin([c.value for c in categories])
        ids = df.loc[mask, "id"].tolist()
        if limit is not None:
            ids = ids[:limit]
        return [self._items[i] for i in ids]

    def find_items_with_status(
        self,
        *,
        user_ids: Sequence[str],
        statuses: Sequence[ItemStatus] = ENGAGED_STATUSES,
        item_type: ItemType | None = None,
        exclude_ids: Iterable[str] = (),
        now: datetime | None = None,
    ) -> list[tuple[Item, list[UserItemStatus]]]:
        sdf = self._status_df
        status_mask = sdf["user_id"].isin(list(user_ids)) & sdf["status"].isin([s.value for s in statuses])
        matching_item_ids = set(sdf.loc[status_mask, "item_id"])

        df = self._items_df
        mask = self._item_mask(item_type, exclude_ids, now) & df["id"].isin(list(matching_item_ids))
        wanted_users = set(user_ids)
        wanted_statuses = set(statuses)

        results: list[tuple[Item, list[UserItemStatus]]] = []
        for item_id in df.loc[mask, "id"]:
            contributing = [
                s for s in self._statuses
                if s.item_id == item_id and s.user_id in wanted_users and s.status in wanted_statuses
            ]
            results.append((self._items[item_id], contributing))
        return results

    def count_interactions(self, item_ids: Sequence[str]) -> dict[str, InteractionCount]:
        status_counts = self._status_df.groupby("item_id").size()
        rating_counts = self._rating_df.groupby("item_id").size()
        return {
            item_id: InteractionCount(
                statuses=int(status_counts.get(item_id, 0)),
                ratings=int(rating_counts.get(item_id, 0)),
            )
            for item_id in item_ids
        }


# ── Process-wide store ───────────────────────────────────────────────────

_DATA_PATH_ENV = "CITYPULSE_DATA_PATH"
_store: InMemoryItemStore | None = None


def load_store(path: Path) -> InMemoryItemStore:
    """Load a JSON ``StoreSnapshot`` file."""
    snapshot = StoreSnapshot.model_validate(json.loads(Path(path).read_text()))
    return InMemoryItemStore.from_snapshot(snapshot)


def get_store() -> InMemoryItemStore:
    """Return the process-wide store, loading it on first call.

    Reads ``CITYPULSE_DATA_PATH`` when set; otherwise starts empty.
    """
    global _store
    if _store is None:
        path = os.environ.get(_DATA_PATH_ENV)
        _store = load_store(Path(path)) if path else InMemoryItemStore()
    return _store
