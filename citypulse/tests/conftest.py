from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from citypulse.recommendations.models import (
    Item,
    ItemStatus,
    ItemType,
    PreferenceRecord,
    UserItemRating,
    UserItemStatus,
)
from citypulse.recommendations.store import InMemoryItemStore
from citypulse.scoring.models import Category, PreferenceType

# Start of the current hour; catalogue times are relative to it.
NOW = datetime.now().replace(minute=0, second=0, microsecond=0)


def make_item(item_id, category, item_type=ItemType.EVENT, hours_ahead=48, tags=None):
    return Item(
        id=item_id,
        type=item_type,
        title=f"Item {item_id}",
        category=category,
        tags=tags or [],
        venue_name=f"Venue {item_id}",
        start_time=NOW + timedelta(hours=hours_ahead) if item_type == ItemType.EVENT else None,
        price_range="$20",
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def store() -> InMemoryItemStore:
    """
    alice likes live music and wants e1.
    bob shares her taste and also engaged with e2 and p1.
    carol only likes bars.
    """
    items = [
        make_item("e1", Category.LIVE_MUSIC, tags=["jazz"]),
        make_item("e2", Category.LIVE_MUSIC, tags=["jazz"], hours_ahead=20),
        make_item("e3", Category.LIVE_MUSIC, hours_ahead=100),
        make_item("e4", Category.ART),
        make_item("e5", Category.BARS),
        make_item("e6", Category.FOOD),
        make_item("e_past", Category.LIVE_MUSIC, hours_ahead=-5),
        make_item("p1", Category.FOOD, item_type=ItemType.PLACE),
        make_item("p2", Category.COFFEE, item_type=ItemType.PLACE),
    ]
    preferences = [
        PreferenceRecord(user_id="alice", category=Category.LIVE_MUSIC, preference_type=PreferenceType.LIKE, intensity=5),
        PreferenceRecord(user_id="bob", category=Category.LIVE_MUSIC, preference_type=PreferenceType.LIKE, intensity=4),
        PreferenceRecord(user_id="carol", category=Category.BARS, preference_type=PreferenceType.LIKE, intensity=3),
    ]
    statuses = [
        UserItemStatus(user_id="alice", item_id="e1", status=ItemStatus.WANT, updated_at=NOW - timedelta(days=1)),
        UserItemStatus(user_id="bob", item_id="e1", status=ItemStatus.WANT),
        UserItemStatus(user_id="bob", item_id="e2", status=ItemStatus.DONE),
        UserItemStatus(user_id="bob", item_id="p1", status=ItemStatus.WANT),
        UserItemStatus(user_id="carol", item_id="e5", status=ItemStatus.DONE),
    ]
    ratings = [
        UserItemRating(user_id="bob", item_id="e6", rating=5),
        UserItemRating(user_id="carol", item_id="e6", rating=4),
    ]
    return InMemoryItemStore(items=items, statuses=statuses, ratings=ratings, preferences=preferences)
