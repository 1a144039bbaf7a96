from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from citypulse.app import app
from citypulse.recommendations.store import get_store

client = TestClient(app)

SOON = (datetime.now() + timedelta(days=2)).isoformat()


def _event(event_id, category="ART", **kwargs):
    body = {
        "id": event_id,
        "title": f"Event {event_id}",
        "category": category,
        "venue_name": f"Venue {event_id}",
        "start_time": SOON,
        "price_range": "$20",
    }
    body.update(kwargs)
    return body


@pytest.fixture
def override_store(store):
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# ── Event ranking ────────────────────────────────────────────────────────


def test_rank_events_orders_by_preference():
    resp = client.post("/events/rank", json={
        "events": [_event("bar", "BARS"), _event("coffee", "COFFEE")],
        "context": {"preferences": {"categories": {"COFFEE": {"type": "LIKE", "intensity": 5}}}},
        "seed": 1,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert [e["id"] for e in body["events"]] == ["coffee", "bar"]
    assert body["events"][0]["recommendation_reason"] == "Matches your love for coffee"


def test_rank_events_drops_hidden():
    resp = client.post("/events/rank", json={
        "events": [_event("a"), _event("b")],
        "context": {"feedback": {"hidden_event_ids": ["a"]}},
        "seed": 1,
    })
    assert [e["id"] for e in resp.json()["events"]] == ["b"]


def test_rank_events_going_with():
    resp = client.post("/events/rank", json={
        "events": [_event("gallery", "ART", tags=["romantic"])],
        "going_with": "DATE",
        "seed": 1,
    })
    event = resp.json()["events"][0]
    assert event["score_breakdown"]["going_with_score"] == 25
    assert event["reason_type"] == "GOING_WITH_MATCH"


def test_rank_events_rejects_bad_payload():
    resp = client.post("/events/rank", json={"events": [{"id": "x"}]})
    assert resp.status_code == 422


# ── Per-user endpoints ───────────────────────────────────────────────────


def test_recommendations_endpoint(override_store):
    resp = client.get("/users/alice/recommendations", params={"limit": 3})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "alice"
    assert len(body["results"]) <= 3
    ids = [r["item"]["id"] for r in body["results"]]
    assert "e1" not in ids
    assert len(ids) == len(set(ids))


def test_recommendations_place_filter(override_store):
    resp = client.get("/users/alice/recommendations", params={"item_type": "PLACE"})
    assert {r["item"]["type"] for r in resp.json()["results"]} == {"PLACE"}


def test_recommendations_rejects_zero_limit(override_store):
    resp = client.get("/users/alice/recommendations", params={"limit": 0})
    assert resp.status_code == 422


def test_suggestions_endpoint(override_store):
    resp = client.get("/users/alice/suggestions")
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_ai_generated"] is False
    assert body["summary_text"]
    assert body["monthly_picks"]
