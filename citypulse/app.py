from __future__ import annotations

import random

from fastapi import Depends, FastAPI, Query
from pydantic import BaseModel, Field

from .recommendations.cascade import DEFAULT_CASCADE_CONFIG, get_item_recommendations
from .recommendations.models import ItemType, ScoredItem
from .recommendations.store import InMemoryItemStore, get_store
from .scoring.models import EventCandidate, GoingWith, ScoredEvent, ScoringContext
from .scoring.scorer import adjust_score_for_going_with, score_and_rank_events
from .suggestions.deterministic import CuratedPicks
from .suggestions.service import get_suggestions

app = FastAPI(title="CityPulse Ranking API", version="1.0.0")


class RankEventsRequest(BaseModel):
    events: list[EventCandidate] = Field(default_factory=list)
    context: ScoringContext = Field(default_factory=ScoringContext)
    going_with: GoingWith | None = None
    seed: int | None = Field(default=None, description="Seed for exploration / trending placement")


class RankEventsResponse(BaseModel):
    events: list[ScoredEvent]
    total: int


class RecommendationsResponse(BaseModel):
    user_id: str
    results: list[ScoredItem]


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/events/rank", response_model=RankEventsResponse)
def rank_events(body: RankEventsRequest) -> RankEventsResponse:
    rng = random.Random(body.seed) if body.seed is not None else None
    ranked = score_and_rank_events(body.events, body.context, rng=rng)
    if body.going_with is not None:
        ranked = [adjust_score_for_going_with(e, body.going_with) for e in ranked]
    return RankEventsResponse(events=ranked, total=len(ranked))


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/users/{user_id}/recommendations", response_model=RecommendationsResponse)
def recommendations(
    user_id: str,
    item_type: ItemType | None = None,
    exclude_item_id: str = "",
    limit: int = Query(default=12, ge=1, le=100),
    store: InMemoryItemStore = Depends(get_store),
) -> RecommendationsResponse:
    results = get_item_recommendations(
        user_id,
        exclude_item_id,
        store=store,
        item_type=item_type,
        limit=limit,
    )
    return RecommendationsResponse(user_id=user_id, results=results)


@app.get("/users/{user_id}/suggestions", response_model=CuratedPicks)
def suggestions(
    user_id: str,
    store: InMemoryItemStore = Depends(get_store),
) -> CuratedPicks:
    return get_suggestions(user_id, store=store, city_name=DEFAULT_CASCADE_CONFIG.city_name)
