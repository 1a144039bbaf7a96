"""
Item recommendation engine.

Responsibilities:
- Aggregate explicit and implicit signals into a per-user taste vector.
- Find similar users via Jaccard overlap of liked categories and saved items.
- Fill a result quota through collaborative, content-based and trending tiers.
"""
