"""
City discovery ranking and recommendation engine.

Subpackages:
- scoring: multi-factor event scorer, reason generator, diversity ranker.
- recommendations: taste vectors, user similarity, three-tier cascade.
- llm: Groq-backed curator with a strict validation boundary.
- suggestions: weekly / monthly picks with a deterministic fallback.
"""
