"""
Weekly and monthly curated picks.

Responsibilities:
- Build a scored candidate pool and a taste summary for a user.
- Ask the AI curator for picks, falling back to deterministic selection.
"""
