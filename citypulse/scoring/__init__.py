"""
Event scoring layer.

Responsibilities:
- Score candidate events against a user's preferences, feedback and constraints.
- Pick a single human-readable reason per scored event.
- Re-order ranked results to cap category / venue repetition.
"""
