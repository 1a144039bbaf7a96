"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build curation prompts from a taste summary and candidate items.
- Validate model output and drop any ID that was not supplied as a candidate.
- Return ``None`` on any failure so callers can fall back deterministically.
"""
