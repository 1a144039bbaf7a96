from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("AI_MODEL", "llama-3.3-70b-versatile")
    timeout: float = float(os.getenv("AI_TIMEOUT_SECONDS", "10"))
    # 0 keeps a failed call bounded by ``timeout``
    max_retries: int = int(os.getenv("AI_MAX_RETRIES", "0"))
    max_tokens: int = 2000
    temperature: float = 0.7
    enabled: bool = os.getenv("AI_SUGGESTIONS_ENABLED", "false").lower() == "true"

    # Smallest pick lists still worth showing after foreign IDs are dropped
    min_weekly_picks: int = 3
    min_monthly_picks: int = 5


DEFAULT_LLM_CONFIG = LLMConfig()
