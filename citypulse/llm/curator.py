from __future__ import annotations

import json
import logging
from datetime import datetime

from groq import Groq
from pydantic import ValidationError

from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .models import CandidateItem, SuggestionOutput, UserTasteSummary
from .sanitize import Rejected, sanitize_suggestions

logger = logging.getLogger(__name__)


def build_system_prompt(city_name: str = "Denver") -> str:
    return (
        f"You are a {city_name} events and places curator. "
        "Your job is to select the best items for a user based on their taste profile.\n\n"
        "CRITICAL CONSTRAINTS:\n"
        "1. You may ONLY select from the provided candidate IDs\n"
        "2. You must NEVER invent or create new IDs\n"
        "3. Each ID in your response MUST exist in the candidates list\n"
        "4. Provide a short, compelling reason for each pick (1 sentence)\n"
        "5. Write a 2-3 sentence summary of your curation\n\n"
        "Return ONLY valid JSON in this exact format:\n"
        "{\n"
        '  "weeklyPickIds": ["id1", "id2"],\n'
        '  "monthlyPickIds": ["id1", "id2"],\n'
        '  "reasonsById": {"id1": "Short reason for this pick"},\n'
        '  "summaryText": "2-3 sentence summary of your curation approach"\n'
        "}\n"
        "Use 6-10 weekly picks and 10-20 monthly picks. "
        "Do not include any text outside the JSON object."
    )


def _format_date(start_time: datetime | None) -> str:
    if start_time is None:
        return "Anytime"
    return f"{start_time:%a, %b} {start_time.day}"


def _or_none(values: list) -> str:
    return ", ".join(str(getattr(v, "value", v)) for v in values) or "None specified"


def build_user_message(
    taste_summary: UserTasteSummary,
    candidates: list[CandidateItem],
) -> str:
    avg_rating = f"{taste_summary.avg_rating:.1f}" if taste_summary.avg_rating else "No ratings yet"
    recent = ", ".join(taste_summary.recent_activity[:5]) or "No recent activity"

    lines = ["## User Taste Profile"]
    lines.append(f"- Liked categories: {_or_none(taste_summary.liked_categories)}")
    lines.append(f"- Disliked categories: {_or_none(taste_summary.disliked_categories)}")
    lines.append(f"- Preferred tags: {_or_none(taste_summary.preferred_tags)}")
    lines.append(f"- Average rating given: {avg_rating}")
    lines.append(f"- Items completed: {taste_summary.total_done}")
    lines.append(f"- Items passed: {taste_summary.total_pass}")
    lines.append(f"- Recent activity: {recent}")

    lines.append(f"\n## Candidate Items ({len(candidates)} total, select from these ONLY)")
    lines.append("| ID | Type | Title | Category | Tags | Date | Venue | Price | Match |")
    lines.append("|---|---|---|---|---|---|---|---|---|")
    for c in candidates:
        lines.append(
            f"| {c.id} | {c.type.value} | {c.title} | {c.category.value} "
            f"| {', '.join(c.tags)} | {_format_date(c.start_time)} "
            f"| {c.venue_name} | {c.price_range} | {c.score:.0f} |"
        )

    lines.append(
        "\nSelect 6-10 weekly picks and 10-20 monthly picks. "
        "Prioritize variety, relevance to the user's taste, and upcoming dates for weekly picks."
    )
    return "\n".join(lines)


def generate_ai_suggestions(
    taste_summary: UserTasteSummary,
    candidates: list[CandidateItem],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    city_name: str = "Denver",
) -> SuggestionOutput | None:
    """
    Ask the Groq model to curate weekly and monthly picks from *candidates*.

    Every returned ID is a supplied candidate ID. Returns None when the
    curator is disabled or unconfigured, when there are no candidates, or on
    any API / JSON / schema failure, so the caller can fall back.
    """
    if not config.enabled:
        logger.info("AI suggestions disabled")
        return None
    if not config.api_key:
        logger.info("No Groq API key configured")
        return None
    if not candidates:
        logger.info("No candidates for AI suggestions")
        return None

    valid_ids = {c.id for c in candidates}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout, max_retries=config.max_retries)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": build_system_prompt(city_name)},
                {"role": "user", "content": build_user_message(taste_summary, candidates)},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        if not content:
            logger.warning("Empty response from %s", config.model)
            return None

        output = SuggestionOutput.model_validate(json.loads(content))

    except json.JSONDecodeError:
        logger.warning("Curator response was not valid JSON", exc_info=True)
        return None
    except ValidationError:
        logger.warning("Curator response failed schema validation", exc_info=True)
        return None
    except Exception:
        logger.warning("Groq LLM call failed, falling back to deterministic picks", exc_info=True)
        return None

    result = sanitize_suggestions(
        output,
        valid_ids,
        min_weekly=config.min_weekly_picks,
        min_monthly=config.min_monthly_picks,
    )
    if isinstance(result, Rejected):
        logger.warning("Discarding AI suggestions: %s", result.reason)
        return None

    logger.info(
        "AI suggestions: %d weekly, %d monthly",
        len(result.output.weekly_pick_ids),
        len(result.output.monthly_pick_ids),
    )
    return result.output
