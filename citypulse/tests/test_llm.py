import json
from datetime import datetime
from unittest.mock import MagicMock, patch

from citypulse.llm.config import LLMConfig
from citypulse.llm.curator import build_user_message, generate_ai_suggestions
from citypulse.llm.models import CandidateItem, SuggestionOutput, UserTasteSummary
from citypulse.llm.sanitize import Accepted, Rejected, sanitize_suggestions
from citypulse.recommendations.models import ItemType
from citypulse.scoring.models import Category

SAMPLE_CANDIDATES = [
    CandidateItem(
        id=f"c{i}",
        type=ItemType.EVENT if i % 2 else ItemType.PLACE,
        title=f"Candidate {i}",
        category=[Category.ART, Category.FOOD, Category.LIVE_MUSIC][i % 3],
        tags=["local"],
        start_time=datetime(2026, 3, 6, 19, 0) if i % 2 else None,
        venue_name=f"Venue {i}",
        price_range="$20",
        score=50 - i,
    )
    for i in range(8)
]

SAMPLE_SUMMARY = UserTasteSummary(
    liked_categories=[Category.ART],
    preferred_tags=["local"],
    avg_rating=4.5,
    total_done=2,
    recent_activity=['DONE "Gallery walk" (ART)'],
)

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _payload(weekly, monthly, summary="A balanced mix of art and food this week."):
    return {
        "weeklyPickIds": weekly,
        "monthlyPickIds": monthly,
        "reasonsById": {pick_id: f"Because {pick_id}" for pick_id in set(weekly) | set(monthly)},
        "summaryText": summary,
    }


@patch("citypulse.llm.curator.Groq")
def test_generate_ai_suggestions_returns_picks(mock_groq_cls):
    content = json.dumps(_payload(["c1", "c3", "c5"], ["c0", "c2", "c4", "c6", "c7"]))
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(content)

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert result.weekly_pick_ids == ["c1", "c3", "c5"]
    assert result.monthly_pick_ids == ["c0", "c2", "c4", "c6", "c7"]
    assert result.reasons_by_id["c1"] == "Because c1"
    mock_groq_cls.assert_called_once_with(
        api_key="test-key", timeout=ENABLED_CONFIG.timeout, max_retries=0
    )


@patch("citypulse.llm.curator.Groq")
def test_foreign_ids_are_dropped(mock_groq_cls):
    content = json.dumps(_payload(["c1", "ghost", "c3", "c5"], ["c0", "c2", "c4", "c6", "c7", "made-up"]))
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(content)

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert "ghost" not in result.weekly_pick_ids
    assert "made-up" not in result.monthly_pick_ids
    assert "ghost" not in result.reasons_by_id
    valid = {c.id for c in SAMPLE_CANDIDATES}
    assert set(result.weekly_pick_ids) <= valid
    assert set(result.monthly_pick_ids) <= valid


@patch("citypulse.llm.curator.Groq")
def test_too_few_valid_ids_discards_result(mock_groq_cls):
    content = json.dumps(_payload(["c1", "ghost", "phantom"], ["c0", "c2", "c4", "c6", "c7"]))
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(content)

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert result is None


@patch("citypulse.llm.curator.Groq")
def test_fallback_on_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert result is None


@patch("citypulse.llm.curator.Groq")
def test_fallback_on_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert result is None


@patch("citypulse.llm.curator.Groq")
def test_fallback_on_schema_violation(mock_groq_cls):
    content = json.dumps(_payload(["c1", "c3", "c5"], ["c0", "c2", "c4", "c6", "c7"], summary="short"))
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(content)

    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=ENABLED_CONFIG)

    assert result is None


@patch("citypulse.llm.curator.Groq")
def test_disabled(mock_groq_cls):
    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=DISABLED_CONFIG)

    assert result is None
    mock_groq_cls.assert_not_called()


def test_missing_api_key():
    result = generate_ai_suggestions(SAMPLE_SUMMARY, SAMPLE_CANDIDATES, config=LLMConfig(api_key="", enabled=True))

    assert result is None


def test_empty_candidates():
    result = generate_ai_suggestions(SAMPLE_SUMMARY, [], config=ENABLED_CONFIG)

    assert result is None


def test_user_message_lists_every_candidate():
    message = build_user_message(SAMPLE_SUMMARY, SAMPLE_CANDIDATES)

    for candidate in SAMPLE_CANDIDATES:
        assert f"| {candidate.id} |" in message
    assert "Liked categories: ART" in message
    assert "Average rating given: 4.5" in message
    assert "Fri, Mar 6" in message
    assert "Anytime" in message


# ── Sanitizer ────────────────────────────────────────────────────────────


class TestSanitize:
    VALID = {"a", "b", "c", "d", "e", "f"}

    def _output(self, weekly, monthly, reasons=None):
        return SuggestionOutput(
            weeklyPickIds=weekly,
            monthlyPickIds=monthly,
            reasonsById=reasons or {},
            summaryText="Ten characters at least.",
        )

    def test_accepts_clean_output(self):
        result = sanitize_suggestions(self._output(["a", "b", "c"], ["a", "b", "c", "d", "e"]), self.VALID)
        assert isinstance(result, Accepted)
        assert result.dropped_ids == ()

    def test_dedupes_and_drops_unknown(self):
        output = self._output(
            ["a", "a", "x", "b", "c"],
            ["b", "c", "d", "e", "f", "y"],
            reasons={"a": "ok", "x": "bad", "y": "bad"},
        )
        result = sanitize_suggestions(output, self.VALID)

        assert isinstance(result, Accepted)
        assert result.output.weekly_pick_ids == ["a", "b", "c"]
        assert result.output.monthly_pick_ids == ["b", "c", "d", "e", "f"]
        assert result.output.reasons_by_id == {"a": "ok"}
        assert set(result.dropped_ids) == {"x", "y"}

    def test_rejects_short_lists(self):
        result = sanitize_suggestions(self._output(["a", "b"], ["a", "b", "c", "d", "e"]), self.VALID)
        assert isinstance(result, Rejected)
        assert "weekly=2/3" in result.reason

    def test_minimums_are_configurable(self):
        result = sanitize_suggestions(self._output(["a"], ["b"]), self.VALID, min_weekly=1, min_monthly=1)
        assert isinstance(result, Accepted)
