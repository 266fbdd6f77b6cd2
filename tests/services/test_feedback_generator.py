import httpx
import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from conftest import StubChatModel
from fortnite_coach.core.settings import Settings
from fortnite_coach.integrations.fortnite.schemas import GameModeStats
from fortnite_coach.services.feedback_generator import (
    FEEDBACK_CACHE_TTL_SECONDS,
    FULL_FEEDBACK_MAX_TOKENS,
    FeedbackGenerator,
    build_full_request,
    build_llm,
    feedback_cache_key,
)


@pytest.fixture
def solo_stats() -> GameModeStats:
    return GameModeStats(
        place_top1=5,
        kd=1.5,
        winrate=0.2,
        kills=50,
        matches_played=25,
        top10=6,
        players_outlived=2100,
    )


def test_generates_and_caches_feedback(cache, solo_stats):
    llm = StubChatModel(reply="  Push your box fights.  ")
    generator = FeedbackGenerator(cache=cache, llm=llm)

    first = generator.generate_feedback(solo_stats, "solo")
    second = generator.generate_feedback(solo_stats, "solo")

    assert first == "Push your box fights."
    assert second == first
    assert len(llm.calls) == 1


def test_prompt_has_system_and_user_messages(cache, solo_stats):
    llm = StubChatModel()
    FeedbackGenerator(cache=cache, llm=llm).generate_feedback(solo_stats, "solo")

    system, human = llm.calls[0]
    assert isinstance(system, SystemMessage)
    assert isinstance(human, HumanMessage)
    assert "Performance Analysis" in system.content
    assert "K/D Ratio: 1.50" in human.content
    assert "Win Rate: 20.0%" in human.content
    assert "Combat Efficiency: Strong" in human.content
    assert "Placement Consistency: Good" in human.content
    assert "Survival Skill: Excellent" in human.content


def test_materially_identical_stats_share_a_cache_entry(cache, solo_stats):
    llm = StubChatModel()
    generator = FeedbackGenerator(cache=cache, llm=llm)

    generator.generate_feedback(solo_stats, "solo")
    generator.generate_feedback(solo_stats.model_copy(update={"kd": 1.5001, "deaths": 33}), "solo")
    generator.generate_feedback(solo_stats, "duo")

    assert len(llm.calls) == 2


def test_cache_expires_after_an_hour(cache, clock, solo_stats):
    llm = StubChatModel()
    generator = FeedbackGenerator(cache=cache, llm=llm)

    generator.generate_feedback(solo_stats, "solo")
    clock.advance(FEEDBACK_CACHE_TTL_SECONDS)
    generator.generate_feedback(solo_stats, "solo")

    assert len(llm.calls) == 2


@pytest.mark.parametrize(
    "error",
    [
        httpx.ReadTimeout("timed out"),
        RuntimeError("OpenAI API error: 500"),
    ],
)
def test_llm_failure_falls_back_to_template(cache, solo_stats, error):
    llm = StubChatModel(error=error)
    generator = FeedbackGenerator(cache=cache, llm=llm)

    text = generator.generate_feedback(solo_stats, "solo")

    assert text
    assert "1.50" in text
    assert "20.0%" in text
    assert "25 matches played and 5 wins" in text
    assert len(cache) == 0


def test_empty_reply_falls_back_to_template(cache, solo_stats):
    generator = FeedbackGenerator(cache=cache, llm=StubChatModel(reply="   "))

    text = generator.generate_feedback(solo_stats, "squad")

    assert "basic analysis for your squad stats" in text
    assert "1.50" in text


def test_quick_feedback_uses_quick_model_and_cache(cache):
    full_llm = StubChatModel(reply="full")
    quick_llm = StubChatModel(reply="quick")
    generator = FeedbackGenerator(cache=cache, llm=full_llm, quick_llm=quick_llm)

    first = generator.generate_quick_feedback(0.8, 0.05, 2, 16, 40, "duo")
    second = generator.generate_quick_feedback(0.8, 0.05, 2, 16, 40, "duo")

    assert first == second == "quick"
    assert full_llm.calls == []
    assert len(quick_llm.calls) == 1
    assert "K/D Ratio: 0.80" in quick_llm.calls[0][1].content


def test_quick_feedback_failure_contains_inputs(cache):
    generator = FeedbackGenerator(cache=cache, llm=StubChatModel(error=TimeoutError()))

    text = generator.generate_quick_feedback(0.75, 0.125, 3, 30, 24, "solo")

    assert "0.75" in text
    assert "12.5%" in text


def test_cache_key_rounds_to_two_decimals():
    key = feedback_cache_key("feedback", "solo", 1.23456, 0.0789, 5, 50, 25)

    assert key == "feedback:solo:1.23:0.08:5:50:25"


def test_full_request_handles_zero_matches():
    request = build_full_request(GameModeStats(), "solo")

    assert "Top 10 Finishes: 0 (0.0%)" in request
    assert "Placement Consistency: No Data" in request


def test_build_llm_uses_fixed_budget(monkeypatch):
    monkeypatch.setenv("FORTNITE_API_KEY", "fn-key")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    settings = Settings(_env_file=None)

    llm = build_llm(settings, FULL_FEEDBACK_MAX_TOKENS)

    assert llm.max_tokens == FULL_FEEDBACK_MAX_TOKENS
    assert llm.temperature == 0.7
    assert llm.model_name == "gpt-3.5-turbo"
