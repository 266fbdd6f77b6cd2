"""AI coaching feedback for game-mode stats.

Prompts are built from the raw numbers plus the categorical indicators in
``performance``. Generated text is cached for an hour; any LLM failure
degrades to a templated summary built from the same numbers.
"""

from __future__ import annotations

from typing import Any, Protocol

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from loguru import logger
from pydantic import SecretStr

from fortnite_coach.core.cache import TTLCache
from fortnite_coach.core.settings import Settings
from fortnite_coach.integrations.fortnite.schemas import GameModeStats
from fortnite_coach.services.performance import (
    combat_efficiency,
    placement_consistency,
    placement_rate_pct,
    survival_skill,
)

FEEDBACK_CACHE_TTL_SECONDS = 60 * 60
FEEDBACK_TEMPERATURE = 0.7
FULL_FEEDBACK_MAX_TOKENS = 600
QUICK_FEEDBACK_MAX_TOKENS = 300

FULL_SYSTEM_PROMPT = """You are an expert Fortnite coach providing comprehensive, actionable feedback based on detailed player statistics.

Format your response as exactly 3 sections with these headers:
🎯 **Performance Analysis**
💡 **Key Improvements**
🚀 **Action Plan**

Each section should be 3-4 sentences with detailed analysis. Use bullet points for improvements and action items.
Be direct, encouraging, and use Fortnite terminology (box fights, rotations, zone positioning, etc.).
Provide in-depth analysis based on ALL available performance data."""

QUICK_SYSTEM_PROMPT = """You are an expert Fortnite coach providing concise, actionable feedback.

Format your response as exactly 3 sections with these headers:
🎯 **Performance Analysis**
💡 **Key Improvements**
🚀 **Action Plan**

Keep each section to 2-3 short sentences maximum. Use bullet points for improvements and action items.
Be direct, encouraging, and use Fortnite terminology (box fights, rotations, zone positioning, etc.).
Focus on the most impactful advice only."""


class ChatModel(Protocol):
    def invoke(self, input: Any) -> Any: ...


def build_llm(settings: Settings, max_tokens: int) -> ChatOpenAI:
    """Get a configured chat model with a fixed token budget."""
    return ChatOpenAI(
        model=settings.openai_model,
        temperature=FEEDBACK_TEMPERATURE,
        max_tokens=max_tokens,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
        api_key=SecretStr(settings.openai_api_key),
    )


def _prompt(system_prompt: str) -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([
        ("system", system_prompt),
        ("human", "{analysis_request}"),
    ])


def feedback_cache_key(
    prefix: str,
    game_mode: str,
    kd: float,
    winrate: float,
    wins: int,
    kills: int,
    matches_played: int,
) -> str:
    return f"{prefix}:{game_mode}:{kd:.2f}:{winrate:.2f}:{wins}:{kills}:{matches_played}"


def fallback_feedback(
    kd: float,
    winrate: float,
    wins: int,
    matches_played: int,
    game_mode: str,
) -> str:
    return (
        f"Unable to generate AI feedback at this time. Here's a basic analysis for your {game_mode} stats:\n\n"
        f"Your K/D ratio of {kd:.2f} and win rate of {winrate * 100:.1f}% show your current performance level. "
        f"With {matches_played} matches played and {wins} wins, keep practicing to improve your skills. "
        "Focus on building mechanics, positioning, and game awareness to enhance your gameplay."
    )


def build_full_request(stats: GameModeStats, game_mode: str) -> str:
    matches = stats.matches_played
    return f"""Analyze these comprehensive Fortnite {game_mode} statistics:

Core Performance:
• K/D Ratio: {stats.kd:.2f}
• Win Rate: {stats.winrate * 100:.1f}%
• Wins: {stats.place_top1}
• Total Kills: {stats.kills}
• Matches Played: {matches}

Placement Consistency:
• Top 3 Finishes: {stats.top3 or 0} ({placement_rate_pct(stats.top3, matches):.1f}%)
• Top 5 Finishes: {stats.top5 or 0} ({placement_rate_pct(stats.top5, matches):.1f}%)
• Top 10 Finishes: {stats.top10 or 0} ({placement_rate_pct(stats.top10, matches):.1f}%)

Combat & Survival:
• Deaths: {stats.deaths or 0}
• Kills Per Minute: {stats.kills_per_min or 0:.2f}
• Minutes Played: {stats.minutes_played or 0}
• Players Outlived: {stats.players_outlived or 0}

Performance Indicators:
• Placement Consistency: {placement_consistency(stats)}
• Combat Efficiency: {combat_efficiency(stats)}
• Survival Skill: {survival_skill(stats)}

Provide comprehensive analysis in exactly 3 sections:
1. Performance Analysis: Detailed assessment of combat vs survival balance, placement consistency, and overall skill level
2. Key Improvements: 3-4 specific areas focusing on weakest aspects with detailed bullet points
3. Action Plan: 3-4 concrete practice steps targeting identified weaknesses with specific bullet points

Keep total response under 500 words. Focus on the most impactful improvements based on their comprehensive performance data."""


def build_quick_request(
    kd: float,
    winrate: float,
    top_placements: int,
    total_kills: int,
    matches_played: int,
    game_mode: str,
) -> str:
    return f"""Analyze these Fortnite {game_mode} stats:

Core Performance:
• K/D Ratio: {kd:.2f}
• Win Rate: {winrate * 100:.1f}%
• Wins: {top_placements}
• Total Kills: {total_kills}
• Matches Played: {matches_played}

Provide analysis in exactly 3 sections:
1. Performance Analysis: Brief skill assessment focusing on combat vs survival balance
2. Key Improvements: 2-3 specific areas (combat skills, positioning, game sense) with bullet points
3. Action Plan: 2-3 concrete practice steps with bullet points

Keep total response under 200 words. Focus on the most impactful improvements for their skill level."""


def _extract_text(result: Any) -> str:
    content = getattr(result, "content", result)
    if isinstance(content, list):
        content = "".join(part if isinstance(part, str) else str(part.get("text", "")) for part in content)
    return str(content or "").strip()


class FeedbackGenerator:
    """Generates coaching text through the chat model, with caching and a templated fallback."""

    def __init__(self, cache: TTLCache, llm: ChatModel, quick_llm: ChatModel | None = None) -> None:
        self._cache = cache
        self._llm = llm
        self._quick_llm = quick_llm or llm

    def generate_feedback(self, stats: GameModeStats, game_mode: str) -> str:
        """Generate comprehensive feedback for one game mode's stats.

        Args:
            stats: Normalized stats for the mode
            game_mode: Label used in the prompt and cache key (e.g. "solo")

        Returns:
            Coaching text; the templated summary if the LLM call fails
        """
        cache_key = feedback_cache_key(
            "feedback",
            game_mode,
            stats.kd,
            stats.winrate,
            stats.place_top1,
            stats.kills,
            stats.matches_played,
        )
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"[FEEDBACK] Returning cached AI feedback for {game_mode}")
            return cached

        logger.info(
            f"[FEEDBACK] Generating fresh AI feedback for {game_mode} "
            f"(combat={combat_efficiency(stats)}, placement={placement_consistency(stats)}, "
            f"survival={survival_skill(stats)})"
        )
        text = self._complete(self._llm, FULL_SYSTEM_PROMPT, build_full_request(stats, game_mode), game_mode)
        if text is None:
            return fallback_feedback(stats.kd, stats.winrate, stats.place_top1, stats.matches_played, game_mode)

        self._cache.set(cache_key, text, FEEDBACK_CACHE_TTL_SECONDS)
        return text

    def generate_quick_feedback(
        self,
        kd: float,
        winrate: float,
        top_placements: int,
        total_kills: int,
        matches_played: int,
        game_mode: str,
    ) -> str:
        """Generate short feedback from five scalar metrics."""
        cache_key = feedback_cache_key(
            "feedback:quick", game_mode, kd, winrate, top_placements, total_kills, matches_played
        )
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"[FEEDBACK] Returning cached quick feedback for {game_mode}")
            return cached

        request = build_quick_request(kd, winrate, top_placements, total_kills, matches_played, game_mode)
        text = self._complete(self._quick_llm, QUICK_SYSTEM_PROMPT, request, game_mode)
        if text is None:
            return fallback_feedback(kd, winrate, top_placements, matches_played, game_mode)

        self._cache.set(cache_key, text, FEEDBACK_CACHE_TTL_SECONDS)
        return text

    def _complete(self, llm: ChatModel, system_prompt: str, request: str, game_mode: str) -> str | None:
        messages = _prompt(system_prompt).format_messages(analysis_request=request)
        try:
            result = llm.invoke(messages)
        except Exception as e:
            logger.error(f"[FEEDBACK] Error generating feedback for {game_mode}: {e}")
            return None

        text = _extract_text(result)
        if not text:
            logger.error(f"[FEEDBACK] Empty feedback received for {game_mode}")
            return None

        logger.info(f"[FEEDBACK] Successfully generated feedback for {game_mode}")
        return text
