"""Categorical performance indicators and the manual stats calculator."""

from __future__ import annotations

from pydantic import BaseModel

from fortnite_coach.integrations.fortnite.schemas import GameModeStats

NO_DATA = "No Data"

# (minimum value, label), checked top-down
COMBAT_EFFICIENCY_THRESHOLDS = (
    (2.0, "Elite"),
    (1.5, "Strong"),
    (1.0, "Solid"),
    (0.5, "Developing"),
)
PLACEMENT_CONSISTENCY_THRESHOLDS = (
    (0.3, "Excellent"),
    (0.2, "Good"),
    (0.1, "Average"),
)
SURVIVAL_SKILL_THRESHOLDS = (
    (80.0, "Excellent"),
    (60.0, "Good"),
    (40.0, "Average"),
)


def _grade(value: float, thresholds: tuple[tuple[float, str], ...], floor: str) -> str:
    for minimum, label in thresholds:
        if value >= minimum:
            return label
    return floor


def combat_efficiency(stats: GameModeStats) -> str:
    return _grade(stats.kd, COMBAT_EFFICIENCY_THRESHOLDS, "Focus Needed")


def placement_consistency(stats: GameModeStats) -> str:
    """Grade the share of matches finished in the top 10."""
    if stats.matches_played == 0:
        return NO_DATA
    top10_rate = (stats.top10 or 0) / stats.matches_played
    return _grade(top10_rate, PLACEMENT_CONSISTENCY_THRESHOLDS, "Needs Work")


def survival_skill(stats: GameModeStats) -> str:
    """Grade the average number of players outlived per match."""
    if stats.matches_played == 0:
        return NO_DATA
    outlived_per_match = (stats.players_outlived or 0) / stats.matches_played
    return _grade(outlived_per_match, SURVIVAL_SKILL_THRESHOLDS, "Needs Work")


def placement_rate_pct(count: int | None, matches_played: int) -> float:
    if matches_played <= 0:
        return 0.0
    return (count or 0) / matches_played * 100


class ManualStats(BaseModel):
    game_mode: str
    wins: int
    kills: int
    matches: int
    win_rate_pct: float
    kd: float
    kills_per_match: float

    @property
    def winrate(self) -> float:
        return self.win_rate_pct / 100


def derive_manual_stats(game_mode: str, wins: int, kills: int, matches: int) -> ManualStats:
    """Derive ratios from hand-entered totals.

    K/D treats every match that was not a win as one death.
    """
    wins = max(wins, 0)
    kills = max(kills, 0)
    if matches <= 0:
        matches = 1

    return ManualStats(
        game_mode=game_mode,
        wins=wins,
        kills=kills,
        matches=matches,
        win_rate_pct=round(wins / matches * 100, 1),
        kd=round(kills / max(matches - wins, 1), 2),
        kills_per_match=round(kills / matches, 1),
    )
