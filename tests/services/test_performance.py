import pytest

from fortnite_coach.integrations.fortnite.schemas import GameModeStats
from fortnite_coach.services.performance import (
    NO_DATA,
    combat_efficiency,
    derive_manual_stats,
    placement_consistency,
    placement_rate_pct,
    survival_skill,
)


@pytest.mark.parametrize(
    ("kd", "expected"),
    [
        (2.5, "Elite"),
        (2.0, "Elite"),
        (1.7, "Strong"),
        (1.5, "Strong"),
        (1.2, "Solid"),
        (1.0, "Solid"),
        (0.5, "Developing"),
        (0.3, "Focus Needed"),
        (0.0, "Focus Needed"),
    ],
)
def test_combat_efficiency(kd, expected):
    assert combat_efficiency(GameModeStats(kd=kd)) == expected


@pytest.mark.parametrize(
    ("top10", "expected"),
    [(30, "Excellent"), (20, "Good"), (10, "Average"), (9, "Needs Work"), (None, "Needs Work")],
)
def test_placement_consistency(top10, expected):
    assert placement_consistency(GameModeStats(matches_played=100, top10=top10)) == expected


@pytest.mark.parametrize(
    ("outlived", "expected"),
    [(800, "Excellent"), (600, "Good"), (400, "Average"), (399, "Needs Work")],
)
def test_survival_skill(outlived, expected):
    assert survival_skill(GameModeStats(matches_played=10, players_outlived=outlived)) == expected


def test_indicators_without_matches_report_no_data():
    stats = GameModeStats(kd=3.0, top10=5, players_outlived=500)

    assert placement_consistency(stats) == NO_DATA
    assert survival_skill(stats) == NO_DATA
    assert combat_efficiency(stats) == "Elite"


def test_placement_rate_pct():
    assert placement_rate_pct(5, 20) == 25.0
    assert placement_rate_pct(None, 20) == 0.0
    assert placement_rate_pct(5, 0) == 0.0


def test_derive_manual_stats():
    stats = derive_manual_stats("solo", wins=5, kills=50, matches=25)

    assert stats.win_rate_pct == 20.0
    assert stats.kd == 2.5
    assert stats.kills_per_match == 2.0
    assert stats.winrate == pytest.approx(0.2)


def test_derive_manual_stats_guards_against_zero_matches():
    stats = derive_manual_stats("duo", wins=0, kills=3, matches=0)

    assert stats.matches == 1
    assert stats.kd == 3.0
    assert stats.win_rate_pct == 0.0


def test_derive_manual_stats_all_wins_counts_one_death():
    stats = derive_manual_stats("squad", wins=4, kills=8, matches=4)

    assert stats.kd == 8.0
    assert stats.win_rate_pct == 100.0
