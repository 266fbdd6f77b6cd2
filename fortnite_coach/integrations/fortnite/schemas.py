"""Internal stats model and the translation from the fortnite-api.com payload."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# fortnite-api.com does not expose the current season in the stats payload
CURRENT_SEASON_PLACEHOLDER = 31

GAME_MODES = ("solo", "duo", "squad")

# provider section name -> PerInput attribute
INPUT_SECTIONS = {
    "keyboardMouse": "keyboard_mouse",
    "gamepad": "gamepad",
    "touch": "touch",
}

# provider key -> (GameModeStats attribute, converter)
_ENRICHMENT_FIELDS: dict[str, tuple[str, type]] = {
    "top3": ("top3", int),
    "top5": ("top5", int),
    "top6": ("top6", int),
    "top10": ("top10", int),
    "top12": ("top12", int),
    "top25": ("top25", int),
    "score": ("score", int),
    "scorePerMin": ("score_per_min", float),
    "scorePerMatch": ("score_per_match", float),
    "killsPerMin": ("kills_per_min", float),
    "killsPerMatch": ("kills_per_match", float),
    "deaths": ("deaths", int),
    "minutesPlayed": ("minutes_played", int),
    "playersOutlived": ("players_outlived", int),
    "lastModified": ("last_modified", str),
}


class StatsOutcome(StrEnum):
    SUCCESS = "success"
    EMPTY = "empty"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"
    UNAVAILABLE = "unavailable"
    PARSE_FAILED = "parse_failed"


class GameModeStats(BaseModel):
    place_top1: int = 0
    kd: float = 0.0
    winrate: float = 0.0
    kills: int = 0
    matches_played: int = 0

    top3: int | None = None
    top5: int | None = None
    top6: int | None = None
    top10: int | None = None
    top12: int | None = None
    top25: int | None = None
    score: int | None = None
    score_per_min: float | None = None
    score_per_match: float | None = None
    kills_per_min: float | None = None
    kills_per_match: float | None = None
    deaths: int | None = None
    minutes_played: int | None = None
    players_outlived: int | None = None
    last_modified: str | None = None

    @property
    def has_matches(self) -> bool:
        return self.matches_played > 0


class InputStats(BaseModel):
    solo: GameModeStats | None = None
    duo: GameModeStats | None = None
    squad: GameModeStats | None = None

    def modes(self) -> list[GameModeStats]:
        return [mode for mode in (self.solo, self.duo, self.squad) if mode is not None]


class GlobalStats(InputStats):
    """Lifetime stats, independent of input device."""


class PerInput(BaseModel):
    keyboard_mouse: InputStats | None = None
    gamepad: InputStats | None = None
    touch: InputStats | None = None

    def sections(self) -> list[InputStats]:
        return [s for s in (self.keyboard_mouse, self.gamepad, self.touch) if s is not None]


class AccountLevel(BaseModel):
    season: int
    level: int
    progress_pct: int


class PlayerStatsResult(BaseModel):
    result: bool
    outcome: StatsOutcome
    error: str | None = None
    name: str | None = None
    account_id: str | None = None
    account_level_history: list[AccountLevel] | None = None
    global_stats: GlobalStats | None = None
    per_input: PerInput | None = None
    season_used: int | None = Field(default=None, description="Season the stats were scoped to, when known")

    @classmethod
    def failure(cls, error: str, outcome: StatsOutcome) -> PlayerStatsResult:
        return cls(result=False, outcome=outcome, error=error)

    def all_modes(self) -> list[GameModeStats]:
        modes: list[GameModeStats] = []
        if self.global_stats is not None:
            modes.extend(self.global_stats.modes())
        if self.per_input is not None:
            for section in self.per_input.sections():
                modes.extend(section.modes())
        return modes

    @property
    def has_groupings(self) -> bool:
        return self.global_stats is not None or self.per_input is not None

    @property
    def has_meaningful_stats(self) -> bool:
        """True when any mode, global or per-input, has at least one match played."""
        return any(mode.has_matches for mode in self.all_modes())


def _section(payload: Any, key: str) -> dict[str, Any] | None:
    value = payload.get(key) if isinstance(payload, dict) else None
    return value if isinstance(value, dict) else None


def _coerce(raw: dict[str, Any], key: str, converter: type, default: Any = None) -> Any:
    value = raw.get(key)
    if value is None:
        return default
    converted = converter(value)
    if isinstance(converted, float) and not math.isfinite(converted):
        raise ValueError(f"{key} is not a finite number: {value!r}")
    return converted


def convert_game_mode_stats(raw: dict[str, Any]) -> GameModeStats:
    """Map one provider game-mode object onto GameModeStats.

    Core counters default to zero; enrichment fields stay None when the
    provider omits them.
    """
    enrichment = {
        attr: _coerce(raw, key, converter) for key, (attr, converter) in _ENRICHMENT_FIELDS.items()
    }
    return GameModeStats(
        place_top1=_coerce(raw, "wins", int, 0),
        kd=_coerce(raw, "kd", float, 0.0),
        winrate=_coerce(raw, "winRate", float, 0.0),
        kills=_coerce(raw, "kills", int, 0),
        matches_played=_coerce(raw, "matches", int, 0),
        **enrichment,
    )


def _convert_input_stats(section: dict[str, Any], model: type[InputStats]) -> InputStats:
    modes = {}
    for mode in GAME_MODES:
        raw_mode = _section(section, mode)
        if raw_mode is not None:
            modes[mode] = convert_game_mode_stats(raw_mode)
    return model(**modes)


def normalize_stats_payload(data: dict[str, Any], fallback_name: str) -> PlayerStatsResult | None:
    """Translate the provider's ``data`` object into a PlayerStatsResult.

    Args:
        data: The ``data`` section of a fortnite-api.com stats response
        fallback_name: Name to use when the payload has no account name

    Returns:
        A successful PlayerStatsResult, or None if the payload could not be read
    """
    try:
        account = _section(data, "account")
        name = fallback_name
        account_id = None
        if account is not None:
            name = account.get("name") or fallback_name
            account_id = account.get("id")

        level_history = None
        battle_pass = _section(data, "battlePass")
        if battle_pass is not None:
            level_history = [
                AccountLevel(
                    season=CURRENT_SEASON_PLACEHOLDER,
                    level=_coerce(battle_pass, "level", int, 0),
                    progress_pct=_coerce(battle_pass, "progress", int, 0),
                )
            ]

        global_stats = None
        per_input = None
        stats = _section(data, "stats")
        if stats is not None:
            lifetime = _section(stats, "all")
            if lifetime is not None:
                global_stats = _convert_input_stats(lifetime, GlobalStats)

            inputs = {}
            for provider_key, attr in INPUT_SECTIONS.items():
                section = _section(stats, provider_key)
                if section is not None:
                    inputs[attr] = _convert_input_stats(section, InputStats)
            if inputs:
                per_input = PerInput(**inputs)

        result = PlayerStatsResult(
            result=True,
            outcome=StatsOutcome.SUCCESS,
            name=str(name),
            account_id=str(account_id) if account_id is not None else None,
            account_level_history=level_history,
            global_stats=global_stats,
            per_input=per_input,
        )
    except (TypeError, ValueError, AttributeError, OverflowError):
        return None

    if not result.has_meaningful_stats:
        return result.model_copy(update={"outcome": StatsOutcome.EMPTY})
    return result
