"""Request and response bodies for the JSON endpoints."""

from pydantic import BaseModel, Field

from fortnite_coach.integrations.fortnite.schemas import GameModeStats
from fortnite_coach.services.performance import ManualStats


class ValidateUsernameResponse(BaseModel):
    success: bool
    message: str | None = None


class FeedbackRequest(BaseModel):
    game_mode: str = Field(default="solo", description="Game mode label (solo, duo, squad)")
    stats: GameModeStats = Field(description="Normalized stats for the game mode")


class QuickFeedbackRequest(BaseModel):
    game_mode: str = Field(default="solo", description="Game mode label (solo, duo, squad)")
    kd: float = Field(ge=0)
    winrate: float = Field(ge=0, description="Win rate as a fraction (0.1 = 10%)")
    top_placements: int = Field(ge=0)
    total_kills: int = Field(ge=0)
    matches_played: int = Field(ge=0)


class FeedbackResponse(BaseModel):
    success: bool
    feedback: str


class ManualStatsRequest(BaseModel):
    game_mode: str = Field(default="solo")
    wins: int = Field(default=0, ge=0)
    kills: int = Field(default=0, ge=0)
    matches: int = Field(default=1, ge=0)
    include_feedback: bool = Field(default=False, description="Also generate quick AI feedback")


class ManualStatsResponse(BaseModel):
    stats: ManualStats
    feedback: str | None = None
