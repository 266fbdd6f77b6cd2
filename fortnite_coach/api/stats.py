from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger

from fortnite_coach.api.dependencies import get_feedback_generator, get_stats_service
from fortnite_coach.api.schemas import (
    FeedbackRequest,
    FeedbackResponse,
    ManualStatsRequest,
    ManualStatsResponse,
    QuickFeedbackRequest,
    ValidateUsernameResponse,
)
from fortnite_coach.integrations.fortnite.schemas import PlayerStatsResult, StatsOutcome
from fortnite_coach.services.feedback_generator import FeedbackGenerator
from fortnite_coach.services.performance import derive_manual_stats
from fortnite_coach.services.stats_service import StatsService

ENTER_USERNAME_MESSAGE = "Please enter a Fortnite username."
UNREACHABLE_MESSAGE = "We couldn't reach the stats service. Please try again."
INVALID_USERNAME_MESSAGE = "Invalid username. Please try again."

router = APIRouter(prefix="/api", tags=["stats"])


def describe_failure(stats: PlayerStatsResult) -> str:
    """Turn a failed lookup into the message shown to the user."""
    if stats.outcome == StatsOutcome.INVALID_INPUT:
        return ENTER_USERNAME_MESSAGE
    if stats.outcome in (StatsOutcome.UNAVAILABLE, StatsOutcome.PARSE_FAILED):
        return UNREACHABLE_MESSAGE
    if stats.outcome == StatsOutcome.NOT_FOUND:
        return INVALID_USERNAME_MESSAGE
    return stats.error or INVALID_USERNAME_MESSAGE


def _status_code(outcome: StatsOutcome) -> int:
    if outcome == StatsOutcome.INVALID_INPUT:
        return 400
    if outcome == StatsOutcome.NOT_FOUND:
        return 404
    if outcome in (StatsOutcome.UNAVAILABLE, StatsOutcome.PARSE_FAILED):
        return 503
    return 502


@router.get("/validate-username", response_model=ValidateUsernameResponse)
def validate_username(
    username: str = Query(default="", description="Fortnite display name"),
    stats_service: StatsService = Depends(get_stats_service),
) -> ValidateUsernameResponse:
    """Check that a username resolves before rendering the stats page."""
    if not username.strip():
        logger.warning("Validation failed: no username provided")
        return ValidateUsernameResponse(success=False, message=ENTER_USERNAME_MESSAGE)

    stats = stats_service.get_stats(username)
    if not stats.result:
        return ValidateUsernameResponse(success=False, message=describe_failure(stats))

    # empty-but-valid accounts pass; the page shows placeholders
    return ValidateUsernameResponse(success=True)


@router.get("/stats/{username}", response_model=PlayerStatsResult)
def get_player_stats(
    username: str,
    stats_service: StatsService = Depends(get_stats_service),
):
    """Get normalized stats for a username as JSON."""
    stats = stats_service.get_stats(username)
    if stats.result:
        return stats
    return JSONResponse(
        status_code=_status_code(stats.outcome),
        content=stats.model_copy(update={"error": describe_failure(stats)}).model_dump(mode="json"),
    )


@router.post("/feedback", response_model=FeedbackResponse)
def generate_feedback(
    body: FeedbackRequest,
    feedback_generator: FeedbackGenerator = Depends(get_feedback_generator),
) -> FeedbackResponse:
    """Generate coaching feedback for one game mode's full stats."""
    feedback = feedback_generator.generate_feedback(body.stats, body.game_mode)
    return FeedbackResponse(success=True, feedback=feedback)


@router.post("/feedback/quick", response_model=FeedbackResponse)
def generate_quick_feedback(
    body: QuickFeedbackRequest,
    feedback_generator: FeedbackGenerator = Depends(get_feedback_generator),
) -> FeedbackResponse:
    """Generate short coaching feedback from five headline numbers."""
    feedback = feedback_generator.generate_quick_feedback(
        kd=body.kd,
        winrate=body.winrate,
        top_placements=body.top_placements,
        total_kills=body.total_kills,
        matches_played=body.matches_played,
        game_mode=body.game_mode,
    )
    return FeedbackResponse(success=True, feedback=feedback)


@router.post("/manual-stats", response_model=ManualStatsResponse)
def manual_stats(
    body: ManualStatsRequest,
    feedback_generator: FeedbackGenerator = Depends(get_feedback_generator),
) -> ManualStatsResponse:
    """Derive ratios from hand-entered totals, optionally with quick feedback."""
    stats = derive_manual_stats(body.game_mode, body.wins, body.kills, body.matches)
    logger.info(f"Manual stats derived for {stats.game_mode}: kd={stats.kd}, win_rate={stats.win_rate_pct}%")

    feedback = None
    if body.include_feedback:
        feedback = feedback_generator.generate_quick_feedback(
            kd=stats.kd,
            winrate=stats.winrate,
            top_placements=stats.wins,
            total_kills=stats.kills,
            matches_played=stats.matches,
            game_mode=stats.game_mode,
        )
    return ManualStatsResponse(stats=stats, feedback=feedback)
