"""FastAPI dependencies resolving the services built by the app factory."""

from __future__ import annotations

from fastapi import Request

from fortnite_coach.services.feedback_generator import FeedbackGenerator
from fortnite_coach.services.stats_service import StatsService


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service


def get_feedback_generator(request: Request) -> FeedbackGenerator:
    return request.app.state.feedback_generator
