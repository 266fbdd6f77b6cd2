"""Server-rendered pages: search form, stats page, error page."""

from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from loguru import logger

from fortnite_coach.api.dependencies import get_feedback_generator, get_stats_service
from fortnite_coach.api.stats import ENTER_USERNAME_MESSAGE, describe_failure
from fortnite_coach.integrations.fortnite.schemas import GameModeStats, InputStats, PlayerStatsResult
from fortnite_coach.services.feedback_generator import FeedbackGenerator
from fortnite_coach.services.stats_service import StatsService

PAGE_TITLE = "Fortnite Stats Coach"
NO_STATS_PLACEHOLDER = "No battle royale matches recorded yet."

router = APIRouter(tags=["pages"])


def _layout(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
    <head>
        <meta charset="utf-8">
        <title>{PAGE_TITLE}</title>
    </head>
    <body>
        <h1>{PAGE_TITLE}</h1>
        {body}
    </body>
</html>
"""


def render_index(error: str | None = None, username: str = "") -> str:
    error_html = f'<p class="error">{escape(error)}</p>' if error else ""
    return _layout(
        f"""{error_html}
        <form action="/stats" method="get">
            <input type="text" name="username" value="{escape(username)}" placeholder="Epic display name">
            <label><input type="checkbox" name="feedback" value="true"> Include AI coaching</label>
            <button type="submit">Get stats</button>
        </form>"""
    )


def _mode_row(label: str, mode: GameModeStats | None) -> str:
    if mode is None:
        return f"<tr><td>{label}</td><td colspan=\"5\">-</td></tr>"
    return (
        f"<tr><td>{label}</td><td>{mode.matches_played}</td><td>{mode.place_top1}</td>"
        f"<td>{mode.kills}</td><td>{mode.kd:.2f}</td><td>{mode.winrate * 100:.1f}%</td></tr>"
    )


def _stats_table(title: str, section: InputStats | None) -> str:
    if section is None:
        return ""
    rows = "".join(_mode_row(label, getattr(section, label.lower())) for label in ("Solo", "Duo", "Squad"))
    return f"""<h2>{escape(title)}</h2>
        <table>
            <tr><th>Mode</th><th>Matches</th><th>Wins</th><th>Kills</th><th>K/D</th><th>Win rate</th></tr>
            {rows}
        </table>"""


def render_stats(stats: PlayerStatsResult, feedback: dict[str, str] | None = None) -> str:
    parts = [f"<h2>{escape(stats.name or '')}</h2>"]

    if stats.account_level_history:
        level = stats.account_level_history[0]
        parts.append(f"<p>Battle pass: level {level.level} ({level.progress_pct}%)</p>")

    if not stats.has_meaningful_stats:
        parts.append(f'<p class="placeholder">{NO_STATS_PLACEHOLDER}</p>')
    else:
        parts.append(_stats_table("Lifetime", stats.global_stats))
        if stats.per_input is not None:
            parts.append(_stats_table("Keyboard & Mouse", stats.per_input.keyboard_mouse))
            parts.append(_stats_table("Gamepad", stats.per_input.gamepad))
            parts.append(_stats_table("Touch", stats.per_input.touch))

    for game_mode, text in (feedback or {}).items():
        parts.append(f'<h3>AI coaching: {escape(game_mode)}</h3><pre class="feedback">{escape(text)}</pre>')

    parts.append('<p><a href="/">Search again</a></p>')
    return _layout("\n        ".join(parts))


def render_error(message: str = "An error occurred while processing your request.") -> str:
    return _layout(f'<p class="error">{escape(message)}</p><p><a href="/">Back</a></p>')


@router.get("/", response_class=HTMLResponse)
def index() -> str:
    return render_index()


@router.get("/stats", response_class=HTMLResponse)
def stats_page(
    username: str = Query(default=""),
    feedback: bool = Query(default=False, description="Generate AI coaching for lifetime modes"),
    stats_service: StatsService = Depends(get_stats_service),
    feedback_generator: FeedbackGenerator = Depends(get_feedback_generator),
) -> str:
    """Render stats for a username, or the search form with an error."""
    if not username.strip():
        logger.warning("No username provided by the user")
        return render_index(error=ENTER_USERNAME_MESSAGE)

    stats = stats_service.get_stats(username)
    if not stats.result:
        logger.warning(f"No stats available for {username}: outcome={stats.outcome}, error={stats.error}")
        return render_index(error=describe_failure(stats), username=username.strip())

    logger.info(
        f"Stats retrieved for {username}: name={stats.name}, "
        f"has_groupings={stats.has_groupings}, has_stats={stats.has_meaningful_stats}"
    )

    mode_feedback: dict[str, str] = {}
    if feedback and stats.global_stats is not None:
        for game_mode in ("solo", "duo", "squad"):
            mode = getattr(stats.global_stats, game_mode)
            if mode is not None and mode.has_matches:
                mode_feedback[game_mode] = feedback_generator.generate_feedback(mode, game_mode)

    return render_stats(stats, mode_feedback)


@router.get("/error", response_class=HTMLResponse)
def error_page() -> str:
    return render_error()
