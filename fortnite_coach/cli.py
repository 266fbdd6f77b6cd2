"""Developer CLI.

Runs the web server, or exercises the stats pipeline and feedback generator
directly from the terminal using the same wiring as the app.
"""

import json

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.text import Text

from fortnite_coach.core.logger import setup_logger
from fortnite_coach.core.settings import get_settings
from fortnite_coach.integrations.fortnite.schemas import GAME_MODES
from fortnite_coach.main import build_services

DEFAULT_HOST = "127.0.0.1"

app = typer.Typer(help="Fortnite Stats Coach developer CLI")
console = Console()


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("fortnite_coach.main:create_app", factory=True, host=host, port=port, reload=reload)


@app.command()
def stats(
    username: str = typer.Argument(..., help="Epic display name"),
    feedback: str | None = typer.Option(None, "--feedback", "-f", help="Game mode to coach (solo, duo, squad)"),
) -> None:
    """Fetch stats for a username and optionally generate coaching for one lifetime mode."""
    if feedback is not None and feedback not in GAME_MODES:
        console.print(f"[red]Error:[/red] --feedback must be one of {', '.join(GAME_MODES)}", style="bold red")
        raise typer.Exit(1)

    settings = get_settings()
    setup_logger(level=settings.log_level, log_file=settings.log_file)
    stats_service, feedback_generator = build_services(settings)

    result = stats_service.get_stats(username)
    console.print(JSON(json.dumps(result.model_dump(mode="json"))))

    if not result.result:
        console.print(Panel(Text(result.error or "Lookup failed", style="bold red"), title=str(result.outcome)))
        raise typer.Exit(code=1)

    if feedback:
        mode = getattr(result.global_stats, feedback, None) if result.global_stats else None
        if mode is None:
            console.print(Text(f"No lifetime {feedback} stats for {result.name}", style="yellow"))
            raise typer.Exit(code=1)
        text = feedback_generator.generate_feedback(mode, feedback)
        console.print(Panel(text, title=f"AI coaching: {feedback}"))


if __name__ == "__main__":
    app()
