"""
DrawYourMeme CLI - Command-line interface.

Run the API (and the Telegram bot alongside it) from the terminal.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from drawyourmeme.config import Settings
from drawyourmeme.core.exceptions import ConfigurationError

app = typer.Typer(
    name="drawyourmeme",
    help="DrawYourMeme - draw, launch and vote on meme tokens",
    no_args_is_help=True,
)
console = Console()


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def _mask(secret: str | None) -> str:
    if not secret:
        return "(not set)"
    return f"{secret[:4]}...{'*' * 4}"


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
):
    """Run the HTTP API; starts the Telegram bot when a token is configured."""
    import uvicorn

    from drawyourmeme.api.app import configure_logging, create_app

    settings = _load_settings()
    updates = {}
    if host:
        updates["host"] = host
    if port:
        updates["port"] = port
    settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level)

    console.print(
        Panel.fit(
            f"[bold blue]DrawYourMeme[/bold blue]\n"
            f"Listening: http://{settings.host}:{settings.port}\n"
            f"Uploads: {settings.uploads_dir}\n"
            f"Telegram bot: {'enabled' if settings.bot_enabled else 'disabled'}",
        )
    )

    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command("config")
def show_config():
    """Show the effective settings."""
    settings = _load_settings()

    table = Table(title="DrawYourMeme Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in settings.model_dump().items():
        if key == "telegram_bot_token":
            value = _mask(value)
        elif isinstance(value, list):
            value = ", ".join(value)
        table.add_row(key, str(value))

    console.print(table)


@app.command()
def version():
    """Show DrawYourMeme version."""
    from drawyourmeme import __version__

    console.print(f"DrawYourMeme v{__version__}")


if __name__ == "__main__":
    app()
