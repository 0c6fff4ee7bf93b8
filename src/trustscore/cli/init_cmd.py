"""Initialize command - default config generation."""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from trustscore.config.loader import DEFAULT_CONFIG_PATH, save_config
from trustscore.config.schema import TrustScoreConfig

console = Console()


def init_command(config_path: str | None = None, force: bool = False) -> None:
    """Write a default trustscore configuration.

    Args:
        config_path: Destination path (default: ~/.trustscore/trustscore.yaml)
        force: Overwrite existing config if present
    """
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("Use [bold]--force[/bold] to overwrite.")
        raise typer.Exit(0)

    config = TrustScoreConfig()
    saved = save_config(config, path)

    console.print(
        Panel.fit(
            f"[green]✓[/green] Wrote default configuration to [cyan]{saved}[/cyan]\n"
            f"Models will be stored in [cyan]{config.store.model_dir}[/cyan]\n\n"
            "Next: [bold]trustscore train[/bold]",
            title="trustscore initialized",
            border_style="green",
        )
    )
