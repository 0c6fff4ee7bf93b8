"""Main CLI application using Typer."""

import sys

import typer
from rich.console import Console

from trustscore import __version__

# Create Typer app
app = typer.Typer(
    name="trustscore",
    help="trustscore - ML trust scoring for zero-trust access decisions",
    no_args_is_help=True,
)

console = Console()

CONFIG_HELP = "Path to config file (default: ~/.trustscore/trustscore.yaml)"


@app.command()
def version():
    """Show trustscore version."""
    console.print(f"trustscore version {__version__}")


@app.command()
def init(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
):
    """Write a default configuration file."""
    from trustscore.cli.init_cmd import init_command

    init_command(config_path=config_path, force=force)


@app.command()
def train(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    samples: int = typer.Option(None, "--samples", "-n", help="Number of synthetic samples"),
    seed: int = typer.Option(None, "--seed", "-s", help="Generator seed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Train the trust model on synthetic data and save it."""
    from trustscore.cli.model_cmd import train_command

    train_command(config_path=config_path, samples=samples, seed=seed, verbose=verbose)


@app.command()
def evaluate(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    samples: int = typer.Option(None, "--samples", "-n", help="Number of fresh test samples"),
    seed: int = typer.Option(None, "--seed", "-s", help="Generator seed (default: time-based)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Evaluate the saved model on fresh synthetic data."""
    from trustscore.cli.model_cmd import evaluate_command

    evaluate_command(config_path=config_path, samples=samples, seed=seed, verbose=verbose)


@app.command("cross-validate")
def cross_validate(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    samples: int = typer.Option(None, "--samples", "-n", help="Number of synthetic samples"),
    folds: int = typer.Option(None, "--folds", "-k", help="Number of folds"),
    seed: int = typer.Option(None, "--seed", "-s", help="Seed for data and fold split"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run k-fold cross-validation of the configured model."""
    from trustscore.cli.model_cmd import cross_validate_command

    cross_validate_command(
        config_path=config_path, samples=samples, folds=folds, seed=seed, verbose=verbose
    )


@app.command()
def confusion(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    samples: int = typer.Option(None, "--samples", "-n", help="Number of fresh test samples"),
    threshold: float = typer.Option(
        None, "--threshold", "-t", help="Score below which a user counts as HIGH risk"
    ),
    seed: int = typer.Option(None, "--seed", "-s", help="Generator seed (default: time-based)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Show high-risk detection metrics for the saved model."""
    from trustscore.cli.model_cmd import confusion_command

    confusion_command(
        config_path=config_path, samples=samples, threshold=threshold, seed=seed, verbose=verbose
    )


@app.command("model-info")
def model_info(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Show information about the saved model artifact."""
    from trustscore.cli.model_cmd import model_info_command

    model_info_command(config_path=config_path)


@app.command()
def backup(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Back up the saved model artifact."""
    from trustscore.cli.model_cmd import backup_command

    backup_command(config_path=config_path)


@app.command("score-demo")
def score_demo(
    config_path: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    profile: str = typer.Option(
        "medium", "--profile", "-p", help="Synthetic user profile (low/medium/high risk)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Score a synthetic user through the full pipeline."""
    from trustscore.cli.model_cmd import score_demo_command

    score_demo_command(config_path=config_path, profile=profile, verbose=verbose)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
