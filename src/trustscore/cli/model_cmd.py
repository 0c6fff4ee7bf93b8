"""CLI commands for training, evaluating and inspecting the trust model."""

import logging
from datetime import datetime, timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trustscore.config.loader import load_config
from trustscore.config.schema import TrustScoreConfig
from trustscore.ml.evaluation import ModelEvaluator
from trustscore.ml.factory import create_model_store, create_trust_model
from trustscore.ml.training import ModelTrainer
from trustscore.ml.trust_model import TrustModel
from trustscore.scoring.engine import TrustScoreEngine
from trustscore.scoring.features import FeatureExtractor, utc_now
from trustscore.scoring.history import InMemoryHistorySink
from trustscore.scoring.models import (
    AccessEvent,
    DeviceRecord,
    EvaluationMetrics,
    NetworkType,
    RiskLevel,
    UserRecord,
)

console = Console()

_RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}


def _load(config_path: str | None, verbose: bool = False) -> TrustScoreConfig:
    config = load_config(Path(config_path)) if config_path else load_config()
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return config


def _trainer(config: TrustScoreConfig) -> ModelTrainer:
    return ModelTrainer(create_trust_model(config), create_model_store(config))


def _require_trained(config: TrustScoreConfig) -> TrustModel:
    trainer = _trainer(config)
    if not trainer.load():
        console.print(f"[yellow]No trained model found at {trainer.store.path}[/yellow]")
        console.print("Run [bold]trustscore train[/bold] first.")
        raise typer.Exit(1)
    return trainer.model


def _print_regression(metrics: EvaluationMetrics) -> None:
    table = Table(title="Model Evaluation")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")

    table.add_row("Mean absolute error", f"{metrics.mean_absolute_error:.4f}")
    table.add_row("Root mean squared error", f"{metrics.root_mean_squared_error:.4f}")
    table.add_row("Correlation coefficient", f"{metrics.correlation_coefficient:.4f}")
    table.add_row("R²", f"{metrics.r2_score:.4f}")
    table.add_row("Accuracy (1 - MAE/100)", f"{metrics.accuracy:.2%}")
    table.add_row("Samples", str(metrics.num_samples))
    if metrics.folds:
        table.add_row("Folds", str(metrics.folds))
        table.add_row("Fold MAE", ", ".join(f"{m:.2f}" for m in metrics.fold_mae))
    table.add_row("Time", f"{metrics.evaluation_time_ms:.0f}ms")

    console.print(table)


def train_command(
    config_path: str | None = None,
    samples: int | None = None,
    seed: int | None = None,
    verbose: bool = False,
) -> None:
    """Train the configured model and save it to the store."""
    config = _load(config_path, verbose)
    num_samples = samples if samples is not None else config.training.samples
    seed = seed if seed is not None else config.training.seed

    console.print(
        f"[bold]Training {config.model.algorithm} model on {num_samples} samples...[/bold]"
    )
    result = _trainer(config).train(num_samples=num_samples, seed=seed)

    console.print(f"[green]✓[/green] Trained in {result.training_time_ms:.0f}ms (seed={result.seed})")
    console.print(f"Model saved to [cyan]{result.model_path}[/cyan]")


def evaluate_command(
    config_path: str | None = None,
    samples: int | None = None,
    seed: int | None = None,
    verbose: bool = False,
) -> None:
    """Evaluate the saved model on fresh data."""
    config = _load(config_path, verbose)
    model = _require_trained(config)
    num_samples = samples if samples is not None else config.evaluation.samples

    metrics = ModelEvaluator(model).evaluate(num_samples=num_samples, seed=seed)
    _print_regression(metrics)
    if verbose:
        console.print(metrics.summary)


def cross_validate_command(
    config_path: str | None = None,
    samples: int | None = None,
    folds: int | None = None,
    seed: int | None = None,
    verbose: bool = False,
) -> None:
    """Cross-validate an untrained copy of the configured model."""
    config = _load(config_path, verbose)
    num_samples = samples if samples is not None else config.training.samples
    folds = folds if folds is not None else config.evaluation.folds
    seed = seed if seed is not None else config.evaluation.seed

    console.print(f"[bold]Running {folds}-fold cross-validation on {num_samples} samples...[/bold]")
    metrics = ModelEvaluator(create_trust_model(config)).cross_validate(
        num_samples=num_samples, folds=folds, seed=seed
    )
    _print_regression(metrics)
    if verbose:
        console.print(metrics.summary)


def confusion_command(
    config_path: str | None = None,
    samples: int | None = None,
    threshold: float | None = None,
    seed: int | None = None,
    verbose: bool = False,
) -> None:
    """Show confusion metrics for HIGH risk detection."""
    config = _load(config_path, verbose)
    model = _require_trained(config)
    num_samples = samples if samples is not None else config.evaluation.samples
    threshold = threshold if threshold is not None else config.evaluation.risk_threshold

    metrics = ModelEvaluator(model).confusion_metrics(
        num_samples=num_samples, threshold=threshold, seed=seed
    )

    matrix = Table(title=f"Confusion Matrix (score < {threshold:g} = HIGH risk)")
    matrix.add_column("", style="cyan")
    matrix.add_column("Predicted HIGH", justify="right")
    matrix.add_column("Predicted not HIGH", justify="right")
    matrix.add_row("Actual HIGH", str(metrics.true_positives), str(metrics.false_negatives))
    matrix.add_row("Actual not HIGH", str(metrics.false_positives), str(metrics.true_negatives))
    console.print(matrix)

    rates = Table(show_header=False)
    rates.add_column("Metric", style="cyan")
    rates.add_column("Value", justify="right")
    rates.add_row("False positive rate", f"{metrics.false_positive_rate:.2%}")
    rates.add_row("False negative rate", f"{metrics.false_negative_rate:.2%}")
    rates.add_row("Accuracy", f"{metrics.accuracy:.2%}")
    rates.add_row("Precision", f"{metrics.precision:.2%}")
    rates.add_row("Recall", f"{metrics.recall:.2%}")
    rates.add_row("F1 score", f"{metrics.f1_score:.4f}")
    console.print(rates)


def model_info_command(config_path: str | None = None) -> None:
    """Show the saved model artifact."""
    config = _load(config_path)
    info = create_model_store(config).info()

    if not info.exists:
        console.print(f"[yellow]{info.message}[/yellow]")
        return

    table = Table(title="Trust Model")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Algorithm", config.model.algorithm)
    table.add_row("Path", info.path or "-")
    table.add_row("Size", f"{info.size_bytes / 1024:.1f} KB")
    table.add_row(
        "Last modified",
        info.last_modified.strftime("%Y-%m-%d %H:%M:%S UTC") if info.last_modified else "-",
    )
    console.print(table)


def backup_command(config_path: str | None = None) -> None:
    """Back up the saved model artifact."""
    config = _load(config_path)
    path = create_model_store(config).backup()
    console.print(f"[green]✓[/green] Model backed up to [cyan]{path}[/cyan]")


def demo_signals(
    profile: RiskLevel, now: datetime
) -> tuple[UserRecord, list[AccessEvent], list[DeviceRecord]]:
    """Build a plausible user with recent activity for the given risk profile.

    Args:
        profile: Which kind of user to fabricate
        now: Reference time for event timestamps

    Returns:
        User record, access events and devices
    """
    if profile == RiskLevel.LOW:
        hours = [9, 10, 11, 13, 14, 15, 16, 17]
        failures = 0
        networks = [NetworkType.INTERNAL]
        countries = ["US"]
        devices = [DeviceRecord(risk_score=15.0), DeviceRecord(risk_score=20.0)]
        last_login = now - timedelta(hours=1)
    elif profile == RiskLevel.MEDIUM:
        hours = [8, 12, 19, 21, 23, 23, 14, 16, 10, 18, 20, 22]
        failures = 2
        networks = [NetworkType.VPN, NetworkType.EXTERNAL]
        countries = ["US", "CA"]
        devices = [DeviceRecord(risk_score=35.0), DeviceRecord(patched=False, risk_score=55.0)]
        last_login = now - timedelta(hours=12)
    else:
        hours = [0, 1, 2, 3, 4, 5, 23, 0, 1, 2, 3, 4, 2, 3, 1] * 2
        failures = 15
        networks = [NetworkType.TOR, NetworkType.EXTERNAL]
        countries = ["US", "RU", "BR", "CN", "NG"]
        devices = [
            DeviceRecord(patched=False, antivirus_enabled=False, risk_score=85.0),
            DeviceRecord(patched=False, antivirus_enabled=False, risk_score=90.0),
        ]
        last_login = now - timedelta(days=3)

    events = [
        AccessEvent(
            timestamp=now - timedelta(minutes=40 * i + 5),
            success=i >= failures,
            hour_of_day=hour,
            country=countries[i % len(countries)],
            network_type=networks[i % len(networks)],
        )
        for i, hour in enumerate(hours)
    ]
    user = UserRecord(id=f"demo-{profile.value.lower()}", last_login_at=last_login)
    return user, events, devices


def score_demo_command(
    config_path: str | None = None, profile: str = "medium", verbose: bool = False
) -> None:
    """Score a fabricated user with the saved (or freshly trained) model."""
    config = _load(config_path, verbose)
    try:
        risk_profile = RiskLevel(profile.upper())
    except ValueError:
        console.print(f"[red]Unknown profile '{profile}'. Use low, medium or high.[/red]")
        raise typer.Exit(1)

    trainer = _trainer(config)
    if not trainer.load():
        console.print("[yellow]No saved model, training an in-memory model...[/yellow]")
        trainer.store = None
        trainer.train(num_samples=config.training.samples, seed=config.training.seed)

    now = utc_now()
    extractor = FeatureExtractor(clock=lambda: now)
    engine = TrustScoreEngine(
        trainer.model,
        InMemoryHistorySink(),
        extractor=extractor,
        clock=lambda: now,
        max_concurrency=config.scheduler.max_concurrency,
    )
    user, events, devices = demo_signals(risk_profile, now)

    features = extractor.extract(user, events, devices)
    table = Table(title=f"Features for {user.id}")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in features.model_dump().items():
        table.add_row(name, f"{value:.3f}")
    console.print(table)

    outcome = engine.score_user(user, events, devices)
    style = _RISK_STYLES[outcome.risk_level]
    confidence = f"{outcome.confidence:.0%}" if outcome.confidence is not None else "n/a"
    console.print(
        Panel.fit(
            f"Trust score: [bold]{outcome.score:.1f}[/bold]\n"
            f"Risk level:  [{style}]{outcome.risk_level.value}[/{style}]\n"
            f"Decision:    [{style}]{outcome.decision.value}[/{style}]\n"
            f"Confidence:  {confidence}",
            title="Scoring outcome",
            border_style=style,
        )
    )
