"""Click CLI for textconsensus: merge provider results and inspect cache keys."""

from __future__ import annotations

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from textconsensus.cache.keys import KeyFingerprinter
from textconsensus.config.loader import load_provider_results, load_request_yaml, load_settings
from textconsensus.consensus.engine import ConsensusAggregator
from textconsensus.errors.exceptions import AllProvidersFailed, ConfigurationError
from textconsensus.types import CacheStrategyName, ConflictResolution, ConsensusMethod

console = Console()
error_console = Console(stderr=True)


def _resolve_level(verbosity: int, base_level: str = "WARNING") -> int:
    """Configured level, lowered to INFO by -v and to DEBUG by -vv."""
    level = logging.getLevelName(base_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2:
        level = logging.DEBUG
    return level


def _setup_logging(verbosity: int, base_level: str = "WARNING") -> None:
    """Configure logging from the settings level and verbosity."""
    level = _resolve_level(verbosity, base_level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


@click.group()
@click.version_option(package_name="textconsensus")
def cli() -> None:
    """textconsensus: multi-provider analysis consensus."""


@cli.command()
@click.argument("results_file", type=click.Path(exists=True))
@click.option(
    "--method",
    type=click.Choice([m.value for m in ConsensusMethod]),
    default=None,
    help="Consensus method.",
)
@click.option(
    "--require-agreement",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum agreement before conflict resolution kicks in.",
)
@click.option(
    "--conflict-resolution",
    type=click.Choice([c.value for c in ConflictResolution]),
    default=None,
    help="Resolution used when agreement is too low.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the outcome as JSON.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def consensus(
    results_file: str,
    method: str | None,
    require_agreement: float | None,
    conflict_resolution: str | None,
    as_json: bool,
    verbose: int,
) -> None:
    """Merge the provider results in RESULTS_FILE (YAML or JSON list)."""
    try:
        settings = load_settings(
            consensus_method=method,
            consensus_require_agreement=require_agreement,
            consensus_conflict_resolution=conflict_resolution,
        )
    except ConfigurationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    _setup_logging(verbose, settings.log_level)

    try:
        results = load_provider_results(results_file)
        outcome = ConsensusAggregator(settings.consensus).combine(results)
    except (ConfigurationError, ValueError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except AllProvidersFailed as e:
        error_console.print(f"[red]{e.message}[/red]")
        for provider_id, reason in e.failures.items():
            error_console.print(f"  {provider_id}: {reason}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
        return

    merged = outcome.merged
    table = Table(title="Consensus")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Method", outcome.method.value)
    table.add_row("Resolution used", outcome.resolution_method_used)
    table.add_row("Agreement", f"{outcome.agreement_score:.2f}")
    table.add_row("Low agreement", "yes" if outcome.low_agreement else "no")
    table.add_row(
        "Providers",
        f"{outcome.successful_providers} ok / {outcome.failed_providers} failed",
    )
    table.add_row("Sentiment", merged.sentiment or "-")
    table.add_row("Summary", merged.summary or "-")
    table.add_row("Key points", "\n".join(merged.key_points or []) or "-")
    table.add_row("Themes", ", ".join(merged.themes or []) or "-")
    table.add_row(
        "Recommendations",
        "\n".join(r.title for r in merged.recommendations or []) or "-",
    )
    console.print(table)


@cli.command()
@click.argument("request_file", type=click.Path(exists=True))
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in CacheStrategyName]),
    default=None,
    help="Strategy tag for the key (defaults to configured cache strategy).",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fingerprint(request_file: str, strategy: str | None, verbose: int) -> None:
    """Print the cache fingerprint for the request in REQUEST_FILE."""
    try:
        settings = load_settings(cache_strategy=strategy)
    except ConfigurationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    _setup_logging(verbose, settings.log_level)

    try:
        request = load_request_yaml(request_file)
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    fingerprinter = KeyFingerprinter(
        tag=settings.cache.strategy.value,
        volatile_fields=settings.cache.volatile_fields,
        ordered_fields=settings.cache.ordered_fields,
    )
    click.echo(fingerprinter.fingerprint(request))


if __name__ == "__main__":
    cli()
