"""Command-line interface for mixscore."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console

from .cache import ResultCache, cache_key
from .config import GAUSSIAN, LINEAR, ScoringConfig
from .engine import MixScorer
from .exceptions import ConfigurationError, InsufficientDataError
from .logging_config import setup_logging
from .models import STATUS_UNAVAILABLE
from .references import REFERENCES_ENV, load_profile, load_references, profile_from_dict, profile_summary
from .report import format_suggestion, render_report, render_unavailable
from .scoring import evaluate_tolerance, score_from_deviation

EXIT_ERROR = 1
EXIT_INSUFFICIENT_DATA = 2


def _read_technical_data(path: str):
    """Load the technical-data JSON, exiting with an error message on failure."""
    file_path = Path(path)
    if not file_path.exists():
        click.echo("Error: Unable to read technical data file", err=True)
        sys.exit(EXIT_ERROR)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError:
        click.echo("Error: Invalid technical data JSON", err=True)
        sys.exit(EXIT_ERROR)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.pass_context
def cli(ctx, verbose, quiet):
    """mixscore - Mix quality scoring against genre references."""
    setup_logging(verbose, quiet)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("technical_file")
@click.option("--genre", "-g", required=True, help="Reference genre to score against")
@click.option(
    "--references",
    envvar=REFERENCES_ENV,
    default=None,
    help="Reference JSON file (defaults to the bundled references)",
)
@click.option("--curve", default=GAUSSIAN, type=click.Choice([GAUSSIAN, LINEAR]))
@click.option("--no-gates", is_flag=True, help="Do not apply quality gates")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@click.option("--no-cache", is_flag=True, help="Do not read or write cached results")
def score(technical_file, genre, references, curve, no_gates, output_format, no_cache):
    """Score a track's technical data against a genre reference.

    TECHNICAL_FILE is a JSON object with the extracted metrics (LUFS, true
    peak, dynamic range, band energies, ...), optionally wrapped in a
    "technicalData" key.

    Example:
        mixscore score track.json --genre eletronico --format json
    """
    data = _read_technical_data(technical_file)

    try:
        profile = load_profile(genre, references)
        config = ScoringConfig(curve=curve, apply_gates=not no_gates)
        scorer = MixScorer(config)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    cache = None if no_cache else ResultCache()
    key = cache_key(data, profile, config) if cache else None
    result = cache.get(key) if cache else None

    if result is None:
        try:
            result = scorer.score(data, profile)
        except InsufficientDataError as e:
            if output_format == "json":
                output = {
                    "available": False,
                    "error": "insufficient_data",
                    "message": str(e),
                    "excluded_metrics": e.excluded_metrics,
                }
                click.echo(json.dumps(output, indent=2))
            else:
                render_unavailable(str(e), Console())
            sys.exit(EXIT_INSUFFICIENT_DATA)
        except (ConfigurationError, TypeError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_ERROR)
        if cache:
            cache.set(key, result)

    if output_format == "json":
        output = result.to_dict()
        output["available"] = True
        click.echo(json.dumps(output, indent=2))
    else:
        render_report(result, Console())


@cli.command()
@click.option("--references", envvar=REFERENCES_ENV, default=None, help="Reference JSON file")
def genres(references):
    """List the genres available in a reference file."""
    try:
        data = load_references(references)
        for genre in sorted(data):
            click.echo(profile_summary(profile_from_dict(genre, data[genre])))
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)


@cli.command()
@click.argument("value", type=float)
@click.argument("target", type=float)
@click.argument("tolerance", type=float)
@click.option("--unit", default="", help="Unit shown in the suggestion")
@click.option("--metric", default="value", help="Metric name shown in the suggestion")
@click.option("--curve", default=GAUSSIAN, type=click.Choice([GAUSSIAN, LINEAR]))
def check(value, target, tolerance, unit, metric, curve):
    """Evaluate a single value against a target and tolerance.

    Use "--" before negative numbers.

    Example:
        mixscore check --unit LUFS --metric loudness -- -17 -14 1
    """
    result = evaluate_tolerance(value, target, tolerance, unit, metric)
    if result.status == STATUS_UNAVAILABLE:
        click.echo(f"Error: {result.error or 'value not available'}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(f"Status: {result.status}")
    click.echo(f"Deviation: {result.deviation:+.2f} {unit}".rstrip())
    click.echo(f"Score: {score_from_deviation(result.n, curve):.1f}")
    suggestion = format_suggestion(result)
    if suggestion:
        click.echo(f"Suggestion: {suggestion}")


if __name__ == "__main__":
    cli()
