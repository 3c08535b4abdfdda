"""framefit CLI.

Command-line interface for analyzing an image reference and printing the
resolved render policy.
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any

import typer

from framefit import __version__
from framefit.config import ConfigError
from framefit.core import (
    AnalysisConfig,
    AnalysisController,
    AnalysisOutcome,
    AnalysisSlot,
    Error,
    Fallback,
    Resolved,
)
from framefit.probe import HttpProber
from framefit.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="framefit",
    help="framefit: adaptive image analysis and 16:9 render policy",
    add_completion=False,
)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"framefit {__version__}")


@app.command()
def analyze(  # noqa: PLR0913
    ref: Annotated[
        str,
        typer.Argument(help="Image URL (http/https) or data: URI"),
    ],
    max_attempts: Annotated[
        int | None,
        typer.Option("--max-attempts", help="Probe attempts before falling back"),
    ] = None,
    deadline_ms: Annotated[
        int | None,
        typer.Option("--deadline-ms", help="Hard wall-clock ceiling in ms"),
    ] = None,
    base_delay_ms: Annotated[
        int | None,
        typer.Option("--base-delay-ms", help="Backoff base delay in ms"),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"
        ),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Probe an image and print its classification and render policy."""
    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        config = _build_config(max_attempts, deadline_ms, base_delay_ms)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from None

    slot = AnalysisSlot(AnalysisController(HttpProber(), config))
    outcome = asyncio.run(slot.analyze(ref))
    if outcome is None:  # pragma: no cover - single call cannot be superseded
        raise typer.Exit(1)

    logger.info("Analysis finished", kind=_kind(outcome), elapsed_ms=outcome.elapsed_ms)

    if json_output:
        typer.echo(json.dumps(outcome_to_dict(outcome), indent=2))
    else:
        _echo_outcome(outcome)

    raise typer.Exit(0 if isinstance(outcome, Resolved) else 1)


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


def _build_config(
    max_attempts: int | None,
    deadline_ms: int | None,
    base_delay_ms: int | None,
) -> AnalysisConfig:
    base = AnalysisConfig.from_settings()
    config = AnalysisConfig(
        max_attempts=max_attempts if max_attempts is not None else base.max_attempts,
        deadline_ms=deadline_ms if deadline_ms is not None else base.deadline_ms,
        base_delay_ms=(
            base_delay_ms if base_delay_ms is not None else base.base_delay_ms
        ),
        target_width=base.target_width,
    )
    return config.check_backoff_fits_deadline("--base-delay-ms", "--deadline-ms")


def _kind(outcome: AnalysisOutcome) -> str:
    if isinstance(outcome, Resolved):
        return "resolved"
    if isinstance(outcome, Fallback):
        return "fallback"
    return "error"


def outcome_to_dict(outcome: AnalysisOutcome) -> dict[str, Any]:
    """Serialize an outcome for JSON output."""
    data: dict[str, Any] = {
        "kind": _kind(outcome),
        "ref": outcome.ref,
        "attempts": outcome.attempts,
        "elapsed_ms": outcome.elapsed_ms,
        "policy": outcome.policy.model_dump(mode="json"),
        "hints": outcome.hints.model_dump(mode="json"),
    }
    if isinstance(outcome, Resolved):
        data["classification"] = outcome.classification.model_dump(mode="json")
    elif isinstance(outcome, Fallback):
        data["reason"] = outcome.reason.value
    elif isinstance(outcome, Error):
        data["reason"] = outcome.reason
    return data


def _echo_outcome(outcome: AnalysisOutcome) -> None:
    policy = outcome.policy
    typer.echo(f"Outcome: {_kind(outcome)} ({outcome.elapsed_ms} ms)")
    if isinstance(outcome, Resolved):
        c = outcome.classification
        typer.echo(f"Source: {c.source.width}x{c.source.height}")
        typer.echo(f"Aspect ratio: {c.aspect_ratio:.3f} ({c.family.value})")
        typer.echo(f"Quality: {c.quality_tier.value}")
        typer.echo(f"Compression needed: {c.compression_needed}")
    elif isinstance(outcome, Fallback):
        typer.echo(f"Reason: {outcome.reason.value}")
    else:
        typer.echo(f"Reason: {outcome.reason}")
    typer.echo(
        f"Policy: {policy.fit.value} @ {policy.anchor}, "
        f"{policy.target_width}x{policy.target_height}, "
        f"optimized={policy.optimized}"
    )
    typer.echo(
        f"Hints: quality={outcome.hints.quality}, "
        f"image-rendering={outcome.hints.image_rendering}"
    )


if __name__ == "__main__":  # pragma: no cover
    app()
