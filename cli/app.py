from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_report, render_sample
from models.records import Granularity


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the smart plug telemetry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Telemetry API base URL (defaults to API_BASE_URL env or http://localhost:5000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("report")
def report_command(
    ctx: typer.Context,
    granularity: Granularity = typer.Argument(..., help="Period to bucket samples by."),
) -> None:
    """Fetch and print aggregates for one granularity."""
    state = _get_state(ctx)
    rows = state.client.get_report(granularity)
    render_report(granularity.value, rows)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Print the most recent reading collected by the service."""
    state = _get_state(ctx)
    render_sample(state.client.get_latest())
