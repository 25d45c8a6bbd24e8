from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_REPORT_COLUMNS = (
    ("#", "index"),
    ("period", "period"),
    ("Wh", "totalWattHours"),
    ("avg V", "averageVolt"),
    ("avg A", "averageCurrent"),
    ("avg W", "averageWatts"),
    ("max W", "maxWatts"),
    ("min W", "minWatts"),
    ("count", "totalCount"),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_cell(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.4f}"
    return "" if value is None else str(value)


def render_report(granularity: str, rows: List[Dict[str, Any]]) -> None:
    echo_heading(f"Aggregates per {granularity}")
    if not rows:
        typer.echo("No periods reported.")
        return

    table = [[header for header, _ in _REPORT_COLUMNS]]
    for row in rows:
        table.append([_format_cell(row.get(key)) for _, key in _REPORT_COLUMNS])

    widths = [max(len(line[col]) for line in table) for col in range(len(_REPORT_COLUMNS))]
    for line in table:
        typer.echo("  ".join(cell.rjust(width) for cell, width in zip(line, widths)))


def render_sample(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Reading")
    echo_key_values(
        [
            ("updateTime", payload.get("updateTime")),
            ("switchStatus", payload.get("switchStatus")),
            ("country", payload.get("country")),
            ("town", payload.get("town")),
            ("volt", payload.get("volt")),
            ("current", payload.get("current")),
            ("watts", payload.get("watts")),
            ("wattHours", payload.get("wattHours")),
        ]
    )
