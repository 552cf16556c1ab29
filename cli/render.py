from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_status(export_ready: bool) -> None:
    if export_ready:
        typer.secho("Valid - ready to export", fg=typer.colors.GREEN)
    else:
        typer.secho("Please complete required fields", fg=typer.colors.RED)


def render_form(payload: Dict[str, Any]) -> None:
    echo_heading("Global Settings")
    echo_key_values(
        [
            ("system_id", payload.get("system_id")),
            ("compact", payload.get("compact")),
            ("revision", payload.get("revision")),
        ]
    )

    groups = payload.get("groups") or []
    for index, group in enumerate(groups, start=1):
        typer.echo()
        echo_heading(f"Setpoint Group #{index} ({group.get('id')})")
        typer.echo(f"temperature: {group.get('temperature') or '-'}")
        humidities = group.get("humidities") or []
        if not humidities:
            typer.echo("No humidity values - this setpoint will be Temperature-only.")
        for entry in humidities:
            typer.echo(f"  - {entry.get('id')}: {entry.get('nominal') or '-'}")
    if not groups:
        typer.echo()
        typer.echo("No setpoint groups.")

    typer.echo()
    echo_heading("Output JSON")
    typer.echo(payload.get("json_text", "[]"))
    typer.echo()
    render_status(bool(payload.get("export_ready")))


def render_self_checks(summary: Dict[str, Any]) -> None:
    color = typer.colors.GREEN if summary.get("status") == "passed" else typer.colors.RED
    typer.secho(str(summary.get("message")), fg=color)
