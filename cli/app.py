from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import typer

from cli.client import ApiClient
from cli.clipboard import copy_text
from cli.config import CLIConfig, load_config
from cli.render import render_form, render_self_checks
from models.form import FormState, GroupPreset, IdSequence, groups_from_presets
from services.normalizer import format_number
from services.self_check import run_self_checks
from services.session import evaluate


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Build calibration setpoint JSON through the setpoint builder service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        _fail("CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("show")
def show_command(
    ctx: typer.Context,
    compact: Optional[bool] = typer.Option(
        None,
        "--compact/--pretty",
        help="Switch the form's JSON output mode before showing it.",
    ),
) -> None:
    """Show the current form and its output."""
    state = _get_state(ctx)
    if compact is None:
        payload = state.client.get_form()
    else:
        payload = state.client.set_compact(compact)
    render_form(payload)


@app.command("system-id")
def system_id_command(
    ctx: typer.Context,
    value: str = typer.Argument(..., help="System id (clamped to a minimum of 1)."),
) -> None:
    """Set the global system id."""
    render_form(_get_state(ctx).client.set_system_id(value))


@app.command("add-group")
def add_group_command(ctx: typer.Context) -> None:
    """Append an empty setpoint group."""
    render_form(_get_state(ctx).client.add_group())


@app.command("quick-add")
def quick_add_command(
    ctx: typer.Context,
    preset: str = typer.Argument(..., help="Preset name: 20-60 or 40-33."),
) -> None:
    """Append a preset temperature/humidity group."""
    render_form(_get_state(ctx).client.quick_add(preset))


@app.command("set-temperature")
def set_temperature_command(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group identifier."),
    value: str = typer.Argument(..., help="Temperature in degrees Celsius."),
) -> None:
    """Edit a group's temperature."""
    render_form(_get_state(ctx).client.set_temperature(group_id, value))


@app.command("remove-group")
def remove_group_command(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group identifier."),
) -> None:
    """Remove a setpoint group."""
    render_form(_get_state(ctx).client.remove_group(group_id))


@app.command("add-humidity")
def add_humidity_command(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group identifier."),
) -> None:
    """Append an empty humidity entry to a group."""
    render_form(_get_state(ctx).client.add_humidity(group_id))


@app.command("set-humidity")
def set_humidity_command(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group identifier."),
    humidity_id: str = typer.Argument(..., help="Humidity entry identifier."),
    value: str = typer.Argument(..., help="Relative humidity in percent (0-100)."),
) -> None:
    """Edit a humidity entry."""
    render_form(_get_state(ctx).client.set_humidity(group_id, humidity_id, value))


@app.command("remove-humidity")
def remove_humidity_command(
    ctx: typer.Context,
    group_id: str = typer.Argument(..., help="Group identifier."),
    humidity_id: str = typer.Argument(..., help="Humidity entry identifier."),
) -> None:
    """Remove a humidity entry."""
    render_form(_get_state(ctx).client.remove_humidity(group_id, humidity_id))


@app.command("sample")
def sample_command(ctx: typer.Context) -> None:
    """Load the sample setpoints."""
    render_form(_get_state(ctx).client.load_sample())


@app.command("reset")
def reset_command(ctx: typer.Context) -> None:
    """Reset the form to a single empty group."""
    render_form(_get_state(ctx).client.reset())


@app.command("copy")
def copy_command(
    ctx: typer.Context,
    compact: Optional[bool] = typer.Option(
        None,
        "--compact/--pretty",
        help="Override the form's JSON output mode.",
    ),
) -> None:
    """Copy the exported JSON to the clipboard."""
    state = _get_state(ctx)
    text = state.client.get_export(compact)
    outcome = copy_text(text)
    if outcome.status == "copied":
        typer.secho(outcome.message, fg=typer.colors.GREEN)
    elif outcome.status == "manual":
        typer.secho(outcome.message, fg=typer.colors.YELLOW, err=True)
    else:
        _fail(outcome.message)


@app.command("download")
def download_command(
    ctx: typer.Context,
    output_dir: Path = typer.Option(
        Path("."),
        "--output-dir",
        "-o",
        file_okay=False,
        help="Directory to save the JSON file into.",
    ),
) -> None:
    """Save the exported JSON as calibration_setpoints_system_<id>.json."""
    state = _get_state(ctx)
    text, filename = state.client.download()
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / Path(filename).name
    target.write_text(text, encoding="utf-8")
    typer.secho(f"Saved {target}", fg=typer.colors.GREEN)


def _field_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(float(value))
    return ""


def _humidity_text(value: Any) -> str:
    if isinstance(value, dict):
        return _field_text(value.get("nominal"))
    return _field_text(value)


def load_form_file(path: Path, compact: bool) -> FormState:
    """Read a JSON form description into a form state."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Could not read form file {path}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("groups", []), list):
        raise typer.BadParameter(f"Form file {path} must be an object with a 'groups' list.")

    presets = []
    for group in data.get("groups", []):
        if not isinstance(group, dict):
            raise typer.BadParameter(f"Form file {path} contains a group that is not an object.")
        humidities = group.get("humidities") or []
        if not isinstance(humidities, list):
            raise typer.BadParameter(f"Form file {path} contains a group whose humidities are not a list.")
        presets.append(
            GroupPreset(
                temperature=_field_text(group.get("temperature")),
                humidities=tuple(_humidity_text(entry) for entry in humidities),
            )
        )
    return FormState(
        system_id=_field_text(data.get("system_id", "1")),
        groups=groups_from_presets(presets, IdSequence()),
        compact=compact,
    )


@app.command("build")
def build_command(
    form_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON form file."),
    compact: bool = typer.Option(True, "--compact/--pretty", help="Compact or indented JSON."),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        file_okay=False,
        help="Also save the JSON file into this directory.",
    ),
) -> None:
    """Build the setpoint JSON from a form file without the service."""
    snapshot = evaluate(load_form_file(form_file, compact))
    if not snapshot.export_ready:
        _fail("Complete at least one valid setpoint before exporting.")
    typer.echo(snapshot.text)
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / snapshot.filename
        target.write_text(snapshot.text, encoding="utf-8")
        typer.secho(f"Saved {target}", fg=typer.colors.GREEN, err=True)


@app.command("self-check")
def self_check_command(
    ctx: typer.Context,
    remote: bool = typer.Option(False, "--remote", help="Run the checks on the service instead."),
) -> None:
    """Run the builder self-checks."""
    if remote:
        summary = _get_state(ctx).client.run_self_checks()
    else:
        local = run_self_checks()
        summary = {**asdict(local), "status": local.status.value}
    render_self_checks(summary)
    if summary.get("status") != "passed":
        raise typer.Exit(code=1)


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind to."),
    port: int = typer.Option(8000, "--port", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development."),
) -> None:
    """Run the setpoint builder service with the browser UI at /ui."""
    import uvicorn

    typer.echo(f"Setpoint builder UI: http://{host}:{port}/ui")
    uvicorn.run(
        "app.main:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level="info",
    )


if __name__ == "__main__":
    app()
