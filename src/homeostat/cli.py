"""
CLI entry point for Homeostat.

This module provides the Typer-based command-line interface. The `hook`
command is what the editor host invokes for every event; the other
commands are for humans inspecting or maintaining a workspace.

Commands:
    hook            Handle one hook event (stdin JSON -> stdout JSON)
    pulse           Show the current pulse for a workspace
    check           Dry-run a reflex against a path or command
    refresh-vitals  Run the WBC-1 scan and rewrite the vitals document
    state           Show the persisted session record

Architecture Note:
    The CLI is thin: it parses arguments and delegates to the router,
    loader, pulse and vitals modules, so everything is usable without it.
    `hook` must write nothing but the JSON response to stdout and always
    exits 0; logging goes to stderr and only when asked for.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console

from homeostat import __version__
from homeostat.config.loader import ConfigLoader
from homeostat.errors import HomeostatError
from homeostat.hooks.router import handle_raw
from homeostat.policy.engine import ReflexEngine
from homeostat.pulse import PulseComputer
from homeostat.report import (
    render_decision,
    render_error,
    render_pulse,
    render_state,
    render_vitals_refresh,
)
from homeostat.schema import ReflexDecision
from homeostat.settings import HomeostatSettings, discover_settings, load_settings
from homeostat.store.state import SessionStateStore
from homeostat.vitals import refresh_vitals

LOG_LEVEL_ENV = "HOMEOSTAT_LOG_LEVEL"

app = typer.Typer(
    name="homeostat",
    help="Workspace guard rails for AI coding agents, driven by _brain configuration.",
    add_completion=False,
    no_args_is_help=True,
)

check_app = typer.Typer(
    help="Dry-run a reflex against a path or command.",
    no_args_is_help=True,
)
app.add_typer(check_app, name="check")

console = Console()
err_console = Console(stderr=True)

RootOption = Annotated[
    Path,
    typer.Option(
        "--root",
        "-r",
        help="Workspace root. Defaults to the current directory.",
        file_okay=False,
        resolve_path=True,
    ),
]
SettingsOption = Annotated[
    Optional[Path],
    typer.Option(
        "--settings",
        "-s",
        help="Settings YAML file. Defaults to .cursor/homeostat.yaml if present.",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]homeostat[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Homeostat - reflexes, pulse and vitals for agent workspaces.

    Reads _brain_v1/homeostasis.yaml and vitals.yaml, gates agent reads,
    writes and commands, and keeps the agent aware of workspace health.
    """
    pass


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr when --verbose or HOMEOSTAT_LOG_LEVEL is set."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if verbose and not level_name:
        level_name = "DEBUG"
    if not level_name:
        return

    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _settings_for(root: Path, settings_path: Path | None) -> HomeostatSettings:
    if settings_path is not None:
        return load_settings(settings_path)
    return discover_settings(root)


def _output_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _fail(error: HomeostatError, json_output: bool) -> None:
    """Report a HomeostatError and exit 1."""
    if json_output:
        _output_json({"error": True, **error.to_dict()})
    else:
        render_error(error, err_console)
    raise typer.Exit(code=1)


# =============================================================================
# Hook
# =============================================================================


@app.command()
def hook(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log to stderr at DEBUG level.",
        ),
    ] = False,
) -> None:
    """
    Handle one hook event.

    Reads the host's JSON payload from stdin and writes exactly one JSON
    response to stdout. Always exits 0; any internal failure produces the
    event's fail-open default.

    Example:
        $ echo '{"hook_event_name": "sessionStart"}' | homeostat hook
    """
    configure_logging(verbose)
    try:
        raw = sys.stdin.read()
    except (OSError, UnicodeDecodeError):
        logging.getLogger(__name__).warning("Could not read hook payload from stdin")
        raw = ""
    response = handle_raw(raw)
    sys.stdout.write(json.dumps(response))
    sys.stdout.flush()


# =============================================================================
# Pulse / State
# =============================================================================


@app.command()
def pulse(
    root: RootOption = Path("."),
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Also list reflex patterns.",
        ),
    ] = False,
) -> None:
    """
    Show the current pulse for a workspace.

    Example:
        $ homeostat pulse --root ~/projects/app
    """
    try:
        settings = _settings_for(root, settings_path)
    except HomeostatError as e:
        _fail(e, json_output)

    loader = ConfigLoader(root, settings)
    homeostasis = loader.load_homeostasis()
    result = PulseComputer(settings).compute_for(loader)

    if json_output:
        _output_json({
            **result.model_dump(mode="json"),
            "homeostasis_hash": homeostasis.hash,
            "mindset": homeostasis.mindset.model_dump(mode="json"),
        })
    else:
        render_pulse(result, homeostasis, console, verbose=verbose)


@app.command()
def state(
    root: RootOption = Path("."),
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """
    Show the persisted session record.

    Example:
        $ homeostat state --json
    """
    try:
        settings = _settings_for(root, settings_path)
    except HomeostatError as e:
        _fail(e, json_output)

    store = SessionStateStore(root / settings.state_path)
    record = store.load()
    if json_output:
        _output_json(record)
    else:
        render_state(record, str(store.path), console)


# =============================================================================
# Check
# =============================================================================


def _run_check(
    category: str,
    subject: str,
    root: Path,
    settings_path: Path | None,
    json_output: bool,
) -> None:
    try:
        settings = _settings_for(root, settings_path)
    except HomeostatError as e:
        _fail(e, json_output)

    engine = ReflexEngine(ConfigLoader(root, settings).load_reflexes(), root)
    decision: ReflexDecision = engine.evaluate(category, subject)

    if json_output:
        _output_json(decision.model_dump(mode="json"))
    else:
        render_decision(decision, console)

    if not decision.allowed:
        raise typer.Exit(code=1)


@check_app.command("read")
def check_read(
    path: Annotated[str, typer.Argument(help="File path, absolute or workspace-relative.")],
    root: RootOption = Path("."),
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Would the sensory reflex deny reading PATH? Exits 1 if denied."""
    _run_check("sensory", path, root, settings_path, json_output)


@check_app.command("write")
def check_write(
    path: Annotated[str, typer.Argument(help="File path, absolute or workspace-relative.")],
    root: RootOption = Path("."),
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Would the motor reflex deny writing PATH? Exits 1 if denied."""
    _run_check("motor", path, root, settings_path, json_output)


@check_app.command("command")
def check_command(
    command: Annotated[str, typer.Argument(help="Shell command line.")],
    root: RootOption = Path("."),
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """Would the inhibition reflex deny COMMAND? Exits 1 if denied."""
    _run_check("inhibition", command, root, settings_path, json_output)


# =============================================================================
# Vitals
# =============================================================================


@app.command("refresh-vitals")
def refresh_vitals_command(
    root: Annotated[
        Optional[Path],
        typer.Option(
            "--root",
            "-r",
            help="Directory to start the workspace search from. Defaults to the current directory.",
            file_okay=False,
            resolve_path=True,
        ),
    ] = None,
    settings_path: SettingsOption = None,
    json_output: JsonOption = False,
) -> None:
    """
    Run the WBC-1 scan and rewrite the vitals document.

    Counts markdown under the brain root, derives inflammation and the
    feature gate, and keeps cortisol, mode and require_wbc.

    Example:
        $ homeostat refresh-vitals --json
    """
    try:
        settings = load_settings(settings_path) if settings_path is not None else None
        result = refresh_vitals(root, settings)
    except HomeostatError as e:
        _fail(e, json_output)

    if json_output:
        _output_json(result.to_dict())
    else:
        render_vitals_refresh(result, console)
