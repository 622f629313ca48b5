"""
Console rendering for Homeostat.

Terminal output for the CLI using the Rich library: the pulse panel,
reflex dry-run decisions, the persisted session record and vitals
refresh summaries. Hook responses never go through here; they are JSON
on stdout.

Design Principles:
    - Status at a glance: icons and colors for alerts and decisions
    - Summary first: one-line pulse in the header, details below
"""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from homeostat.errors import HomeostatError
from homeostat.schema import HomeostasisDocument, Pulse, ReflexDecision
from homeostat.vitals import VitalsRefreshResult

# Status icons
ICON_OK = "[green]✓[/green]"
ICON_DENIED = "[red]⊘[/red]"
ICON_ALERT = "[yellow]![/yellow]"
ICON_MISSING = "[red]✗[/red]"


def _or_dash(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)


def render_pulse(
    pulse: Pulse,
    homeostasis: HomeostasisDocument,
    console: Console | None = None,
    verbose: bool = False,
) -> None:
    """
    Print the pulse with mindset, vitals and alerts.

    Args:
        pulse: Computed pulse
        homeostasis: Homeostasis document the pulse was computed from
        console: Rich Console instance (creates one if not provided)
        verbose: Also list the reflex patterns
    """
    if console is None:
        console = Console()

    status_style = "yellow" if pulse.alerts else "green"
    header = Text()
    header.append(" _brain pulse ", style="bold")
    header.append("│ ", style="dim")
    header.append(f"{len(pulse.alerts)} alert(s)", style=f"bold {status_style}")
    console.print(Panel(header, expand=False))
    console.print(f"  [dim]{pulse.one_line}[/dim]")
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    mindset = homeostasis.mindset
    vitals = pulse.vitals
    sensory, motor, inhibition = homeostasis.reflexes.counts()
    table.add_row("Workspace", pulse.workspace_root)
    table.add_row("Mindset", f"{_or_dash(mindset.mode)} / {_or_dash(mindset.caution)} / {_or_dash(mindset.focus)}")
    table.add_row("Reflexes", f"sensory={sensory} motor={motor} inhibition={inhibition}")
    table.add_row("Vitals age", f"{pulse.vitals_age_label} day(s)")
    table.add_row("Inflammation", _or_dash(vitals.inflammation))
    table.add_row("Cortisol", _or_dash(vitals.cortisol))
    table.add_row("Mode", _or_dash(vitals.mode))
    table.add_row("Block new features", _or_dash(vitals.gates.block_new_features))
    table.add_row("Require WBC", ", ".join(vitals.gates.require_wbc) or "-")
    console.print(table)

    if verbose:
        console.print()
        console.print("[bold]Reflexes[/bold]")
        for category, patterns in (
            ("sensory", homeostasis.reflexes.sensory),
            ("motor", homeostasis.reflexes.motor),
            ("inhibition", homeostasis.reflexes.inhibition),
        ):
            console.print(f"  [cyan]{category}[/cyan]: {escape(', '.join(patterns)) or '-'}")

    console.print()
    if pulse.alerts:
        console.print("[bold]Alerts[/bold]")
        for alert in pulse.alerts:
            console.print(f"  {ICON_ALERT} {alert}")
    else:
        console.print(f"{ICON_OK} No alerts")

    if pulse.missing_core_files:
        console.print()
        console.print("[bold]Missing bootstrap files[/bold]")
        for rel_path in pulse.missing_core_files:
            console.print(f"  {ICON_MISSING} {rel_path}")


def render_decision(decision: ReflexDecision, console: Console | None = None) -> None:
    """Print one reflex decision."""
    if console is None:
        console = Console()

    category = decision.category.value
    if decision.allowed:
        console.print(f"{ICON_OK} [green]ALLOW[/green] {category}: {escape(decision.subject)}")
        console.print(f"  [dim]{decision.reason}[/dim]")
    else:
        console.print(f"{ICON_DENIED} [red]DENY[/red] {category}: {escape(decision.subject)}")
        console.print(f"  {decision.reason}")
        if decision.rule_matched:
            console.print(f"  [dim]Pattern:[/dim] {escape(decision.rule_matched)}")


def render_state(record: dict[str, Any], path: str, console: Console | None = None) -> None:
    """Print the persisted session record as a two-column table."""
    if console is None:
        console = Console()

    console.print(f"[bold]Session state[/bold] [dim]{path}[/dim]")
    if not record:
        console.print("  [dim]No state recorded[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value", overflow="fold")
    for key in sorted(record):
        table.add_row(escape(key), escape(_or_dash(record[key])))
    console.print(table)


def render_vitals_refresh(result: VitalsRefreshResult, console: Console | None = None) -> None:
    """Print a vitals refresh summary."""
    if console is None:
        console = Console()

    stats = result.stats
    console.print(f"{ICON_OK} [bold]Vitals refreshed[/bold] [dim]{result.vitals_path}[/dim]")
    console.print(f"  [dim]Generated:[/dim] {result.generated_at}")
    console.print(f"  [dim]Markdown:[/dim]  {stats.md_files} files, {stats.md_lines} lines, {stats.md_bytes} bytes")
    console.print(f"  [dim]Chemical:[/dim]  inflammation={result.inflammation} cortisol={result.cortisol} mode={result.mode}")

    gate = "[red]blocked[/red]" if result.block_new_features else "[green]open[/green]"
    console.print(f"  [dim]Features:[/dim]  {gate}")
    if result.require_wbc:
        console.print(f"  [dim]Require WBC:[/dim] {', '.join(result.require_wbc)}")


def render_error(error: HomeostatError, console: Console | None = None) -> None:
    """Print an error with its code and suggestion."""
    if console is None:
        console = Console(stderr=True)

    console.print(f"[red]Error:[/red] {error.message} [dim](E{error.code})[/dim]")
    if error.suggestion:
        console.print(f"  [dim]Suggestion:[/dim] {error.suggestion}")
