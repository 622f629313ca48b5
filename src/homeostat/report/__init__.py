"""
Reporting module for Homeostat.

Rich terminal output for the CLI commands:
    - Pulse panel with mindset, vitals, alerts and missing bootstrap files
    - Reflex dry-run decisions
    - Persisted session record
    - Vitals refresh summary

Example:
    from homeostat.report import render_pulse

    render_pulse(pulse, homeostasis)
"""

from homeostat.report.console import (
    render_decision,
    render_error,
    render_pulse,
    render_state,
    render_vitals_refresh,
)

__all__ = [
    "render_decision",
    "render_error",
    "render_pulse",
    "render_state",
    "render_vitals_refresh",
]
