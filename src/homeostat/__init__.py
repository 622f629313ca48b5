"""
Homeostat - workspace guard rails for AI coding agents.

Homeostat sits behind an editor's agent hooks and keeps the agent inside
the boundaries a workspace declares in `_brain_v1/homeostasis.yaml`:
- Reflexes: deny reads, writes and commands that match protected patterns
- Pulse: one-line health summary from mindset, vitals and bootstrap files
- Attention: alerts surfaced at most once per session
- Vitals: WBC-1 scan that measures the brain layer and rewrites vitals.yaml

Every hook invocation fails open: an internal fault never blocks the agent.

Example usage:
    $ echo '{"hook_event_name": "sessionStart"}' | homeostat hook
    $ homeostat pulse
    $ homeostat check write _brain_v1/homeostasis.yaml
"""

__version__ = "0.1.0"
__author__ = "Homeostat Contributors"

__all__ = [
    "__version__",
    "__author__",
]
