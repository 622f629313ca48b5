"""
Reflex module for Homeostat.

Deny-rules declared in the REFLEXES section of homeostasis.yaml:
    - sensory: path globs the agent may not read
    - motor: path globs the agent may not write
    - inhibition: command wildcards the agent may not run

Unlike a deny-by-default policy, reflexes are allow-by-default: only a
matching pattern denies. The engine is a pure function of the reflex set
and the subject; it never touches the filesystem.
"""

from homeostat.policy.engine import ReflexEngine
from homeostat.policy.patterns import matches_command_pattern, matches_path_pattern

__all__ = [
    "ReflexEngine",
    "matches_command_pattern",
    "matches_path_pattern",
]
