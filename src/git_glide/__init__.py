"""git-glide: simplified, safer git workflows.

This package composes primitive git commands into higher-level verbs (sync,
switch, branch, commit, rebase) that carry uncommitted changes safely across
branch transitions.
"""

from . import (
    cli,
    config,
    constants,
    divergence,
    errors,
    git_wrapper,
    ops,
    stash,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "divergence",
    "errors",
    "git_wrapper",
    "ops",
    "stash",
]
