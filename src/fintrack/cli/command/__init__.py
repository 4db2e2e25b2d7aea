from __future__ import annotations

# Command implementations for the fintrack CLI.
# Each command module exposes a `run(...)` function that performs the action
# and prints to the console. Typer wrappers in fintrack.cli.app delegate here.

__all__ = [
    "init",
    "categories",
    "normalize",
    "split",
    "status",
    "journal",
]
