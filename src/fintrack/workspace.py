"""
Workspace - data path resolution for FinTrack.

A Workspace is the root directory holding the event journal and the
category configuration. Every path is computed relative to this root.

Resolution priority:
1. Explicit path (--data-dir CLI option)
2. FINTRACK_DATA environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_VAR = "FINTRACK_DATA"


@dataclass
class Workspace:
    """Root directory for all FinTrack data paths."""

    root: Path

    @classmethod
    def resolve(cls, explicit: Path | None = None) -> Workspace:
        """Resolve the workspace root from an explicit path, the env var, or CWD."""
        if explicit is not None:
            return cls(root=explicit)
        env = os.environ.get(ENV_VAR)
        if env:
            return cls(root=Path(env))
        return cls(root=Path.cwd())

    @property
    def data_dir(self) -> Path:
        return self.root / "data"

    @property
    def event_store_path(self) -> Path:
        return self.data_dir / "events.db"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def categories_config(self) -> Path:
        return self.config_dir / "categories.yml"


__all__ = ["ENV_VAR", "Workspace"]
