"""Locate the ``restodesk.toml`` of the current workspace.

``RESTODESK_CONFIG`` wins over the walk-up search. It may name the file
itself or the workspace directory holding it.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "restodesk.toml"
CONFIG_ENV_VAR = "RESTODESK_CONFIG"


def _from_env(value: str) -> Path | None:
    target = Path(value).expanduser()
    if target.is_dir():
        target = target / CONFIG_FILENAME
    return target if target.is_file() else None


def find_config(start: Path | None = None) -> Path | None:
    """Return the workspace config nearest to *start*, or None.

    Searches *start* (default: cwd) and then each parent directory. A set
    but dangling ``RESTODESK_CONFIG`` yields None instead of falling back
    to the search.
    """
    if env_value := os.environ.get(CONFIG_ENV_VAR):
        return _from_env(env_value)

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
