"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, restodesk.toml only contains
overrides. A fresh workspace needs no configuration at all.
"""

from __future__ import annotations

from pydantic import BaseModel

MEMORY_URL = "memory://"


class DatabaseConfig(BaseModel):
    """[database] section.

    ``url`` wins when set; otherwise ``path`` (relative to the workspace
    root) names a SQLite file. ``memory://`` selects the in-memory store.
    """

    model_config = {"frozen": True}

    url: str | None = None
    path: str = ".restodesk/restodesk.db"


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    audit: bool = True
