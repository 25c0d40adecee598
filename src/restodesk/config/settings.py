"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``RESTODESK_*`` prefix, nested with ``__``
  3. TOML file: ``restodesk.toml`` discovered via walk-up
  4. Code defaults: baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`restodesk.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from restodesk.config.discovery import find_config
from restodesk.config.models import MEMORY_URL, DatabaseConfig, PluginsConfig
from restodesk.domain.restaurant import AlertThresholds


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``restodesk.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class RestoSettings(BaseSettings):
    """Unified settings for the restodesk CLI and backend.

    Attributes:
        workspace_root: Directory relative paths resolve against (parent
            of ``restodesk.toml``, or CWD if no config found).
        config_path: The TOML file actually loaded, if any.
        default_restaurant_id: Restaurant used when ``--restaurant`` is
            not given.
        actor_id: User recorded on approvals, completions and discards.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RESTODESK_",
        "env_nested_delimiter": "__",
    }

    workspace_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- Selection ---
    default_restaurant_id: str | None = None
    actor_id: str | None = None

    # --- TOML sections ---
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    alerts: AlertThresholds = Field(default_factory=AlertThresholds)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @property
    def database_url(self) -> str:
        """Resolved SQLAlchemy URL (or ``memory://``)."""
        if self.database.url:
            return self.database.url
        db_path = Path(self.database.path)
        if not db_path.is_absolute():
            db_path = self.workspace_root / db_path
        return f"sqlite+aiosqlite:///{db_path}"

    @property
    def uses_memory(self) -> bool:
        return self.database_url == MEMORY_URL

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        workspace_root: Path | None = None,
        **cli_flags: Any,
    ) -> RestoSettings:
        """Construct settings from a CLI invocation.

        Discovers ``restodesk.toml`` via walk-up (or explicit
        *config_path*), resolves *workspace_root* from the config file's
        parent directory, and merges CLI flags as highest-priority
        overrides. Flags passed as ``None`` are dropped so they do not
        mask env or TOML values.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(workspace_root)

        resolved_root = workspace_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        overrides = {key: value for key, value in cli_flags.items() if value is not None}
        _tls.toml_path = toml_path
        try:
            return cls(
                workspace_root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None
