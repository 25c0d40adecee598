"""Tests for RestoSettings: unified settings with TOML source."""

from collections.abc import Generator
from pathlib import Path

import click
import pytest

from restodesk.config.settings import RestoSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    for name in ("RESTODESK_CONFIG", "RESTODESK_DEFAULT_RESTAURANT_ID", "RESTODESK_DATABASE__URL"):
        monkeypatch.delenv(name, raising=False)
    yield


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = RestoSettings.from_cli(workspace_root=tmp_path)
        assert settings.workspace_root == tmp_path
        assert settings.json_output is False
        assert settings.default_restaurant_id is None
        assert settings.plugins.enabled is True
        assert settings.alerts.cancellation_max == 0.02
        expected = tmp_path / ".restodesk/restodesk.db"
        assert settings.database_url == f"sqlite+aiosqlite:///{expected}"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = RestoSettings.from_cli(workspace_root=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "restodesk.toml").write_text(
            'default_restaurant_id = "r-1"\n[alerts]\ncancellation_max = 0.05\n'
        )
        settings = RestoSettings.from_cli(workspace_root=tmp_path)
        assert settings.default_restaurant_id == "r-1"
        assert settings.alerts.cancellation_max == 0.05
        assert settings.alerts.open_time_min == 0.95

    def test_workspace_root_follows_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "restodesk.toml").write_text("")
        child = tmp_path / "sub"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = RestoSettings.from_cli()
        assert settings.workspace_root == tmp_path
        assert settings.config_path == tmp_path / "restodesk.toml"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[database]\nurl = "memory://"\n')
        settings = RestoSettings.from_cli(config_path=str(custom), workspace_root=tmp_path)
        assert settings.uses_memory is True
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "restodesk.toml").write_text("this is = = not toml")
        with pytest.raises(click.ClickException):
            RestoSettings.from_cli(workspace_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "restodesk.toml").write_text('default_restaurant_id = "from-toml"\n')
        monkeypatch.setenv("RESTODESK_DEFAULT_RESTAURANT_ID", "from-env")
        settings = RestoSettings.from_cli(workspace_root=tmp_path)
        assert settings.default_restaurant_id == "from-env"

    def test_nested_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTODESK_DATABASE__URL", "memory://")
        assert RestoSettings.from_cli(workspace_root=tmp_path).uses_memory is True

    def test_cli_flags_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTODESK_DEFAULT_RESTAURANT_ID", "from-env")
        settings = RestoSettings.from_cli(
            workspace_root=tmp_path, default_restaurant_id="from-cli", json_output=True
        )
        assert settings.default_restaurant_id == "from-cli"
        assert settings.json_output is True

    def test_none_flags_do_not_mask(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTODESK_DEFAULT_RESTAURANT_ID", "from-env")
        settings = RestoSettings.from_cli(workspace_root=tmp_path, default_restaurant_id=None)
        assert settings.default_restaurant_id == "from-env"
