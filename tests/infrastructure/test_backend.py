"""Tests for Backend construction and seeding."""

from __future__ import annotations

from pathlib import Path

import pytest

from restodesk.config.settings import RestoSettings
from restodesk.infrastructure.backend import Backend
from tests.conftest import RESTAURANT_ID, make_restaurant


def _settings(**data: object) -> RestoSettings:
    return RestoSettings.model_validate({"plugins": {"enabled": False}, **data})


class TestConnect:
    @pytest.mark.asyncio
    async def test_memory_url_uses_store(self) -> None:
        backend = await Backend.connect(_settings(database={"url": "memory://"}))
        assert backend.store is not None
        assert backend.engine is None
        await backend.close()

    @pytest.mark.asyncio
    async def test_sqlite_url_creates_database(self, tmp_path: Path) -> None:
        db = tmp_path / "data" / "restodesk.db"
        backend = await Backend.connect(
            _settings(database={"url": f"sqlite+aiosqlite:///{db}"})
        )
        try:
            assert backend.engine is not None
            assert db.exists()
        finally:
            await backend.close()
        assert backend.engine is None

    def test_plugins_loaded_when_enabled(self) -> None:
        backend = Backend.in_memory(RestoSettings.model_validate({"plugins": {"audit": True}}))
        assert backend.plugins is not None
        assert "audit-builtin" in backend.plugins.list_plugin_names()

    def test_plugins_disabled(self) -> None:
        assert Backend.in_memory(_settings()).plugins is None


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_memory(self) -> None:
        backend = Backend.in_memory(_settings())
        await backend.seed([make_restaurant()])
        assert await backend.repos.restaurants.get_by_id(RESTAURANT_ID) is not None

    @pytest.mark.asyncio
    async def test_seed_sqlite(self, tmp_path: Path) -> None:
        backend = await Backend.connect(
            _settings(database={"url": f"sqlite+aiosqlite:///{tmp_path / 'r.db'}"})
        )
        try:
            await backend.seed([make_restaurant()])
            restaurant = await backend.repos.restaurants.get_by_id(RESTAURANT_ID)
            assert restaurant is not None
            assert restaurant.name == "Trattoria"
        finally:
            await backend.close()
