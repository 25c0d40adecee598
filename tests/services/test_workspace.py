"""Tests for WorkspaceService: workspace bootstrap and data import."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import pytest

from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.services.workspace import WorkspaceService
from tests.conftest import RESTAURANT_ID

NEW_RESTAURANT_ID = "6f1c0d8e-0000-4000-8000-0000000000aa"


def _dump() -> dict[str, Any]:
    return {
        "restaurants": [
            {
                "id": NEW_RESTAURANT_ID,
                "external_restaurant_id": "mkt-9",
                "name": "Osteria",
                "created_at": "2024-03-01T10:00:00Z",
                "updated_at": "2024-03-01T10:00:00Z",
            }
        ],
        "reviews": [
            {
                "id": "rv-import-1",
                "restaurant_id": NEW_RESTAURANT_ID,
                "external_review_id": "ext-rv-1",
                "rating": 5,
                "review_date": "2024-03-02T12:00:00Z",
                "created_at": "2024-03-02T12:00:00Z",
                "updated_at": "2024-03-02T12:00:00Z",
            }
        ],
    }


class TestInitWorkspace:
    @pytest.mark.asyncio
    async def test_writes_config_and_database(self, tmp_path: Path) -> None:
        result = await WorkspaceService.init_workspace(tmp_path, restaurant_id=RESTAURANT_ID)
        assert result.ok
        config = tomllib.loads((tmp_path / "restodesk.toml").read_text(encoding="utf-8"))
        assert config["default_restaurant_id"] == RESTAURANT_ID
        assert config["database"]["path"] == ".restodesk/restodesk.db"
        assert (tmp_path / ".restodesk" / "restodesk.db").is_file()

    @pytest.mark.asyncio
    async def test_memory_url_creates_no_file(self, tmp_path: Path) -> None:
        result = await WorkspaceService.init_workspace(tmp_path, database_url="memory://")
        assert result.ok
        assert result.data["database"] == "memory://"
        assert not (tmp_path / ".restodesk").exists()

    @pytest.mark.asyncio
    async def test_existing_workspace(self, tmp_path: Path) -> None:
        (tmp_path / "restodesk.toml").write_text("", encoding="utf-8")
        result = await WorkspaceService.init_workspace(tmp_path)
        assert not result.ok
        assert result.error.code == "WORKSPACE_EXISTS"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["postgresql+nosuchdriver://localhost/db", "not a url"])
    async def test_bad_database_url_leaves_no_config(self, tmp_path: Path, url: str) -> None:
        result = await WorkspaceService.init_workspace(tmp_path, database_url=url)
        assert not result.ok
        assert result.error.code == "UNEXPECTED"
        assert result.op == "init_workspace"
        assert not (tmp_path / "restodesk.toml").exists()

    @pytest.mark.asyncio
    async def test_config_values_are_escaped(self, tmp_path: Path) -> None:
        db_file = tmp_path / 'we"ird\\dir' / "app.db"
        url = f"sqlite+aiosqlite:///{db_file.as_posix()}"
        result = await WorkspaceService.init_workspace(tmp_path, database_url=url)
        assert result.ok
        config = tomllib.loads((tmp_path / "restodesk.toml").read_text(encoding="utf-8"))
        assert config["database"]["url"] == url


class TestImportData:
    @pytest.mark.asyncio
    async def test_counts_per_section(self, backend: Backend, store: MemoryStore) -> None:
        result = await WorkspaceService(backend).import_data(_dump())
        assert result.ok
        assert result.data["restaurants"] == 1
        assert result.data["reviews"] == 1
        assert result.data["tickets"] == 0
        assert NEW_RESTAURANT_ID in store.restaurants
        assert "rv-import-1" in store.reviews

    @pytest.mark.asyncio
    async def test_unknown_section(self, backend: Backend) -> None:
        result = await WorkspaceService(backend).import_data({"orders": []})
        assert not result.ok
        assert result.error.field == "orders"

    @pytest.mark.asyncio
    async def test_invalid_record_writes_nothing(
        self, backend: Backend, store: MemoryStore
    ) -> None:
        payload = _dump()
        payload["reviews"][0]["rating"] = 9
        result = await WorkspaceService(backend).import_data(payload)
        assert not result.ok
        assert result.error.field == "reviews.0.rating"
        assert NEW_RESTAURANT_ID not in store.restaurants
