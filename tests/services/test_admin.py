"""Tests for AdminService.deactivate_user."""

from __future__ import annotations

import pytest

from restodesk.infrastructure.backend import Backend
from restodesk.infrastructure.repositories.memory import MemoryStore
from restodesk.services.admin import AdminService
from tests.conftest import ADMIN_ID, STAFF_ID, make_user


class TestDeactivateUser:
    @pytest.mark.asyncio
    async def test_deactivates_other_user(self, backend: Backend, store: MemoryStore) -> None:
        admin = store.users[ADMIN_ID]
        result = await AdminService(backend).deactivate_user(admin, STAFF_ID)
        assert result.ok
        assert result.data.is_active is False
        assert store.users[STAFF_ID].is_active is False

    @pytest.mark.asyncio
    async def test_inactive_caller(self, backend: Backend, store: MemoryStore) -> None:
        caller = make_user(is_active=False)
        result = await AdminService(backend).deactivate_user(caller, STAFF_ID)
        assert not result.ok
        assert result.error.code == "UNAUTHORIZED"
        assert store.users[STAFF_ID].is_active is True

    @pytest.mark.asyncio
    async def test_cannot_deactivate_self(self, backend: Backend, store: MemoryStore) -> None:
        admin = store.users[ADMIN_ID]
        result = await AdminService(backend).deactivate_user(admin, ADMIN_ID)
        assert not result.ok
        assert result.error.code == "CANNOT_DEACTIVATE_USER"

    @pytest.mark.asyncio
    async def test_unknown_target(self, backend: Backend, store: MemoryStore) -> None:
        admin = store.users[ADMIN_ID]
        result = await AdminService(backend).deactivate_user(admin, "missing")
        assert not result.ok
        assert result.error.code == "NOT_FOUND"
        assert result.error.entity == "user"

    @pytest.mark.asyncio
    async def test_blank_target(self, backend: Backend, store: MemoryStore) -> None:
        result = await AdminService(backend).deactivate_user(store.users[ADMIN_ID], " ")
        assert not result.ok
        assert result.error.field == "target_user_id"
