"""Backend: the single dependency injected into every service.

Owns the repository adapters, the resolved settings and the plugin
manager. Built once per CLI invocation (or per test) and passed to
service constructors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from restodesk.infrastructure.repositories.memory import (
    MemoryActionRepository,
    MemoryCatalogRepository,
    MemoryChecklistRepository,
    MemoryFinancialRepository,
    MemoryImageJobRepository,
    MemoryReportRepository,
    MemoryRestaurantRepository,
    MemoryReviewRepository,
    MemoryStore,
    MemoryTicketRepository,
    MemoryUserRepository,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pydantic import BaseModel
    from sqlalchemy.ext.asyncio import AsyncEngine

    from restodesk.config.settings import RestoSettings
    from restodesk.infrastructure.repositories.contracts import (
        ActionRepository,
        CatalogRepository,
        ChecklistRepository,
        FinancialRepository,
        ImageJobRepository,
        ReportRepository,
        RestaurantRepository,
        ReviewRepository,
        TicketRepository,
        UserRepository,
    )
    from restodesk.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Repositories:
    actions: ActionRepository
    image_jobs: ImageJobRepository
    catalog: CatalogRepository
    checklists: ChecklistRepository
    reports: ReportRepository
    restaurants: RestaurantRepository
    reviews: ReviewRepository
    tickets: TicketRepository
    financial: FinancialRepository
    users: UserRepository

    @classmethod
    def in_memory(cls, store: MemoryStore) -> Repositories:
        return cls(
            actions=MemoryActionRepository(store),
            image_jobs=MemoryImageJobRepository(store),
            catalog=MemoryCatalogRepository(store),
            checklists=MemoryChecklistRepository(store),
            reports=MemoryReportRepository(store),
            restaurants=MemoryRestaurantRepository(store),
            reviews=MemoryReviewRepository(store),
            tickets=MemoryTicketRepository(store),
            financial=MemoryFinancialRepository(store),
            users=MemoryUserRepository(store),
        )

    @classmethod
    def sql(cls, engine: AsyncEngine) -> Repositories:
        from restodesk.infrastructure.repositories.sql import (
            SqlActionRepository,
            SqlCatalogRepository,
            SqlChecklistRepository,
            SqlFinancialRepository,
            SqlImageJobRepository,
            SqlReportRepository,
            SqlRestaurantRepository,
            SqlReviewRepository,
            SqlTicketRepository,
            SqlUserRepository,
        )

        return cls(
            actions=SqlActionRepository(engine),
            image_jobs=SqlImageJobRepository(engine),
            catalog=SqlCatalogRepository(engine),
            checklists=SqlChecklistRepository(engine),
            reports=SqlReportRepository(engine),
            restaurants=SqlRestaurantRepository(engine),
            reviews=SqlReviewRepository(engine),
            tickets=SqlTicketRepository(engine),
            financial=SqlFinancialRepository(engine),
            users=SqlUserRepository(engine),
        )


class Backend:
    """Repositories + settings + plugins.

    Use :meth:`in_memory` for tests and ``memory://`` and
    :meth:`connect` for a real database. Call :meth:`close` when done.
    """

    def __init__(
        self,
        repos: Repositories,
        settings: RestoSettings,
        *,
        plugins: PluginManager | None = None,
        engine: AsyncEngine | None = None,
        store: MemoryStore | None = None,
    ) -> None:
        self._repos = repos
        self._settings = settings
        self._plugins = plugins
        self._engine = engine
        self._store = store

    @property
    def repos(self) -> Repositories:
        return self._repos

    @property
    def settings(self) -> RestoSettings:
        return self._settings

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None when plugins are disabled)."""
        return self._plugins

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @property
    def store(self) -> MemoryStore | None:
        """The backing store of an in-memory backend."""
        return self._store

    @classmethod
    def in_memory(
        cls,
        settings: RestoSettings | None = None,
        *,
        store: MemoryStore | None = None,
        plugins: PluginManager | None = None,
    ) -> Backend:
        from restodesk.config.settings import RestoSettings

        store = store or MemoryStore()
        resolved = settings or RestoSettings()
        if plugins is None:
            plugins = _load_plugins(resolved)
        return cls(Repositories.in_memory(store), resolved, plugins=plugins, store=store)

    @classmethod
    async def connect(cls, settings: RestoSettings) -> Backend:
        """Open the database named by *settings*, creating tables if needed."""
        if settings.uses_memory:
            return cls.in_memory(settings)

        from restodesk.infrastructure.database.engine import init_database

        engine = await init_database(settings.database_url)
        logger.debug("Connected to %s", engine.url.render_as_string(hide_password=True))
        return cls(
            Repositories.sql(engine),
            settings,
            plugins=_load_plugins(settings),
            engine=engine,
        )

    async def seed(self, entities: Sequence[BaseModel]) -> None:
        """Load fully-formed entities (marketplace sync output) into storage."""
        if self._store is not None:
            self._store.seed(*entities)
            return
        if self._engine is None:
            raise RuntimeError("Backend has neither a store nor an engine")

        from restodesk.infrastructure.repositories.sql import insert_entities

        await insert_entities(self._engine, entities)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None


def _load_plugins(settings: RestoSettings) -> PluginManager | None:
    if not settings.plugins.enabled:
        return None

    from restodesk.plugins.builtins.audit import AuditPlugin
    from restodesk.plugins.manager import PluginManager

    pm = PluginManager()
    pm.discover_and_load()
    if settings.plugins.audit:
        pm.register_plugin(AuditPlugin(), name="audit-builtin")
    return pm
