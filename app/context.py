"""
AppContext — the single process-wide application state.

Owns the persisted store, the simulated API and its candidate registry, the
API client and every client store. Build one with ``AppContext.create``;
tests build their own with explicit Settings and call ``reset`` between cases.
"""

import asyncio
import random
from typing import Any, Optional

from config.log import get_logger
from config.settings import Settings, settings as default_settings
from mockapi.candidates import CandidateRegistry
from mockapi.handlers import MockApi
from stores.assessments_store import AssessmentsStore
from stores.candidates_store import CandidatesStore
from stores.jobs_store import JobsStore
from stores.ui_store import UIStore
from tools.api_client import ApiClient
from tools.candidate_fixtures import candidate_fixture
from tools.database import Database
from tools.seeder import seed_database

log = get_logger(__name__)


class AppContext:
    def __init__(
        self,
        config: Settings,
        db: Database,
        server: MockApi,
        client: ApiClient,
    ):
        self.settings = config
        self.db = db
        self.server = server
        self.client = client

        self.ui = UIStore()
        self.jobs = JobsStore(client, self.ui, per_page=config.jobs_per_page)
        self.candidates = CandidatesStore(
            client, self.ui, page_size=config.candidates_page_size, current_user=config.current_user
        )
        self.assessments = AssessmentsStore(client, self.ui)

    @classmethod
    def create(cls, config: Optional[Settings] = None, rng: Optional[random.Random] = None) -> "AppContext":
        """
        Open and seed the database, load candidates and wire the stores.

        Raises StorageUnavailableError if the database cannot be opened.
        """
        config = config or default_settings
        db = Database(config.db_path)
        seed_database(db, config.fixtures_dir)

        registry = CandidateRegistry(lambda: candidate_fixture(config))
        log.info("Loaded %d candidates", len(registry))

        server = MockApi(
            db,
            registry,
            current_user=config.current_user,
            page_size=config.candidates_page_size,
            latency_ms=config.api_latency_ms,
            failure_rate=config.api_failure_rate,
            rng=rng,
        )
        client = ApiClient(transport=server.transport(), base_url=config.api_base_url)
        return cls(config, db, server, client)

    @property
    def stores(self) -> tuple:
        return (self.jobs, self.candidates, self.assessments)

    async def retry_all(self) -> list[Any]:
        """
        Clear the banner, then replay every store's last action concurrently.

        Returns one entry per store: the action's result, or the exception a
        replayed mutation raised.
        """
        self.ui.clear_error()
        results = await asyncio.gather(
            *(store.retry_last_action() for store in self.stores),
            return_exceptions=True,
        )
        for store, result in zip(self.stores, results):
            if isinstance(result, Exception):
                log.warning("[%s] Retry failed: %s", store.name, result)
        return list(results)

    def reset(self) -> None:
        """Drop client state and rebuild the in-memory candidate set."""
        self.ui.reset()
        for store in self.stores:
            store.reset()
        self.server.registry.reset()

    async def aclose(self) -> None:
        await self.client.aclose()
        self.db.close()

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
