from pathlib import Path
from typing import List, Sequence

import httpx

from sentrydigest.config import Settings, settings as default_settings
from sentrydigest.models.items import NormalizedItem
from sentrydigest.models.sources import SelectionConfig, SourceConfig
from sentrydigest.services.config_store import ConfigStore
from sentrydigest.services.logger import logger
from sentrydigest.services.renderer import write_outputs
from sentrydigest.services.threat_intel import ThreatIntelClient
from sentrydigest.tools.adapter_factory import AdapterFactory
from sentrydigest.workflows.aggregator import Aggregator
from sentrydigest.workflows.selector import select_items

class Pipeline:
    def __init__(self, settings: Settings = default_settings, http: httpx.AsyncClient | None = None):
        self.settings = settings
        self._http = http

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.HTTP_TIMEOUT,
            headers={"User-Agent": self.settings.USER_AGENT},
            follow_redirects=True,
        )

    async def select(self, sources: Sequence[SourceConfig], selection: SelectionConfig) -> List[NormalizedItem]:
        """Fetch every enabled source and return the final ordered list."""
        if self._http is not None:
            return await self._select_with(self._http, sources, selection)
        async with self._client() as http:
            return await self._select_with(http, sources, selection)

    async def _select_with(
        self, http: httpx.AsyncClient, sources: Sequence[SourceConfig], selection: SelectionConfig
    ) -> List[NormalizedItem]:
        threat_intel = ThreatIntelClient.from_settings(http, self.settings)
        aggregator = Aggregator(AdapterFactory(http, threat_intel))

        pool = await aggregator.gather(sources)
        selected = select_items(pool, selection)
        logger.info(f"Selected {len(selected)} of {len(pool)} items (max {selection.max_items}).")
        return selected

    async def run_pipeline(self, config_path: Path | None = None, output_dir: Path | None = None) -> List[NormalizedItem]:
        """
        Main entry point:
        1. Load run configuration (creating the default one if missing)
        2. Fetch and select items
        3. Write index.html and news-data.json
        4. Stamp lastUpdated in the config file
        """
        store = ConfigStore(config_path or self.settings.CONFIG_PATH)
        config = store.load()

        logger.info("Fetching news...")
        items = await self.select(config.enabled_sources, config.settings)
        logger.info(f"Fetched {len(items)} news items from {len(config.enabled_sources)} active sources")

        write_outputs(items, output_dir or self.settings.OUTPUT_DIR)
        store.touch(config)
        return items

pipeline = Pipeline()
