import asyncio
from typing import List, Sequence
from sentrydigest.models.items import NormalizedItem
from sentrydigest.models.sources import SourceConfig
from sentrydigest.tools.adapter_factory import AdapterFactory
from sentrydigest.services.logger import logger

class Aggregator:
    def __init__(self, factory: AdapterFactory):
        self.factory = factory

    async def gather(self, sources: Sequence[SourceConfig]) -> List[NormalizedItem]:
        """Fetch every enabled source concurrently and flatten the results into one pool."""
        enabled = [source for source in sources if source.enabled]
        if not enabled:
            logger.warning("No sources enabled! Nothing to fetch.")
            return []

        adapters = [self.factory.get_adapter(source) for source in enabled]
        results = await asyncio.gather(*[a.fetch_items() for a in adapters], return_exceptions=True)

        pool: List[NormalizedItem] = []
        for source, res in zip(enabled, results):
            if isinstance(res, list):
                pool.extend(res)
            else:
                logger.error(f"Adapter for {source.name} failed: {res!r}")

        logger.info(f"Gathered {len(pool)} raw items from {len(enabled)} sources.")
        return pool
