from abc import ABC, abstractmethod
from typing import List
from sentrydigest.models.items import NormalizedItem
from sentrydigest.models.sources import SourceConfig
from sentrydigest.services.logger import logger

class SourceAdapter(ABC):
    """Turns one SourceConfig into NormalizedItems. Implementations never raise."""

    def __init__(self, source: SourceConfig):
        self.source = source

    @abstractmethod
    async def fetch_items(self) -> List[NormalizedItem]:
        pass

class NullAdapter(SourceAdapter):
    async def fetch_items(self) -> List[NormalizedItem]:
        logger.warning(
            f"No adapter for source '{self.source.name}' (kind={self.source.kind}, mode={self.source.mode}); skipping"
        )
        return []
