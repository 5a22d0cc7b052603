from datetime import datetime, timezone
from typing import Any, Dict, List

from sentrydigest.models.items import NormalizedItem, truncate_summary
from sentrydigest.models.sources import CampaignOptions, SourceConfig
from sentrydigest.services.logger import logger
from sentrydigest.services.threat_intel import (
    MissingCredentialError,
    ThreatIntelClient,
    ThreatIntelError,
    attributes,
    creation_timestamp,
    description,
    entity_list,
    next_cursor,
    split_endpoint,
)
from sentrydigest.tools.base_adapter import SourceAdapter

MIN_PAGE_SIZE = 50

class CampaignAdapter(SourceAdapter):
    """Newest campaign collections from a single paginated endpoint."""

    def __init__(self, source: SourceConfig, client: ThreatIntelClient):
        super().__init__(source)
        self.client = client
        self.options: CampaignOptions = (
            source.options if isinstance(source.options, CampaignOptions) else CampaignOptions()
        )

    async def fetch_items(self) -> List[NormalizedItem]:
        if not self.client.has_credentials:
            logger.warning(f"No threat intel API key set; skipping {self.source.name}")
            return []

        try:
            entities = await self._collect()
        except MissingCredentialError:
            logger.warning(f"No threat intel API key set; skipping {self.source.name}")
            return []
        except ThreatIntelError as e:
            logger.warning(f"Error fetching campaigns for {self.source.name} (status={e.status}): {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error fetching campaigns for {self.source.name}: {e}")
            return []

        entities.sort(key=creation_timestamp, reverse=True)
        items = [self._to_item(entity) for entity in entities[: self.options.fetch_limit]]
        logger.info(f"Found {len(items)} campaigns from {self.source.name}")
        return items

    async def _collect(self) -> List[Dict[str, Any]]:
        path, base_params = split_endpoint(self.options.endpoint)
        page_size = max(MIN_PAGE_SIZE, self.options.fetch_limit)

        retained: List[Dict[str, Any]] = []
        cursor = None
        pages = 0
        while True:
            params: Dict[str, Any] = {**base_params, "limit": page_size}
            if cursor:
                params["cursor"] = cursor
            payload = await self.client.get_json(path, params)
            pages += 1

            page = entity_list(payload)
            # Entities without a creation date cannot be ranked by recency
            retained.extend(e for e in page if creation_timestamp(e) is not None)
            logger.debug(f"{self.source.name}: page {pages} returned {len(page)} entities")

            cursor = next_cursor(payload)
            if not cursor or pages >= self.options.max_pages:
                break
        return retained

    def _to_item(self, entity: Dict[str, Any]) -> NormalizedItem:
        created = datetime.fromtimestamp(creation_timestamp(entity), tz=timezone.utc)
        summary = f"Created {created:%Y-%m-%d}"
        desc = description(entity)
        if desc:
            summary = f"{summary}. {desc}"

        return NormalizedItem(
            title=f"Campaign: {attributes(entity).get('name') or entity.get('id', '')}",
            link=self.client.gui_link("collection", str(entity.get("id", ""))),
            published_at=created,
            source_name=self.source.name,
            summary=truncate_summary(summary),
        )
