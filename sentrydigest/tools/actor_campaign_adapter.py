import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from sentrydigest.models.items import NormalizedItem, truncate_summary, utc_now
from sentrydigest.models.sources import ActorCampaignOptions, SourceConfig
from sentrydigest.services.logger import logger
from sentrydigest.services.threat_intel import (
    EndpointCandidate,
    EndpointsExhausted,
    MissingCredentialError,
    ThreatIntelClient,
    ThreatIntelError,
    creation_timestamp,
    description,
    display_name,
    entity_list,
)
from sentrydigest.tools.base_adapter import SourceAdapter

def actor_candidates(limit: int) -> List[EndpointCandidate]:
    return [
        EndpointCandidate("threat_actors", "threat_actors", {"limit": limit}),
        EndpointCandidate(
            "collections:threat-actor",
            "collections",
            {"filter": "collection_type:threat-actor", "limit": limit},
        ),
    ]

def campaign_candidates(actor_id: str, limit: int) -> List[EndpointCandidate]:
    actor = quote(actor_id, safe="")
    params = {"limit": limit}
    return [
        EndpointCandidate("relationships", f"threat_actors/{actor}/relationships/campaigns", params),
        EndpointCandidate("nested", f"threat_actors/{actor}/campaigns", params),
        EndpointCandidate("legacy-hyphen", f"threat-actors/{actor}/campaigns", params),
        EndpointCandidate("legacy-collection", f"collections/{actor}/relationships/campaigns", params),
    ]

class ActorCampaignAdapter(SourceAdapter):
    """
    Recent campaigns attributed to a set of threat actors.

    Actors come from `actorIds` or from the first actor listing endpoint that
    answers. Each actor's campaigns come from the first campaign endpoint shape
    that answers; entries missing a creation date are hydrated one at a time,
    filtered to the last `daysWindow` days and capped at `campaignsPerActor`.
    """

    def __init__(self, source: SourceConfig, client: ThreatIntelClient):
        super().__init__(source)
        self.client = client
        self.options: ActorCampaignOptions = (
            source.options if isinstance(source.options, ActorCampaignOptions) else ActorCampaignOptions()
        )

    async def fetch_items(self) -> List[NormalizedItem]:
        if not self.client.has_credentials:
            logger.warning(f"No threat intel API key set; skipping {self.source.name}")
            return []

        try:
            actors = await self._resolve_actors()
            logger.info(f"{self.source.name}: resolved {len(actors)} actors")
            per_actor = await asyncio.gather(*[self._items_for_actor(actor) for actor in actors])
        except MissingCredentialError:
            logger.warning(f"No threat intel API key set; skipping {self.source.name}")
            return []
        except Exception as e:
            status = getattr(e, "status", None)
            logger.error(f"Error fetching actor campaigns for {self.source.name} (status={status}): {e}")
            return []

        items = [item for actor_items in per_actor for item in actor_items]
        logger.info(f"Found {len(items)} actor campaigns from {self.source.name}")
        return items

    async def _resolve_actors(self) -> List[Dict[str, Any]]:
        if self.options.actor_ids:
            return [{"id": actor_id, "attributes": {}} for actor_id in self.options.actor_ids]

        try:
            candidate, payload = await self.client.first_successful(
                actor_candidates(self.options.actors_limit)
            )
        except EndpointsExhausted as e:
            logger.warning(
                f"{self.source.name}: could not list threat actors (statuses={sorted(set(map(str, e.statuses)))})"
            )
            return []

        logger.debug(f"{self.source.name}: actors listed via {candidate.label}")
        return entity_list(payload)[: self.options.actors_limit]

    async def _items_for_actor(self, actor: Dict[str, Any]) -> List[NormalizedItem]:
        try:
            return await self._campaigns_for_actor(actor)
        except MissingCredentialError:
            raise
        except Exception as e:
            logger.error(f"{self.source.name}: actor {actor.get('id')} failed (status={getattr(e, 'status', None)}): {e}")
            return []

    async def _campaigns_for_actor(self, actor: Dict[str, Any]) -> List[NormalizedItem]:
        actor_id = str(actor.get("id", ""))
        actor_name = display_name(actor)
        try:
            candidate, payload = await self.client.first_successful(
                campaign_candidates(actor_id, self.options.campaign_fetch_limit)
            )
        except EndpointsExhausted as e:
            logger.warning(f"{self.source.name}: no campaigns for actor {actor_name} (status={e.status}); skipping")
            return []

        listed = entity_list(payload)[: self.options.campaign_fetch_limit]
        logger.debug(f"{self.source.name}: {len(listed)} campaigns for {actor_name} via {candidate.label}")

        # Sequential on purpose: one lookup at a time per actor
        hydrated = []
        for campaign in listed:
            hydrated.append(await self._hydrate(campaign))

        cutoff = (utc_now() - timedelta(days=self.options.days_window)).timestamp()
        recent = []
        for campaign in hydrated:
            ts = creation_timestamp(campaign)
            if ts is not None and ts >= cutoff:
                recent.append(campaign)
        recent = recent[: self.options.campaigns_per_actor]

        return [self._to_item(actor_name, campaign) for campaign in recent]

    async def _hydrate(self, campaign: Dict[str, Any]) -> Dict[str, Any]:
        if creation_timestamp(campaign) is not None:
            return campaign
        campaign_id = campaign.get("id")
        if not campaign_id:
            return campaign
        try:
            payload = await self.client.get_json(f"collections/{quote(str(campaign_id), safe='')}")
        except ThreatIntelError as e:
            logger.debug(f"Hydration of campaign {campaign_id} failed (status={e.status}); keeping listing entry")
            return campaign
        data = payload.get("data")
        return data if isinstance(data, dict) else campaign

    def _to_item(self, actor_name: str, campaign: Dict[str, Any]) -> NormalizedItem:
        campaign_name = display_name(campaign)
        ts: Optional[float] = creation_timestamp(campaign)
        created = datetime.fromtimestamp(ts, tz=timezone.utc) if ts is not None else utc_now()
        date_text = f"{created:%Y-%m-%d}" if ts is not None else ""

        fragments = [actor_name, campaign_name, date_text, description(campaign)]
        return NormalizedItem(
            title=f"{actor_name} campaign: {campaign_name}",
            link=self.client.gui_link("search", quote(actor_name, safe="")),
            published_at=created,
            source_name=self.source.name,
            summary=truncate_summary(" | ".join(f for f in fragments if f)),
        )
