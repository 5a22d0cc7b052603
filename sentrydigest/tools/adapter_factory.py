import httpx
from sentrydigest.models.sources import SourceConfig, SourceKind, ThreatIntelMode
from sentrydigest.services.threat_intel import ThreatIntelClient
from sentrydigest.tools.base_adapter import NullAdapter, SourceAdapter
from sentrydigest.tools.rss_adapter import RSSAdapter
from sentrydigest.tools.campaign_adapter import CampaignAdapter
from sentrydigest.tools.actor_campaign_adapter import ActorCampaignAdapter

class AdapterFactory:
    def __init__(self, http: httpx.AsyncClient, threat_intel: ThreatIntelClient):
        self.http = http
        self.threat_intel = threat_intel

    def get_adapter(self, source: SourceConfig) -> SourceAdapter:
        if source.kind == SourceKind.RSS:
            return RSSAdapter(source, self.http)
        elif source.kind == SourceKind.THREAT_INTEL:
            if source.mode == ThreatIntelMode.CAMPAIGNS:
                return CampaignAdapter(source, self.threat_intel)
            elif source.mode == ThreatIntelMode.ACTOR_CAMPAIGNS:
                return ActorCampaignAdapter(source, self.threat_intel)
        return NullAdapter(source)
