from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

class SourceKind(str, Enum):
    RSS = "rss"
    THREAT_INTEL = "threatIntel"

class ThreatIntelMode(str, Enum):
    CAMPAIGNS = "campaigns"
    ACTOR_CAMPAIGNS = "actorCampaigns"

class _Options(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

class RssOptions(_Options):
    pass

class CampaignOptions(_Options):
    endpoint: str = "collections?filter=collection_type:campaign"
    fetch_limit: int = Field(30, ge=1)
    max_pages: int = Field(3, ge=1)

class ActorCampaignOptions(_Options):
    actor_ids: List[str] = Field(default_factory=list)
    actors_limit: int = Field(5, ge=1)
    campaign_fetch_limit: int = Field(20, ge=1)
    days_window: int = Field(3, ge=0)
    campaigns_per_actor: int = Field(3, ge=0)

AdapterOptions = Union[ActorCampaignOptions, CampaignOptions, RssOptions]

def options_model_for(kind: Any, mode: Any) -> Type[_Options]:
    if kind == SourceKind.THREAT_INTEL:
        if mode == ThreatIntelMode.ACTOR_CAMPAIGNS:
            return ActorCampaignOptions
        return CampaignOptions
    return RssOptions

class SourceConfig(BaseModel):
    """One configured origin. `kind`/`mode` stay plain strings so an unknown
    combination loads fine and is later resolved to an adapter that yields nothing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    name: str
    url: str = ""
    kind: str = Field(validation_alias=AliasChoices("kind", "type"))
    mode: Optional[str] = None
    enabled: bool = True
    options: AdapterOptions = Field(default_factory=RssOptions)

    @model_validator(mode="before")
    @classmethod
    def _typed_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw = data.get("options")
        if raw is None:
            raw = {}
        if isinstance(raw, dict):
            kind = data.get("kind", data.get("type"))
            model = options_model_for(kind, data.get("mode"))
            data = {**data, "options": model.model_validate(raw)}
        return data

class SelectionConfig(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="allow"
    )

    max_items: int = Field(
        30, ge=0, validation_alias=AliasChoices("maxItems", "maxNewsItems", "max_items")
    )
    source_min_items: Dict[str, int] = Field(default_factory=dict)
    # Reserved for future ordering strategies; carried through untouched
    sort_mode: Optional[str] = None
    last_updated: Optional[str] = None

class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sources: List[SourceConfig] = Field(default_factory=list)
    settings: SelectionConfig = Field(default_factory=SelectionConfig)

    @property
    def enabled_sources(self) -> List[SourceConfig]:
        return [source for source in self.sources if source.enabled]
