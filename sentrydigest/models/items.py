
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Tuple
from datetime import datetime, timezone

SUMMARY_MAX_LENGTH = 200
ELLIPSIS = "..."

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def truncate_summary(text: str, limit: int = SUMMARY_MAX_LENGTH) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS

class NormalizedItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    published_at: datetime = Field(default_factory=utc_now)
    source_name: str
    summary: str = ""

    @field_validator("published_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC so feeds and API items compare cleanly
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def dedup_key(self) -> Tuple[str, str]:
        return (self.source_name, self.link)

    def to_record(self) -> dict:
        """Shape used by news-data.json."""
        return {
            "title": self.title,
            "link": self.link,
            "date": self.published_at.isoformat(),
            "source": self.source_name,
            "summary": self.summary,
        }
