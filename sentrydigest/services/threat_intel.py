import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from sentrydigest.config import Settings
from sentrydigest.services.logger import logger

class ThreatIntelError(Exception):
    """A request to the threat intel API failed. `status` is None for transport failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

class MissingCredentialError(ThreatIntelError):
    pass

class EndpointsExhausted(ThreatIntelError):
    """Every candidate in a fallback chain failed."""

    def __init__(self, message: str, statuses: Sequence[Optional[int]]):
        last = next((s for s in reversed(statuses) if s is not None), None)
        super().__init__(message, status=last)
        self.statuses = list(statuses)

@dataclass(frozen=True)
class EndpointCandidate:
    label: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)

def split_endpoint(endpoint: str) -> Tuple[str, Dict[str, str]]:
    """'collections?filter=x' -> ('collections', {'filter': 'x'})"""
    url = httpx.URL(endpoint)
    return url.path.lstrip("/"), dict(url.params)

class ThreatIntelClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: Optional[str],
        base_url: str = "https://www.virustotal.com/api/v3",
        gui_url: str = "https://www.virustotal.com/gui",
        auth_header: str = "x-apikey",
        retry_attempts: int = 2,
        retry_wait: Optional[wait_base] = None,
    ):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.gui_url = gui_url.rstrip("/")
        self.auth_header = auth_header
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)

    @classmethod
    def from_settings(cls, http: httpx.AsyncClient, settings: Settings) -> "ThreatIntelClient":
        return cls(
            http,
            api_key=settings.THREAT_INTEL_API_KEY,
            base_url=settings.THREAT_INTEL_BASE_URL,
            gui_url=settings.THREAT_INTEL_GUI_URL,
            auth_header=settings.THREAT_INTEL_AUTH_HEADER,
            retry_attempts=settings.HTTP_RETRY_ATTEMPTS,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def gui_link(self, *segments: str) -> str:
        return "/".join([self.gui_url, *segments])

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.has_credentials:
            raise MissingCredentialError("threat intel API key is not configured")

        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {self.auth_header: self.api_key, "Accept": "application/json"}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
                before_sleep=lambda retry_state: logger.warning(
                    f"Threat intel request to {path} failed, retrying in {retry_state.next_action.sleep} seconds... (attempt {retry_state.attempt_number})"
                ),
            ):
                with attempt:
                    resp = await self.http.get(url, params=params, headers=headers)
        except httpx.TransportError as e:
            raise ThreatIntelError(f"{path}: {e.__class__.__name__}: {e}") from e

        if resp.status_code >= 400:
            raise ThreatIntelError(f"{path} returned HTTP {resp.status_code}", status=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise ThreatIntelError(f"{path} returned a non-JSON body", status=resp.status_code) from e
        if not isinstance(payload, dict):
            raise ThreatIntelError(f"{path} returned an unexpected payload", status=resp.status_code)
        return payload

    async def first_successful(
        self, candidates: Sequence[EndpointCandidate]
    ) -> Tuple[EndpointCandidate, Dict[str, Any]]:
        """Try each candidate in order and return the first one that answers."""
        statuses: List[Optional[int]] = []
        for candidate in candidates:
            try:
                payload = await self.get_json(candidate.path, candidate.params)
                return candidate, payload
            except MissingCredentialError:
                raise
            except ThreatIntelError as e:
                statuses.append(e.status)
                logger.debug(f"Endpoint {candidate.label} ({candidate.path}) failed: {e}")
        raise EndpointsExhausted(
            f"all {len(candidates)} endpoint candidates failed", statuses=statuses
        )

def entity_list(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    data = payload.get("data")
    if isinstance(data, list):
        return [e for e in data if isinstance(e, dict)]
    return []

def next_cursor(payload: Dict[str, Any]) -> Optional[str]:
    meta = payload.get("meta") or {}
    if not isinstance(meta, dict):
        return None
    return meta.get("next") or meta.get("cursor") or None

def attributes(entity: Dict[str, Any]) -> Dict[str, Any]:
    attrs = entity.get("attributes")
    return attrs if isinstance(attrs, dict) else {}

def creation_timestamp(entity: Dict[str, Any]) -> Optional[float]:
    value = attributes(entity).get("creation_date")
    # bool is an int subclass but never a timestamp
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return None
    try:
        value = float(value)
        if not math.isfinite(value):
            return None
        datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        # Milliseconds or garbage; out of range for a datetime
        return None
    return value

def display_name(entity: Dict[str, Any]) -> str:
    attrs = attributes(entity)
    for key in ("alias", "name"):
        value = attrs.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return str(entity.get("id", ""))

def description(entity: Dict[str, Any]) -> str:
    attrs = attributes(entity)
    for key in ("description", "summary"):
        value = attrs.get(key)
        if isinstance(value, str) and value.strip():
            return " ".join(value.split())
    return ""
