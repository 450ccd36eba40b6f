# leadfinder/discovery.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

import requests

from .exceptions import ProviderError
from .settings import Settings
from .types import Candidate, Mode, SearchCriteria

logger = logging.getLogger(__name__)


PLACES_TEXT_URL = "https://places.googleapis.com/v1/places:searchText"
PLACES_FIELDS = "places.id,places.displayName,places.websiteUri,places.formattedAddress"
PLACES_MAX_RESULTS = 20

LEGACY_TEXT_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"

OSM_FALLBACK_REGEX = "manufact|factory|industrial"
OSM_MAX_NAME_TOKENS = 4

DEFAULT_QUERY = "manufacturer"
MISSING_NAME = "—"


# ----------------------------
# Types
# ----------------------------
@dataclass
class ProviderResult:
    """Outcome of one provider attempt: ok (with data), empty, or failed."""

    status: str  # ok | empty | failed
    candidates: list[Candidate] = field(default_factory=list)
    error: Optional[Exception] = None

    @classmethod
    def from_candidates(cls, candidates: list[Candidate]) -> "ProviderResult":
        return cls(status="ok" if candidates else "empty", candidates=candidates)

    @classmethod
    def failed(cls, error: Exception) -> "ProviderResult":
        return cls(status="failed", error=error)


@dataclass
class ChainResult:
    mode: str
    candidates: list[Candidate]


# ----------------------------
# Utilities
# ----------------------------
def _norm(s: str) -> str:
    return " ".join(str(s or "").strip().split())


def build_query(criteria: SearchCriteria) -> str:
    """
    Canonical search string: "<subject> <industry> in <location>".
    Used verbatim as the provider query and echoed back as queryUsed.
    """
    parts = [criteria.subject, criteria.industry, f"in {criteria.location}" if criteria.location else ""]
    q = " ".join(p for p in parts if p).strip()
    return q or DEFAULT_QUERY


def escape_regex(s: str) -> str:
    return re.sub(r"([.*+?^${}()|\[\]\\])", r"\\\1", str(s))


def escape_quotes(s: str) -> str:
    return str(s).replace('"', '\\"')


def osm_name_regex(query: str) -> str:
    words = str(query or "").split()[:OSM_MAX_NAME_TOKENS]
    if not words:
        return OSM_FALLBACK_REGEX
    return "|".join(escape_regex(w) for w in words)


def osm_address(tags: dict[str, Any]) -> str:
    parts = [
        tags.get("addr:housenumber"),
        tags.get("addr:street"),
        tags.get("addr:suburb") or tags.get("addr:city"),
        tags.get("addr:state"),
        tags.get("addr:postcode"),
        tags.get("addr:country"),
    ]
    addr = ", ".join(str(p) for p in parts if p)
    return addr or str(tags.get("addr:full") or "")


# ----------------------------
# Providers
# ----------------------------
class Provider:
    """
    A company discovery source. `search` raises ProviderError on failure;
    `attempt` wraps it into a ProviderResult and never raises ProviderError.
    """

    name = "provider"
    mode = ""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def search(self, query: str, criteria: SearchCriteria) -> list[Candidate]:
        raise NotImplementedError

    def attempt(self, query: str, criteria: SearchCriteria) -> ProviderResult:
        try:
            return ProviderResult.from_candidates(self.search(query, criteria))
        except ProviderError as e:
            logger.warning("%s failed: %s", self.name, e)
            return ProviderResult.failed(e)


class PlacesV1Provider(Provider):
    """Google Places API (New) text search."""

    name = "places-v1"
    mode = Mode.LIVE_V1

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.settings.places_api_key or "",
            "X-Goog-FieldMask": PLACES_FIELDS,
        }

    def search(self, query: str, criteria: SearchCriteria) -> list[Candidate]:
        body = {
            "textQuery": query,
            "maxResultCount": min(criteria.result_limit, PLACES_MAX_RESULTS),
            "languageCode": "en",
        }
        try:
            r = self.session.post(
                PLACES_TEXT_URL,
                headers=self._headers(),
                json=body,
                timeout=self.settings.provider_timeout_s,
            )
        except requests.RequestException as e:
            raise ProviderError(self.name, f"Google v1 request failed: {e}") from e
        if r.status_code >= 300:
            raise ProviderError(self.name, f"Google v1 {r.status_code}: {r.text[:500]}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError(self.name, f"Google v1 returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError(self.name, f"Google v1 returned {type(data).__name__}, expected an object")
        return [
            Candidate(
                name=(p.get("displayName") or {}).get("text") or MISSING_NAME,
                website=p.get("websiteUri") or "",
                address=p.get("formattedAddress") or "",
            )
            for p in data.get("places") or []
        ]


class LegacyTextSearchProvider(Provider):
    """Google Places legacy Text Search. ZERO_RESULTS is a valid, empty answer."""

    name = "places-legacy"
    mode = Mode.LIVE_LEGACY

    def search(self, query: str, criteria: SearchCriteria) -> list[Candidate]:
        url = f"{LEGACY_TEXT_URL}?query={quote(query, safe='')}&key={self.settings.places_api_key or ''}"
        try:
            r = self.session.get(url, timeout=self.settings.provider_timeout_s)
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(self.name, f"legacy request failed: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError(self.name, f"legacy returned {type(data).__name__}, expected an object")

        status = data.get("status")
        if status not in {"OK", "ZERO_RESULTS"}:
            raise ProviderError(self.name, f"legacy {status}: {data.get('error_message') or ''}")

        return [
            Candidate(
                name=p.get("name") or MISSING_NAME,
                website="",
                address=p.get("formatted_address") or "",
            )
            for p in (data.get("results") or [])[: criteria.result_limit]
        ]


class OverpassProvider(Provider):
    """OpenStreetMap via Overpass. No key required."""

    name = "overpass"
    mode = Mode.LIVE_OSM

    def build_ql(self, query: str, criteria: SearchCriteria) -> str:
        region = criteria.location or self.settings.default_region
        regex = osm_name_regex(query)
        return f"""
[out:json][timeout:25];
area["name"="{escape_quotes(region)}"]["boundary"="administrative"]->.a;
(
  nwr(area.a)["name"~"{regex}", i];
  nwr(area.a)["office"="company"];
  nwr(area.a)["man_made"="works"];
  nwr(area.a)["industrial"];
);
out tags center {criteria.result_limit};
""".strip()

    def search(self, query: str, criteria: SearchCriteria) -> list[Candidate]:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
            "User-Agent": self.settings.user_agent,
        }
        try:
            r = self.session.post(
                self.settings.overpass_url,
                headers=headers,
                data={"data": self.build_ql(query, criteria)},
                timeout=self.settings.provider_timeout_s,
            )
        except requests.RequestException as e:
            raise ProviderError(self.name, f"OSM request failed: {e}") from e
        if r.status_code >= 300:
            raise ProviderError(self.name, f"OSM {r.status_code}: {r.text[:500]}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError(self.name, f"OSM returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProviderError(self.name, f"OSM returned {type(data).__name__}, expected an object")

        out: list[Candidate] = []
        for el in data.get("elements") or []:
            tags = el.get("tags") or {}
            name = _norm(tags.get("name") or "")
            if not name or name == MISSING_NAME:
                continue
            out.append(
                Candidate(
                    name=name,
                    website=tags.get("website") or tags.get("contact:website") or "",
                    address=osm_address(tags),
                )
            )
        return out


# ----------------------------
# Chain
# ----------------------------
class ProviderChain:
    """
    Try keyed providers in priority order, then the keyless fallback.

    A keyed stage ends the chain only when it returns candidates. Failures and
    empty lists move on. The fallback stage is always reached in that case, and
    its failure is raised to the caller.
    """

    def __init__(self, keyed: list[Provider], fallback: Provider, has_credential: bool):
        self.keyed = keyed
        self.fallback = fallback
        self.has_credential = has_credential

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "ProviderChain":
        return cls(
            keyed=[
                PlacesV1Provider(settings, session),
                LegacyTextSearchProvider(settings, session),
            ],
            fallback=OverpassProvider(settings, session),
            has_credential=bool(settings.places_api_key),
        )

    def resolve(self, query: str, criteria: SearchCriteria) -> ChainResult:
        if self.has_credential:
            for provider in self.keyed:
                res = provider.attempt(query, criteria)
                if res.status == "ok":
                    logger.info("Served %d candidate(s) from %s", len(res.candidates), provider.name)
                    return ChainResult(mode=provider.mode, candidates=res.candidates)
                if res.status == "empty":
                    logger.info("%s returned no candidates, falling back to %s", provider.name, self.fallback.name)
                    # the legacy API only stands in for a failed primary
                    break
        else:
            logger.info("No Places API key configured, using %s", self.fallback.name)

        candidates = self.fallback.search(query, criteria)
        logger.info("Served %d candidate(s) from %s", len(candidates), self.fallback.name)
        return ChainResult(mode=self.fallback.mode, candidates=candidates)
