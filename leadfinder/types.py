from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


class Mode:
    """Provenance tags for a result envelope."""

    LIVE_V1 = "live-v1"
    LIVE_LEGACY = "live-legacy"
    LIVE_OSM = "live-osm"
    MOCK_ERROR = "mock-error"


@dataclass(frozen=True)
class SearchCriteria:
    subject: str = ""
    industry: str = ""
    location: str = ""
    # bounds both provider fetch size and enrichment work
    result_limit: int = 15


@dataclass
class Candidate:
    name: str
    website: str = ""
    address: str = ""


@dataclass(frozen=True)
class LinkedInSearch:
    role: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "url": self.url}


@dataclass(frozen=True)
class EnrichedCompany:
    name: str
    website: str
    address: str
    description: str = ""
    emails: tuple[str, ...] = ()
    linkedin_search: tuple[LinkedInSearch, ...] = ()
    lead_score: int = 10

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "website": self.website,
            "address": self.address,
            "description": self.description,
            "emails": list(self.emails),
            "linkedinSearch": [l.to_dict() for l in self.linkedin_search],
            "leadScore": self.lead_score,
        }


@dataclass
class ResultEnvelope:
    mode: str
    query_used: str
    total: int
    companies: list[EnrichedCompany] = field(default_factory=list)
    error_message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON payload returned to the caller (camelCase keys)."""
        out: dict[str, Any] = {
            "mode": self.mode,
            "queryUsed": self.query_used,
            "total": self.total,
            "companies": [c.to_dict() for c in self.companies],
        }
        if self.error_message is not None:
            out["errorMessage"] = self.error_message
        return out
