import logging
from typing import Optional

import requests

from .discovery import ProviderChain, build_query
from .emails import discover_emails
from .linkedin import ROLES, build_linkedin_search
from .scoring import score_company
from .settings import Settings, load_settings
from .types import Candidate, EnrichedCompany, Mode, ResultEnvelope, SearchCriteria

logger = logging.getLogger(__name__)

# Shown when the live pipeline blows up, so the caller still gets a well-formed payload
PLACEHOLDER_COMPANIES = [
    Candidate(name="AI Logistics Pty Ltd", website="https://ailogistics.example", address="CBD, Sydney"),
    Candidate(name="Smart Manufacturing AI", website="https://smaiai.example", address="North Sydney"),
]
PLACEHOLDER_ROLES = ["CEO"]


def _ranked(companies: list[EnrichedCompany]) -> list[EnrichedCompany]:
    # sorted() is stable: provider order breaks ties
    return sorted(companies, key=lambda c: c.lead_score, reverse=True)


class EnrichmentPipeline:
    """
    criteria -> canonical query -> provider chain -> per-candidate enrichment -> envelope.

    Candidates are enriched one at a time. Any error escaping discovery or
    enrichment is turned into a "mock-error" envelope with placeholder companies.

    A session created here is closed by `close()` or on leaving a `with` block.
    A session passed in belongs to the caller and is left open.
    """

    def __init__(
        self,
        settings: Settings,
        chain: Optional[ProviderChain] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.chain = chain or ProviderChain.from_settings(settings, self.session)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "EnrichmentPipeline":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def enrich(self, candidate: Candidate, criteria: SearchCriteria) -> EnrichedCompany:
        emails = discover_emails(
            candidate.website,
            timeout_s=self.settings.page_timeout_s,
            session=self.session,
            user_agent=self.settings.user_agent,
        )
        return EnrichedCompany(
            name=candidate.name,
            website=candidate.website,
            address=candidate.address,
            description=f"{criteria.subject} {criteria.industry}".strip(),
            emails=tuple(emails),
            linkedin_search=build_linkedin_search(candidate.name, ROLES),
            lead_score=score_company(candidate, criteria),
        )

    def placeholder(self, query: str, criteria: SearchCriteria, error: Exception) -> ResultEnvelope:
        companies = [
            EnrichedCompany(
                name=c.name,
                website=c.website,
                address=c.address,
                linkedin_search=build_linkedin_search(c.name, PLACEHOLDER_ROLES),
                lead_score=score_company(c, criteria),
            )
            for c in PLACEHOLDER_COMPANIES
        ]
        return ResultEnvelope(
            mode=Mode.MOCK_ERROR,
            query_used=query,
            total=len(companies),
            companies=_ranked(companies),
            error_message=str(error) or error.__class__.__name__,
        )

    def run(self, criteria: SearchCriteria) -> ResultEnvelope:
        query = build_query(criteria)
        try:
            resolved = self.chain.resolve(query, criteria)
            total = len(resolved.candidates)
            companies = [self.enrich(c, criteria) for c in resolved.candidates[: criteria.result_limit]]
            logger.info(
                "query=%r mode=%s total=%d enriched=%d", query, resolved.mode, total, len(companies)
            )
            return ResultEnvelope(
                mode=resolved.mode,
                query_used=query,
                total=total,
                companies=_ranked(companies),
            )
        except Exception as e:
            logger.exception("Search pipeline failed for query=%r, returning placeholders", query)
            return self.placeholder(query, criteria, e)


def search_companies(criteria: SearchCriteria, settings: Optional[Settings] = None) -> ResultEnvelope:
    """Convenience entry point for the request layer."""
    with EnrichmentPipeline(settings or load_settings()) as p:
        return p.run(criteria)
