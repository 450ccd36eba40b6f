from typing import Union

from .types import Candidate, EnrichedCompany, SearchCriteria

SUBJECT_POINTS = 50
INDUSTRY_POINTS = 30
LOCATION_POINTS = 20

MIN_SCORE = 10
MAX_SCORE = 100


def _tokens(s: str) -> list[str]:
    return str(s or "").lower().split()


def _contains_all(text: str, query: str) -> bool:
    """True if every token of `query` is a substring of `text`. Blank query -> True."""
    toks = _tokens(query)
    if not toks:
        return True
    t = str(text or "").lower()
    return all(tok in t for tok in toks)


def score_company(
    company: Union[Candidate, EnrichedCompany],
    criteria: SearchCriteria,
) -> int:
    """
    Lead score in [10, 100]:
    - 50 if all subject tokens appear in name/description/address/website
    - 30 if all industry tokens appear there too
    - 20 if all location tokens appear in the address
    """
    # raw candidates carry no description; it only counts on already-enriched records
    desc = getattr(company, "description", "") or ""
    combined = " ".join([company.name or "", desc, company.address or "", company.website or ""])

    s = 0
    if _contains_all(combined, criteria.subject):
        s += SUBJECT_POINTS
    if _contains_all(combined, criteria.industry):
        s += INDUSTRY_POINTS
    if _contains_all(company.address or "", criteria.location):
        s += LOCATION_POINTS

    return int(max(MIN_SCORE, min(MAX_SCORE, s or MIN_SCORE)))
