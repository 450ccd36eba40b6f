from urllib.parse import quote

from .types import LinkedInSearch

SEARCH_BASE = "https://www.google.com/search?q="

# Decision makers we build people-search links for, in display order
ROLES = [
    "CEO",
    "COO",
    "CTO",
    "Head of Operations",
    "Head of Supply Chain",
    "Operations Manager",
    "Supply Chain Manager",
]


def build_linkedin_search(company_name: str, roles: list[str] = ROLES) -> tuple[LinkedInSearch, ...]:
    """One site-scoped LinkedIn people search per role. No request is made."""
    company = f'"{company_name}"'
    return tuple(
        LinkedInSearch(
            role=role,
            url=SEARCH_BASE + quote(f'site:linkedin.com/in "{role}" {company}', safe="!~*'()"),
        )
        for role in roles
    )
