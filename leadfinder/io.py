import pandas as pd

from .linkedin import ROLES
from .types import ResultEnvelope

BASE_COLUMNS = ["name", "website", "address", "lead_score", "emails"]


def _role_column(role: str) -> str:
    return "linkedin_" + role.lower().replace(" ", "_")


def companies_to_frame(envelope: ResultEnvelope) -> pd.DataFrame:
    """One row per company, best lead score first."""
    rows = []
    for c in envelope.companies:
        row = {
            "name": c.name,
            "website": c.website,
            "address": c.address,
            "lead_score": c.lead_score,
            "emails": "; ".join(c.emails),
        }
        for link in c.linkedin_search:
            row[_role_column(link.role)] = link.url
        rows.append(row)

    columns = BASE_COLUMNS + [_role_column(r) for r in ROLES]
    df = pd.DataFrame(rows, columns=columns).fillna("")
    if df.empty:
        return df
    return df.sort_values("lead_score", ascending=False, kind="stable").reset_index(drop=True)


def envelope_to_csv(envelope: ResultEnvelope) -> str:
    return companies_to_frame(envelope).to_csv(index=False)
