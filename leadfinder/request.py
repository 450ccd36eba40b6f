from typing import Any, Mapping

from .types import SearchCriteria

# Preview requests fetch a modest list; the UI shows the first 10
PREVIEW_LIMIT = 15
FULL_LIMIT = 40


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_full(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return value in (1, "1", "true")


def criteria_from_params(params: Mapping[str, Any]) -> SearchCriteria:
    """
    Build search criteria from query-string parameters or a JSON body.
    `full` switches from the preview limit to the full list.
    """
    params = params or {}
    return SearchCriteria(
        subject=_text(params.get("subject")),
        industry=_text(params.get("industry")),
        location=_text(params.get("location")),
        result_limit=FULL_LIMIT if is_full(params.get("full")) else PREVIEW_LIMIT,
    )
