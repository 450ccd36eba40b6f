"""
Exceptions shared across the lead finder pipeline.
"""

from __future__ import annotations


class LeadFinderError(Exception):
    """Base class for errors raised by this package."""

    pass


class ProviderError(LeadFinderError):
    """
    Raised when a company discovery provider cannot serve a query.

    Examples:
        - transport failure (timeout, connection reset)
        - non-2xx HTTP status
        - provider-reported error status (REQUEST_DENIED, OVER_QUERY_LIMIT)
        - a response body that is not a JSON object
    """

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


__all__ = [
    "LeadFinderError",
    "ProviderError",
]
