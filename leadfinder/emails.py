import logging
import re
from typing import Optional

import requests

from .settings import DEFAULT_USER_AGENT
from .web import fetch_page, html_to_text, mailto_targets, normalize_origin

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[A-Za-z]{2,}")

# Pages tried after the homepage, in order
CONTACT_PATHS = ["/contact", "/contact-us", "/about", "/contacts"]

# Placeholder domains never count as real contacts
RESERVED_SUFFIX = ".example"

MAX_EMAILS = 3


def candidate_pages(website: str) -> list[str]:
    origin = normalize_origin(website)
    if not origin:
        return []
    return [origin] + [origin + p for p in CONTACT_PATHS]


def extract_emails(html: str) -> list[str]:
    """
    Email-like tokens from a page: visible text first, then mailto: targets.
    Lower-cased, de-duplicated, placeholder domains dropped.
    """
    if not html:
        return []
    _, text = html_to_text(html)
    sources = [text] + mailto_targets(html)

    seen = set()
    out: list[str] = []
    for s in sources:
        for m in EMAIL_RE.findall(s):
            e = m.lower()
            if e.endswith(RESERVED_SUFFIX) or e in seen:
                continue
            seen.add(e)
            out.append(e)
    return out


def discover_emails(
    website: str,
    timeout_s: float = 6.0,
    session: Optional[requests.Session] = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> list[str]:
    """
    Probe the homepage and a few contact-style pages for public email addresses.

    Pages are visited one after another, each fetch bounded by `timeout_s`.
    Failed pages are skipped. Stops as soon as MAX_EMAILS addresses are found.
    A site with no reachable pages simply yields [].
    """
    pages = candidate_pages(website)
    if not pages:
        return []

    found: list[str] = []
    for url in pages:
        page = fetch_page(url, timeout_s=timeout_s, session=session, user_agent=user_agent)
        if not page.ok:
            continue
        for e in extract_emails(page.html):
            if e not in found:
                found.append(e)
            if len(found) >= MAX_EMAILS:
                break
        if len(found) >= MAX_EMAILS:
            break

    logger.debug("Found %d email(s) for %s", len(found), website)
    return found
