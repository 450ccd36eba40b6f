import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from .settings import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

# Response/body handling
MAX_PAGE_BYTES = 2_000_000
CHUNK_SIZE = 16_384


@dataclass
class PageFetch:
    url: str
    status: str  # ok | timeout | error
    html: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def _clean_text(s: str) -> str:
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def normalize_origin(url: str) -> str:
    """
    Reduce a website URL to its origin (scheme + host).
    Bare domains get https://. Returns "" if the URL can't be parsed.
    """
    u = (url or "").strip()
    if not u:
        return ""
    if not u.lower().startswith("http"):
        u = "https://" + u
    try:
        parts = urlparse(u)
        host = parts.hostname
    except ValueError:
        return ""
    if parts.scheme not in {"http", "https"} or not parts.netloc or not host:
        return ""
    return f"{parts.scheme}://{parts.netloc.lower()}"


def _read_page(
    http: Any,
    url: str,
    headers: dict[str, str],
    timeout_s: float,
    deadline: float,
    max_bytes: int,
) -> PageFetch:
    with http.get(url, headers=headers, timeout=timeout_s, allow_redirects=True, stream=True) as r:
        if r.status_code >= 400:
            return PageFetch(url=url, status="error", error=f"HTTP {r.status_code}")
        ct = (r.headers.get("content-type", "") or "").lower()
        if ct and "html" not in ct and "text" not in ct:
            return PageFetch(url=url, status="error", error=f"content-type {ct}")

        body = bytearray()
        for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
            if time.monotonic() > deadline:
                return PageFetch(url=url, status="timeout", error=f"exceeded {timeout_s}s")
            body.extend(chunk or b"")
            if len(body) >= max_bytes:
                del body[max_bytes:]
                break
        html = bytes(body).decode(r.encoding or "utf-8", errors="replace")
    return PageFetch(url=url, status="ok", html=html)


def fetch_page(
    url: str,
    timeout_s: float = 6.0,
    session: Optional[requests.Session] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    max_bytes: int = MAX_PAGE_BYTES,
) -> PageFetch:
    """
    Fetch HTML from a URL. Never raises: timeouts and transport errors come back
    as a PageFetch with status "timeout" / "error".

    `timeout_s` is a wall-clock bound on the whole visit, body included. The read
    runs on a worker thread so a server trickling bytes can't hold the caller.
    Bodies larger than `max_bytes` are cut off.
    """
    if not url:
        return PageFetch(url=url, status="error", error="empty url")

    http = session or requests
    headers = {"User-Agent": user_agent}
    deadline = time.monotonic() + timeout_s

    ex = ThreadPoolExecutor(max_workers=1)
    try:
        fut = ex.submit(_read_page, http, url, headers, timeout_s, deadline, max_bytes)
        page = fut.result(timeout=timeout_s)
    except FuturesTimeout:
        page = PageFetch(url=url, status="timeout", error=f"exceeded {timeout_s}s")
    except requests.Timeout as e:
        page = PageFetch(url=url, status="timeout", error=str(e))
    except requests.RequestException as e:
        page = PageFetch(url=url, status="error", error=str(e))
    finally:
        # don't wait for a stalled read; it stops at its own deadline
        ex.shutdown(wait=False)

    if not page.ok:
        logger.debug("Page fetch %s: %s (%s)", page.status, url, page.error)
    return page


def html_to_text(html: str) -> tuple[str, str]:
    """
    Extract (title, visible text) from HTML.
    """
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    title = soup.title.get_text(" ", strip=True) if soup.title else ""
    text = soup.get_text(" ", strip=True)
    return _clean_text(title), _clean_text(text)


def mailto_targets(html: str) -> list[str]:
    soup = BeautifulSoup(html, "lxml")
    out: list[str] = []
    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").strip()
        if not href.lower().startswith("mailto:"):
            continue
        # mailto:a@b.com?subject=Hi
        target = href[len("mailto:"):].split("?", 1)[0].strip()
        if target:
            out.append(target)
    return out
