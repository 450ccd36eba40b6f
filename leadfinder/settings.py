import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()  # default search
# Also load from project root if present
_PKG_DIR = Path(__file__).resolve().parent
_ROOT_DIR = _PKG_DIR.parent
load_dotenv(_ROOT_DIR / ".env")

DEFAULT_USER_AGENT = "LeadFinder/1.0"
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


@dataclass(frozen=True)
class Settings:
    """
    Explicit configuration handed to the pipeline.
    `places_api_key=None` means no Google credential: the chain goes straight to OpenStreetMap.
    """

    places_api_key: Optional[str] = None
    page_timeout_s: float = 6.0
    provider_timeout_s: float = 20.0
    overpass_url: str = DEFAULT_OVERPASS_URL
    user_agent: str = DEFAULT_USER_AGENT
    default_region: str = "Australia"


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def load_settings() -> Settings:
    key = (os.getenv("GOOGLE_PLACES_API_KEY") or "").strip() or None
    return Settings(
        places_api_key=key,
        page_timeout_s=_float_env("LEADFINDER_PAGE_TIMEOUT_S", 6.0),
        provider_timeout_s=_float_env("LEADFINDER_PROVIDER_TIMEOUT_S", 20.0),
        overpass_url=os.getenv("LEADFINDER_OVERPASS_URL", DEFAULT_OVERPASS_URL),
        user_agent=os.getenv("LEADFINDER_USER_AGENT", DEFAULT_USER_AGENT),
        default_region=(os.getenv("LEADFINDER_DEFAULT_REGION") or "Australia").strip(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
