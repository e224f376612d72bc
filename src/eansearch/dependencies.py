"""FastAPI dependencies for the facade."""

from functools import lru_cache

from eansearch.client import EANSearch
from eansearch.config import get_settings


@lru_cache
def get_client() -> EANSearch:
    """Return the process-wide ean-search client built from settings."""
    settings = get_settings()
    return EANSearch(settings.ean_search_token_str, timeout=settings.ean_search_timeout)
