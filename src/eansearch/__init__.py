"""Client library for the ean-search.org barcode database API."""

from eansearch.client import EANSearch
from eansearch.exceptions import EANSearchError, ResponseFormatError
from eansearch.models import Product

__version__ = "0.1.0"

__all__ = ["EANSearch", "EANSearchError", "Product", "ResponseFormatError", "__version__"]
