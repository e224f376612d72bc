"""ean-search.org API client.

Wraps the barcode database REST API at https://api.ean-search.org/api.
Get an access token from https://www.ean-search.org/ean-database-api.html.

Every public method builds the operation's query parameters, hands them to
:meth:`EANSearch._api_call` and unwraps the decoded body into a
:class:`~eansearch.models.Product`, a list of them, a string or a bool.
"""

import json
import logging
import threading
import xml.etree.ElementTree as ET
from typing import Any

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from eansearch.encoding import build_query, form_encode
from eansearch.exceptions import ResponseFormatError
from eansearch.models import Product

logger = logging.getLogger(__name__)

BASE_URL = "https://api.ean-search.org/api"
MAX_API_TRIES = 3
RETRY_PAUSE = 1.0  # seconds between rate-limited attempts
DEFAULT_TIMEOUT = 180.0
UNKNOWN_CREDITS = -1
CREDITS_HEADER = "X-Credits-Remaining"


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.status_code == 429


def _last_response(retry_state: RetryCallState) -> httpx.Response:
    """Return the final rate-limited response once attempts are used up."""
    if retry_state.outcome is None:
        raise RuntimeError("retry finished without an attempt outcome")
    return retry_state.outcome.result()


def _entries(data: Any) -> list[dict]:
    """Return the result entries of a decoded body, dropping error entries."""
    if isinstance(data, dict):
        data = data.get("productlist") or []
    if not isinstance(data, list):
        return []
    entries: list[dict] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if "error" in item:
            logger.info("ean-search reported: %s", item["error"])
            continue
        entries.append(item)
    return entries


def _first(data: Any) -> dict | None:
    entries = _entries(data)
    return entries[0] if entries else None


def _products(data: Any) -> list[Product]:
    return [Product.model_validate(item) for item in _entries(data)]


class EANSearch:
    """Synchronous client for the ean-search.org API.

    One instance holds the access token, the request timeout and the last
    credits count reported by the service. An instance may be shared between
    threads: the HTTP client is created once under a lock, and the credits
    counter simply holds whichever response was handled last.

    Args:
        token:     API access token.
        timeout:   Request timeout in seconds.
        transport: Optional ``httpx`` transport for the underlying client.
    """

    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self.timeout = timeout
        self.remaining = UNKNOWN_CREDITS
        self._transport = transport
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    def set_timeout(self, seconds: float) -> None:
        """Change the timeout used by subsequent requests."""
        self.timeout = seconds

    def get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(transport=self._transport)
            return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "EANSearch":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def gtin_lookup(self, ean: str, lang: int = 1) -> Product | None:
        """Look up a product by EAN/GTIN. Returns ``None`` when unknown."""
        entry = _first(self._api_call("barcode-lookup", {"ean": ean, "language": lang}))
        return Product.model_validate(entry) if entry else None

    def upc_lookup(self, upc: str, lang: int = 1) -> Product | None:
        """Look up a product by UPC. Returns ``None`` when unknown."""
        entry = _first(self._api_call("barcode-lookup", {"upc": upc, "language": lang}))
        return Product.model_validate(entry) if entry else None

    def isbn_lookup(self, isbn: str) -> str | None:
        """Return the book title for *isbn*, or ``None`` when unknown."""
        entry = _first(self._api_call("barcode-lookup", {"isbn": isbn}))
        if entry is None:
            return None
        return entry.get("name")

    def verify_checksum(self, ean: str) -> bool:
        """Ask the service whether the check digit of *ean* is correct."""
        entry = _first(self._api_call("verify-checksum", {"ean": ean}))
        if entry is None:
            return False
        return str(entry.get("valid")) == "1"

    def issuing_country_lookup(self, ean: str) -> str | None:
        """Return the issuing country code of *ean*'s prefix."""
        entry = _first(self._api_call("issuing-country", {"ean": ean}))
        if entry is None:
            return None
        return entry.get("issuingCountry")

    def barcode_image(self, ean: str, width: int = 102, height: int = 50) -> str:
        """Return a PNG image of the barcode, base64 encoded."""
        body = self._api_call("barcode-image", {"ean": ean, "width": width, "height": height}, fmt="xml")
        if not isinstance(body, str) or not body:
            raise ResponseFormatError(f"No barcode image returned for {ean}")
        try:
            root = ET.fromstring(body)
        except ET.ParseError as e:
            raise ResponseFormatError(f"Malformed XML for barcode image {ean}: {e}") from e
        node = root.find("product/barcode")
        if node is None or not node.text:
            raise ResponseFormatError(f"No product/barcode element for {ean}")
        return node.text.strip()

    def credits_remaining(self) -> int:
        """Credits left as last reported by the service, ``-1`` if unknown."""
        return self.remaining

    # -----------------------------------------------------------------------
    # Searches (always return a list, possibly empty)
    # -----------------------------------------------------------------------

    def barcode_prefix_search(self, prefix: str, page: int = 0) -> list[Product]:
        return _products(self._api_call("barcode-prefix-search", {"prefix": prefix, "page": page}))

    def product_search(self, name: str, page: int = 0) -> list[Product]:
        return _products(self._api_call("product-search", {"name": name, "page": page}))

    def similar_product_search(self, name: str, page: int = 0) -> list[Product]:
        """Like :meth:`product_search`, but matches names fuzzily."""
        return _products(self._api_call("similar-product-search", {"name": name, "page": page}))

    def category_search(self, category: str, name: str = "", page: int = 0) -> list[Product]:
        """Search within a category, optionally filtered by product name."""
        params = {"category": category, "name": name, "page": page}
        return _products(self._api_call("category-search", params))

    # -----------------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------------

    def _api_call(self, op: str, params: dict[str, Any], fmt: str = "json") -> Any:
        """Issue one API request and return the decoded body.

        Rate-limited (429) requests are retried up to ``MAX_API_TRIES``
        attempts in total with a fixed pause; after that the last response is
        used as is.  A 400 response short-circuits to ``{}`` without reading
        the body.  For ``fmt="xml"`` the raw text is returned.
        """
        url = f"{BASE_URL}?format={fmt}&token={form_encode(self.token)}&op={op}"
        query = build_query(params)
        if query:
            url = f"{url}&{query}"
        retrying = Retrying(
            stop=stop_after_attempt(MAX_API_TRIES),
            wait=wait_fixed(RETRY_PAUSE),
            retry=retry_if_result(_is_rate_limited),
            retry_error_callback=_last_response,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        logger.debug("ean-search request op=%s", op)
        response: httpx.Response = retrying(self._get, url)

        if response.status_code == 400:
            logger.warning("ean-search rejected op=%s as a bad request", op)
            return {}

        credits = response.headers.get(CREDITS_HEADER)
        if credits is not None:
            try:
                self.remaining = int(credits)
            except ValueError:
                logger.warning("Ignoring non-numeric %s header: %r", CREDITS_HEADER, credits)

        if fmt == "xml":
            return response.text
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise ResponseFormatError(
                f"Could not decode ean-search response for op={op} "
                f"(HTTP {response.status_code}): {e}"
            ) from e

    def _get(self, url: str) -> httpx.Response:
        return self.get_client().get(url, timeout=self.timeout)
