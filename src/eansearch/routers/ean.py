"""EAN/barcode product lookup endpoints."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from eansearch.client import EANSearch
from eansearch.dependencies import get_client
from eansearch.exceptions import ResponseFormatError
from eansearch.models import (
    ChecksumResponse,
    CountryResponse,
    CreditsResponse,
    Product,
    ProductListResponse,
    ProductResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _upstream(fn: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking client call in a worker thread, mapping failures to 502."""
    try:
        return await asyncio.to_thread(fn, *args)
    except httpx.HTTPError as e:
        logger.warning("ean-search request failed: %s", e)
        raise HTTPException(status_code=502, detail=f"ean-search request failed: {e}") from e
    except ResponseFormatError as e:
        logger.warning("ean-search returned an unusable response: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e


def _page(products: list[Product], page: int) -> ProductListResponse:
    return ProductListResponse(
        page=page,
        products=[ProductResponse.from_product(p.ean or "", p) for p in products],
    )


@router.get("/ean/credits", response_model=CreditsResponse)
async def credits(client: EANSearch = Depends(get_client)) -> CreditsResponse:
    """Credits left on the API token, ``-1`` until a call has reported them."""
    return CreditsResponse(remaining=client.credits_remaining())


@router.get("/ean/search", response_model=ProductListResponse)
async def search(
    name: str = Query(..., description="Product name to search for"),
    page: int = Query(0, ge=0),
    similar: bool = Query(False, description="Use fuzzy name matching"),
    client: EANSearch = Depends(get_client),
) -> ProductListResponse:
    """Search products by name."""
    fn = client.similar_product_search if similar else client.product_search
    return _page(await _upstream(fn, name, page), page)


@router.get("/ean/prefix/{prefix}", response_model=ProductListResponse)
async def prefix_search(
    prefix: str,
    page: int = Query(0, ge=0),
    client: EANSearch = Depends(get_client),
) -> ProductListResponse:
    """List products whose barcode starts with *prefix*."""
    return _page(await _upstream(client.barcode_prefix_search, prefix, page), page)


@router.get("/ean/category/{category}", response_model=ProductListResponse)
async def category_search(
    category: str,
    name: str = Query("", description="Optional product name filter"),
    page: int = Query(0, ge=0),
    client: EANSearch = Depends(get_client),
) -> ProductListResponse:
    """Search products within a category, optionally filtered by name."""
    return _page(await _upstream(client.category_search, category, name, page), page)


@router.get("/ean/{ean}", response_model=ProductResponse)
async def lookup_ean(
    ean: str,
    lang: int = Query(1, description="ean-search language code"),
    client: EANSearch = Depends(get_client),
) -> ProductResponse:
    """Look up product data by EAN/barcode."""
    product = await _upstream(client.gtin_lookup, ean, lang)
    if product is None:
        raise HTTPException(status_code=404, detail=f"No product found for EAN {ean}")
    return ProductResponse.from_product(ean, product)


@router.get("/ean/{ean}/checksum", response_model=ChecksumResponse)
async def checksum(ean: str, client: EANSearch = Depends(get_client)) -> ChecksumResponse:
    """Verify the check digit of a barcode."""
    valid = await _upstream(client.verify_checksum, ean)
    return ChecksumResponse(ean=ean, valid=valid)


@router.get("/ean/{ean}/country", response_model=CountryResponse)
async def issuing_country(ean: str, client: EANSearch = Depends(get_client)) -> CountryResponse:
    """Look up the issuing country of a barcode."""
    country = await _upstream(client.issuing_country_lookup, ean)
    if not country:
        raise HTTPException(status_code=404, detail=f"No issuing country known for {ean}")
    return CountryResponse(ean=ean, issuing_country=country)


@router.get("/isbn/{isbn}", response_model=ProductResponse)
async def lookup_isbn(isbn: str, client: EANSearch = Depends(get_client)) -> ProductResponse:
    """Look up a book title by ISBN."""
    title = await _upstream(client.isbn_lookup, isbn)
    if title is None:
        raise HTTPException(status_code=404, detail=f"No book found for ISBN {isbn}")
    return ProductResponse(ean=isbn, name=title)
