"""Tests for EAN router endpoints."""

import httpx
import pytest

from eansearch.app import app
from eansearch.client import EANSearch
from eansearch.dependencies import get_client

PRODUCT = {
    "ean": "5099750442227",
    "name": "Michael Jackson - Thriller",
    "categoryId": "45",
    "categoryName": "Music",
    "issuingCountry": "UK",
}


@pytest.mark.anyio
async def test_ean_lookup(client, upstream):
    upstream.queue(json=[PRODUCT], headers={"X-Credits-Remaining": "99"})
    response = await client.get("/api/ean/5099750442227")
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "ean": "5099750442227",
        "name": "Michael Jackson - Thriller",
        "category_id": "45",
        "category_name": "Music",
        "issuing_country": "UK",
        "source": "ean-search",
    }

    credits = await client.get("/api/ean/credits")
    assert credits.json() == {"remaining": 99}


@pytest.mark.anyio
async def test_ean_lookup_passes_language(client, upstream):
    upstream.queue(json=[PRODUCT])
    await client.get("/api/ean/5099750442227", params={"lang": 8})
    assert upstream.last_params["language"] == "8"


@pytest.mark.anyio
async def test_ean_lookup_not_found(client, upstream):
    upstream.queue(json=[])
    response = await client.get("/api/ean/4006381333932")
    assert response.status_code == 404


@pytest.mark.anyio
async def test_credits_unknown(client):
    response = await client.get("/api/ean/credits")
    assert response.status_code == 200
    assert response.json() == {"remaining": -1}


@pytest.mark.anyio
async def test_search(client, upstream):
    upstream.queue(json={"productlist": [PRODUCT]})
    response = await client.get("/api/ean/search", params={"name": "thriller", "page": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["page"] == 1
    assert [p["ean"] for p in data["products"]] == ["5099750442227"]
    assert upstream.last_params["op"] == "product-search"


@pytest.mark.anyio
async def test_similar_search(client, upstream):
    upstream.queue(json={"productlist": []})
    response = await client.get("/api/ean/search", params={"name": "thriler", "similar": "true"})
    assert response.status_code == 200
    assert response.json() == {"page": 0, "products": []}
    assert upstream.last_params["op"] == "similar-product-search"


@pytest.mark.anyio
async def test_search_requires_name(client):
    response = await client.get("/api/ean/search")
    assert response.status_code == 422


@pytest.mark.anyio
async def test_prefix_search(client, upstream):
    upstream.queue(json=[PRODUCT])
    response = await client.get("/api/ean/prefix/509975044")
    assert response.status_code == 200
    assert len(response.json()["products"]) == 1
    assert upstream.last_params["prefix"] == "509975044"


@pytest.mark.anyio
async def test_category_search(client, upstream):
    upstream.queue(json={"productlist": [PRODUCT]})
    response = await client.get("/api/ean/category/45", params={"name": "jazz"})
    assert response.status_code == 200
    assert upstream.last_params["category"] == "45"
    assert upstream.last_params["name"] == "jazz"


@pytest.mark.anyio
async def test_checksum(client, upstream):
    upstream.queue(json=[{"ean": "4006381333931", "valid": "1"}])
    response = await client.get("/api/ean/4006381333931/checksum")
    assert response.json() == {"ean": "4006381333931", "valid": True}


@pytest.mark.anyio
async def test_country(client, upstream):
    upstream.queue(json=[{"ean": "4006381333931", "issuingCountry": "DE"}])
    response = await client.get("/api/ean/4006381333931/country")
    assert response.json() == {"ean": "4006381333931", "issuing_country": "DE"}


@pytest.mark.anyio
async def test_country_unknown(client, upstream):
    upstream.queue(json=[])
    response = await client.get("/api/ean/0000000000000/country")
    assert response.status_code == 404


@pytest.mark.anyio
async def test_isbn_lookup(client, upstream):
    upstream.queue(json=[{"ean": "9780201379624", "name": "Design Patterns"}])
    response = await client.get("/api/isbn/9780201379624")
    assert response.status_code == 200
    assert response.json()["name"] == "Design Patterns"


@pytest.mark.anyio
async def test_isbn_not_found(client, upstream):
    upstream.queue(json=[])
    response = await client.get("/api/isbn/9780201379624")
    assert response.status_code == 404


@pytest.mark.anyio
async def test_malformed_upstream_response_is_bad_gateway(client, upstream):
    upstream.queue(text="{not json")
    response = await client.get("/api/ean/5099750442227")
    assert response.status_code == 502


@pytest.mark.anyio
async def test_upstream_unreachable_is_bad_gateway():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    eans = EANSearch("t", transport=httpx.MockTransport(refuse))
    app.dependency_overrides[get_client] = lambda: eans
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/ean/5099750442227")
    finally:
        app.dependency_overrides.clear()
        eans.close()
    assert response.status_code == 502


@pytest.mark.anyio
async def test_search_name_with_tab(client, upstream):
    upstream.queue(json={"productlist": [PRODUCT]})
    response = await client.get("/api/ean/search", params={"name": "coffee\tmug"})
    assert response.status_code == 200
    assert len(response.json()["products"]) == 1
    assert upstream.last_params["name"] == "coffee\tmug"
