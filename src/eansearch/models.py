"""Pydantic models for ean-search results and the HTTP facade responses."""

from pydantic import BaseModel, ConfigDict


class Product(BaseModel):
    """A product record as returned by the ean-search API.

    Only the commonly returned fields are declared; anything else the
    service sends is kept as an extra attribute.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    ean: str | None = None
    name: str | None = None
    categoryId: str | None = None
    categoryName: str | None = None
    issuingCountry: str | None = None


class ProductResponse(BaseModel):
    """Product data from an EAN/barcode lookup."""

    ean: str
    name: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    issuing_country: str | None = None
    source: str = "ean-search"

    @classmethod
    def from_product(cls, ean: str, product: Product) -> "ProductResponse":
        return cls(
            ean=product.ean or ean,
            name=product.name,
            category_id=product.categoryId,
            category_name=product.categoryName,
            issuing_country=product.issuingCountry,
        )


class ProductListResponse(BaseModel):
    """One page of search results."""

    page: int = 0
    products: list[ProductResponse] = []


class ChecksumResponse(BaseModel):
    """Result of a checksum verification."""

    ean: str
    valid: bool


class CountryResponse(BaseModel):
    """Issuing country of a barcode."""

    ean: str
    issuing_country: str


class CreditsResponse(BaseModel):
    """API credits left, ``-1`` when no call has reported them yet."""

    remaining: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
