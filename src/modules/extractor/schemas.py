from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Prices travel as JSON numbers, not Decimal strings
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# A scraped attribute is a plain string, or a list when the field held
# several comma-separated values.
AttributeValue = str | list[str]


class ListingSummary(BaseModel):
    """A result card from a search-results page."""

    model_config = ConfigDict(frozen=True)

    link: str  # canonical absolute detail-page URL, the listing identity
    title: str
    image: str = ""


class ListingDetail(BaseModel):
    """Everything scraped from a listing's detail page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    price: Price | None = None
    price_text: str = Field(default="", alias="priceText")
    description: str = ""
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)


class PageExtraction(BaseModel):
    """What one search-results page yielded."""

    listings: list[ListingSummary] = Field(default_factory=list)
    has_recommended_listings: bool = False
    next_page_url: str | None = None
