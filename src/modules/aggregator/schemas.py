from pydantic import BaseModel, ConfigDict, Field

from src.modules.extractor.schemas import ListingDetail, ListingSummary, Price


class ScrapedItem(ListingSummary, ListingDetail):
    """A listing card merged with its detail-page data."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_parts(cls, summary: ListingSummary, detail: ListingDetail) -> "ScrapedItem":
        return cls(**summary.model_dump(), **detail.model_dump())


class PriceStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_price: Price | None = Field(default=None, alias="minPrice")
    avg_price: Price | None = Field(default=None, alias="avgPrice")
    max_price: Price | None = Field(default=None, alias="maxPrice")
    count: int = 0


class ScrapeRun(BaseModel):
    """Result of one pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[ScrapedItem]
    min_price: Price | None = Field(default=None, alias="minPrice")
    avg_price: Price | None = Field(default=None, alias="avgPrice")
    max_price: Price | None = Field(default=None, alias="maxPrice")
    total_items: int = Field(alias="totalItems")
    outliers: list[str] = Field(default_factory=list)
