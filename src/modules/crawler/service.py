import asyncio
import logging
from dataclasses import dataclass, field

from src.config.settings import settings
from src.modules.extractor.schemas import ListingSummary, PageExtraction
from src.modules.extractor.service import ExtractorService, extractor_service
from src.modules.fetcher.service import FetcherService, Sleep

logger = logging.getLogger(__name__)


@dataclass
class CrawlState:
    """Mutable state of one pagination run."""

    seen_links: set[str] = field(default_factory=set)
    listings: list[ListingSummary] = field(default_factory=list)
    pages_fetched: int = 0

    def merge(self, extraction: PageExtraction) -> int:
        """Add unseen listings in page order; returns how many were new."""
        added = 0
        for listing in extraction.listings:
            if listing.link in self.seen_links:
                continue
            self.seen_links.add(listing.link)
            self.listings.append(listing)
            added += 1
        return added


class PaginationCrawler:
    """Walks search-results pages from a seed URL, collecting unique listings.

    Stops when a page contains the "Recommended Listings" marker or has no
    usable next-page arrow. Fetch errors propagate and abort the crawl.
    """

    def __init__(
        self,
        fetcher: FetcherService,
        extractor: ExtractorService = extractor_service,
        inter_page_delay: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._inter_page_delay = (
            settings.inter_page_delay if inter_page_delay is None else inter_page_delay
        )
        self._sleep = sleep

    async def crawl(self, seed_url: str, state: CrawlState | None = None) -> list[ListingSummary]:
        state = state if state is not None else CrawlState()
        page_url: str | None = seed_url

        while page_url:
            logger.info("Fetching page %d: %s", state.pages_fetched + 1, page_url)
            html = await self._fetcher.fetch(page_url)
            state.pages_fetched += 1

            extraction = self._extractor.extract_listing_page(html, page_url)
            added = state.merge(extraction)
            logger.info(
                "Page %d: found %d items, %d new (total: %d)",
                state.pages_fetched, len(extraction.listings), added, len(state.listings),
            )

            if extraction.has_recommended_listings:
                logger.info("Hit recommended listings, stopping pagination")
                break

            page_url = extraction.next_page_url
            if page_url:
                await self._sleep(self._inter_page_delay)

        logger.info(
            "Total listings found across %d page(s): %d",
            state.pages_fetched, len(state.listings),
        )
        return state.listings
