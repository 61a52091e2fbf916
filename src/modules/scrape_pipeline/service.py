import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from src.config.settings import settings
from src.modules.aggregator.schemas import ScrapedItem, ScrapeRun
from src.modules.aggregator.service import AggregatorService, aggregator_service
from src.modules.batching.service import run_batches
from src.modules.crawler.service import CrawlState, PaginationCrawler
from src.modules.detail.service import DetailScraper
from src.modules.extractor.schemas import ListingSummary
from src.modules.fetcher.service import FetcherService, Sleep, create_client
from src.modules.scrape_pipeline.composer import PipelineComposer

logger = logging.getLogger(__name__)


@dataclass
class ScrapeContext:
    """Everything one run accumulates; never shared between runs."""

    seed_url: str
    fetcher: FetcherService
    crawl_state: CrawlState = field(default_factory=CrawlState)
    items: list[ScrapedItem] = field(default_factory=list)
    result: ScrapeRun | None = None


class ScrapePipelineService:
    def __init__(
        self,
        concurrency: int | None = None,
        inter_batch_delay: float | None = None,
        inter_page_delay: float | None = None,
        client_factory: Callable[[], httpx.AsyncClient] = create_client,
        aggregator: AggregatorService = aggregator_service,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._concurrency = settings.concurrency if concurrency is None else concurrency
        self._inter_batch_delay = (
            settings.inter_batch_delay if inter_batch_delay is None else inter_batch_delay
        )
        self._inter_page_delay = inter_page_delay
        self._client_factory = client_factory
        self._aggregator = aggregator
        self._sleep = sleep

        self._composer: PipelineComposer[ScrapeContext] = PipelineComposer()
        self._composer.add_step("crawl", self._crawl)
        self._composer.add_step("scrape_details", self._scrape_details)
        self._composer.add_step("aggregate", self._aggregate)

    async def _crawl(self, context: ScrapeContext) -> None:
        crawler = PaginationCrawler(
            context.fetcher,
            inter_page_delay=self._inter_page_delay,
            sleep=self._sleep,
        )
        await crawler.crawl(context.seed_url, context.crawl_state)

    async def _scrape_details(self, context: ScrapeContext) -> None:
        scraper = DetailScraper(context.fetcher)
        listings = context.crawl_state.listings
        total = len(listings)

        async def scrape_one(entry: tuple[int, ListingSummary]) -> ScrapedItem:
            index, listing = entry
            logger.info("Scraping item %d/%d: %s", index + 1, total, listing.link)
            detail = await scraper.scrape_detail(listing.link)
            return ScrapedItem.from_parts(listing, detail)

        context.items = await run_batches(
            list(enumerate(listings)),
            scrape_one,
            concurrency=self._concurrency,
            inter_batch_delay=self._inter_batch_delay,
            sleep=self._sleep,
        )

    async def _aggregate(self, context: ScrapeContext) -> None:
        context.result = self._aggregator.aggregate(context.items)
        logger.info(
            "Filtered to %d items with prices (of %d scraped)",
            context.result.total_items, len(context.items),
        )

    async def run(self, seed_url: str) -> ScrapeRun:
        """Crawl ``seed_url``, scrape every listing found and aggregate prices.

        Raises ``FetchError`` when a search-results page cannot be fetched;
        detail-page failures only cost that listing its price.
        """
        logger.info("Scraping search results from: %s", seed_url)
        async with self._client_factory() as client:
            fetcher = FetcherService(client, sleep=self._sleep)
            context = await self._composer.run(ScrapeContext(seed_url=seed_url, fetcher=fetcher))
        return context.result


scrape_pipeline_service = ScrapePipelineService()
