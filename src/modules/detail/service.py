import logging

from src.modules.extractor.schemas import ListingDetail
from src.modules.extractor.service import ExtractorService, extractor_service
from src.modules.fetcher.service import FetcherService

logger = logging.getLogger(__name__)


class DetailScraper:
    """Fetches and parses one listing's detail page; never raises."""

    def __init__(
        self,
        fetcher: FetcherService,
        extractor: ExtractorService = extractor_service,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor

    async def scrape_detail(self, url: str) -> ListingDetail:
        try:
            html = await self._fetcher.fetch(url)
            return self._extractor.extract_detail_page(html)
        except Exception:
            logger.exception("Error scraping item details from %s", url)
            return ListingDetail()
