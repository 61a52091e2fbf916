import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.config.settings import settings
from src.modules.aggregator.schemas import ScrapeRun
from src.modules.scrape.schemas import ErrorResponse, ScrapeRequest
from src.modules.scrape_pipeline.service import ScrapePipelineService, scrape_pipeline_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_scrape_pipeline() -> ScrapePipelineService:
    return scrape_pipeline_service


def is_target_url(url: str, domain: str | None = None) -> bool:
    domain = (domain or settings.target_domain).lower()
    host = (urlparse(url).hostname or "").lower()
    return host == domain or host.endswith(f".{domain}")


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/scrape",
    response_model=ScrapeRun,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def scrape(
    request: ScrapeRequest,
    pipeline: ScrapePipelineService = Depends(get_scrape_pipeline),
):
    if not is_target_url(request.url):
        return _error(400, "Please provide a valid OpenSooq URL")

    logger.info("Received scrape request for: %s", request.url)
    try:
        return await pipeline.run(request.url)
    except Exception as exc:
        logger.exception("Scrape failed for %s", request.url)
        return _error(500, "Failed to scrape the URL", str(exc) or type(exc).__name__)
