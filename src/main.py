import logging

import uvicorn
from fastapi import FastAPI

from src.config.settings import settings
from src.modules.scrape.router import router as scrape_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Listings Price Analyzer")

# API routes
app.include_router(scrape_router, prefix="/api", tags=["scrape"])


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    logger.info("Serving on http://%s:%d", settings.app_host, settings.app_port)
    uvicorn.run("src.main:app", host=settings.app_host, port=settings.app_port)
