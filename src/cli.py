"""
Run one scrape from the command line and print the result as JSON.

Usage:
    python -m src.cli "https://jo.opensooq.com/en/cars/cars-for-sale/honda/civic"
    python -m src.cli URL --concurrency 3 --output result.json
"""
import argparse
import asyncio
import json
import logging
import sys

from src.config.settings import settings
from src.modules.scrape_pipeline.service import ScrapePipelineService

logger = logging.getLogger("src.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape listings and summarize their prices.")
    parser.add_argument("url", help="search-results URL to crawl")
    parser.add_argument("--concurrency", type=int, default=settings.concurrency,
                        help="detail pages fetched at once")
    parser.add_argument("--output", "-o", help="write JSON here instead of stdout")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    pipeline = ScrapePipelineService(concurrency=args.concurrency)
    try:
        result = asyncio.run(pipeline.run(args.url))
    except Exception:
        logger.exception("Scrape failed for %s", args.url)
        return 1

    payload = json.dumps(result.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(payload)
        logger.info("Saved %d items to %s", result.total_items, args.output)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
