import logging
import re
from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from typing import TypeVar
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup, Tag

from src.modules.extractor.schemas import (
    AttributeValue,
    ListingDetail,
    ListingSummary,
    PageExtraction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Search-results page
RESULTS_CONTAINER_ID = "serpMainContent"
RESULTS_CONTAINER_ID_TOKEN = "serp"
RECOMMENDED_MARKER = "Recommended Listings"
ITEM_SELECTOR = ".postListItemData"
TITLE_SELECTOR = "h2, h3, .postTitle"
GALLERY_IMAGE_SELECTOR = "div.image-gallery-image img"
POST_CLASS_TOKEN = "post"
NEXT_PAGE_SELECTOR = '#pagination [data-id="nextPageArrow"]'
TITLE_FALLBACK_LENGTH = 100

# Detail page
PRICE_SELECTOR = '[data-id="post_price"]'
DESCRIPTION_SELECTOR = '[data-id="postViewDescription"]'
FIELD_SELECTOR = '[data-id^="singeInfoField_"]'
FULL_ROW_CLASS = "fullRow"
FULL_ROW_ITEM_SELECTOR = "li.fullRow"
WIDE_VALUE_SELECTOR = "p.width-75"
BOLD_VALUE_SELECTOR = "a.bold, span.bold"
EXCLUDED_FULL_ROW_LABELS = frozenset({"VIN Number"})

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")


def first_match(rules: Iterable[Callable[[], T | None]]) -> T | None:
    """Evaluate fallback rules in priority order and return the first non-empty result."""
    for rule in rules:
        result = rule()
        if result:
            return result
    return None


def clean_text(s: str | None) -> str:
    if not s:
        return ""
    return re.sub(r"\s+", " ", s).strip()


def parse_price(price_text: str | None) -> Decimal | None:
    """Parse a display price such as ``"1,234 JOD"`` into ``Decimal("1234")``.

    Everything except digits and dots is discarded first; an empty or
    malformed remainder (``""``, ``"1.2.3"``) yields ``None``.
    """
    cleaned = _NON_PRICE_CHARS.sub("", price_text or "")
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def split_multi_value(text: str) -> AttributeValue:
    """``"Leather, Sunroof"`` -> ``["Leather", "Sunroof"]``; ``"Leather"`` stays a string."""
    pieces = [piece.strip() for piece in text.split(",") if piece.strip()]
    if len(pieces) > 1:
        return pieces
    return text.strip()


def canonical_url(href: str, base_url: str) -> str:
    absolute, _fragment = urldefrag(urljoin(base_url, href.strip()))
    return absolute


def _text(el: Tag | None) -> str:
    if el is None:
        return ""
    return el.get_text().strip()


def _attr(el: Tag | None, name: str) -> str:
    if el is None:
        return ""
    value = el.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _has_class(el: Tag, name: str) -> bool:
    return name in (el.get("class") or [])


def _post_container(item: Tag) -> Tag:
    for parent in item.parents:
        if any(POST_CLASS_TOKEN in cls for cls in parent.get("class") or []):
            return parent
    grandparent = item.parent.parent if item.parent is not None else None
    return grandparent or item.parent or item


class ExtractorService:
    """Reads listing data out of search-results and detail page markup.

    Every lookup degrades to an empty value when the expected markup is
    missing; nothing here raises on unexpected HTML.
    """

    # ── Search-results pages ────────────────────────────────────

    def extract_listing_page(self, html: str, base_url: str) -> PageExtraction:
        soup = BeautifulSoup(html, "lxml")

        container = first_match([
            lambda: soup.find(id=RESULTS_CONTAINER_ID),
            lambda: soup.find(id=lambda v: bool(v) and RESULTS_CONTAINER_ID_TOKEN in v),
        ])

        markup = container.decode_contents() if container is not None else ""
        marker_at = markup.find(RECOMMENDED_MARKER)
        has_recommended = marker_at != -1
        if has_recommended:
            markup = markup[:marker_at]

        listings: list[ListingSummary] = []
        if markup:
            results = BeautifulSoup(markup, "lxml")
            for item in results.select(ITEM_SELECTOR):
                summary = self._parse_listing_item(item, base_url)
                if summary is not None:
                    listings.append(summary)

        return PageExtraction(
            listings=listings,
            has_recommended_listings=has_recommended,
            next_page_url=self._next_page_url(soup, base_url),
        )

    @staticmethod
    def _parse_listing_item(item: Tag, base_url: str) -> ListingSummary | None:
        href = first_match([
            lambda: _attr(item.select_one("a[href]"), "href"),
            lambda: _attr(item.find_parent("a", href=True), "href"),
        ])
        if not href:
            return None

        title = first_match([
            lambda: clean_text(_text(item.select_one(TITLE_SELECTOR))),
            lambda: clean_text(item.get_text(" "))[:TITLE_FALLBACK_LENGTH],
        ])

        post = _post_container(item)
        image = first_match([
            lambda: _attr(post.select_one(GALLERY_IMAGE_SELECTOR), "src"),
            lambda: _attr(post.select_one("img"), "src"),
        ])

        return ListingSummary(
            link=canonical_url(href, base_url),
            title=title or "",
            image=urljoin(base_url, image) if image else "",
        )

    @staticmethod
    def _next_page_url(soup: BeautifulSoup, base_url: str) -> str | None:
        arrow = soup.select_one(NEXT_PAGE_SELECTOR)
        if arrow is None or _has_class(arrow, "disabled"):
            return None
        href = _attr(arrow, "href")
        if not href:
            return None
        return canonical_url(href, base_url)

    # ── Detail pages ────────────────────────────────────────────

    def extract_detail_page(self, html: str) -> ListingDetail:
        soup = BeautifulSoup(html, "lxml")

        price_text = _text(soup.select_one(PRICE_SELECTOR))
        description = _text(soup.select_one(DESCRIPTION_SELECTOR))

        return ListingDetail(
            price=parse_price(price_text),
            price_text=price_text,
            description=description,
            attributes=self._parse_attributes(soup),
        )

    @staticmethod
    def _parse_attributes(soup: BeautifulSoup) -> dict[str, AttributeValue]:
        attributes: dict[str, AttributeValue] = {}

        for field in soup.select(FIELD_SELECTOR):
            label = _text(field.find("p"))
            wide = field.select_one(WIDE_VALUE_SELECTOR)
            if _has_class(field, FULL_ROW_CLASS) or wide is not None:
                value = _text(wide)
                if label and value:
                    attributes[label] = split_multi_value(value)
            else:
                value = _text(field.select_one(BOLD_VALUE_SELECTOR))
                if label and value:
                    attributes[label] = value

        # Some layouts render full-row fields outside the data-id fields
        for row in soup.select(FULL_ROW_ITEM_SELECTOR):
            label = _text(row.find("p"))
            value = _text(row.select_one(WIDE_VALUE_SELECTOR))
            if not label or not value or label in attributes:
                continue
            if label in EXCLUDED_FULL_ROW_LABELS:
                continue
            attributes[label] = split_multi_value(value)

        return attributes


extractor_service = ExtractorService()
