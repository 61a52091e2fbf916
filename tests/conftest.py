import pytest

SITE = "https://jo.opensooq.com"


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeFetcher:
    """Serves canned HTML by URL; values that are exceptions get raised."""

    def __init__(self, pages: dict[str, object]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    async def fetch(self, url: str) -> str:
        self.requested.append(url)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        return page


def card(link: str, title: str, image: str = "") -> str:
    """One result card in the wrapped-anchor layout the site serves."""
    gallery = (
        f'<div class="image-gallery"><div class="image-gallery-image">'
        f'<img src="{image}"></div></div>'
        if image
        else ""
    )
    return (
        f'<a class="postListItem" href="{link}">{gallery}'
        f'<div class="postListItemData"><h2>{title}</h2><span>Amman</span></div></a>'
    )


def search_page(
    cards: list[str],
    recommended: list[str] | None = None,
    next_href: str | None = None,
    next_disabled: bool = False,
    container_id: str = "serpMainContent",
) -> str:
    body = "".join(cards)
    if recommended is not None:
        body += "<h2>Recommended Listings</h2>" + "".join(recommended)
    pagination = ""
    if next_href is not None:
        cls = ' class="disabled"' if next_disabled else ""
        pagination = (
            f'<div id="pagination"><a data-id="nextPageArrow"{cls} href="{next_href}">'
            f"Next</a></div>"
        )
    return (
        f'<html><body><div id="{container_id}">{body}</div>{pagination}</body></html>'
    )


def detail_page(price_text: str, attributes: str = "", description: str = "Clean car") -> str:
    return f"""
    <html><body>
      <div data-id="post_price">{price_text}</div>
      <div data-id="postViewDescription"> {description} </div>
      <ul>{attributes}</ul>
    </body></html>
    """


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()
