from enum import Enum


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    HTTP_STATUS = "http_status"


class FetchError(Exception):
    """Raised when a page could not be fetched after all retries."""

    def __init__(
        self,
        url: str,
        kind: FetchErrorKind,
        status_code: int | None = None,
        detail: str = "",
    ) -> None:
        self.url = url
        self.kind = kind
        self.status_code = status_code
        if kind is FetchErrorKind.HTTP_STATUS:
            message = f"HTTP {status_code} fetching {url}"
        else:
            message = f"Network error fetching {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
