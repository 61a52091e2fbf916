from pydantic import BaseModel, Field


class ScrapeRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Search-results URL to crawl")


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
