class ScraperError(Exception):
    """Base exception for all scraper-related errors."""


class PageFetchError(ScraperError):
    """Raised when a list page cannot be fetched or parsed."""

    def __init__(self, page: int, message: str) -> None:
        super().__init__(f"page {page}: {message}")
        self.page = page


class DocumentParseError(ScraperError):
    """Raised when a detail page does not yield a document number."""
