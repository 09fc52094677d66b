import unicodedata
from abc import ABC, abstractmethod
from collections.abc import Iterable


class BasePdfExtractor(ABC):
    """Contract for PDF text extraction used when a job carries no raw text."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content (a downloaded customs circular).

        Returns:
            NFC-normalized text, pages separated by newlines.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """

    @staticmethod
    def join_pages(pages: Iterable[str]) -> str:
        """Join page texts and NFC-normalize so Vietnamese diacritics compare equal."""
        text = "\n".join(page.strip() for page in pages if page and page.strip())
        return unicodedata.normalize("NFC", text)
