import time
import unicodedata

from customs_worker.config.settings import Settings
from customs_worker.database.connection import is_pool_initialized
from customs_worker.database.repositories.keyword_group_repository import KeywordGroupRepository
from customs_worker.http.client import CustomsHttpClient
from customs_worker.http.exceptions import NetworkError
from customs_worker.logging.logger import Log
from customs_worker.ocr.keywords import KeywordGroupSource
from customs_worker.ocr.models import OcrExtraction, OcrJobRequest
from customs_worker.ocr.text_mining import (
    compute_confidence,
    extract_hs_codes,
    extract_product_names,
)
from customs_worker.pdf.base import BasePdfExtractor
from customs_worker.pdf.exceptions import PdfExtractionError
from customs_worker.pdf.factory import PdfExtractorFactory


class OcrProcessor:
    """Mines one document for HS codes and product names.

    Uses the request's ``raw_text`` when present; otherwise downloads the PDF
    at ``file_url`` and extracts its text. Download and extraction failures
    are reported as ``success=False`` rather than raised.
    """

    def __init__(
        self,
        keyword_source: KeywordGroupSource,
        http_client: CustomsHttpClient | None = None,
        pdf_extractor: BasePdfExtractor | None = None,
    ) -> None:
        self._keyword_source = keyword_source
        self._http_client = http_client
        self._pdf_extractor = pdf_extractor

    def process(self, request: OcrJobRequest, job_id: str) -> OcrExtraction:
        started = time.monotonic()
        Log.info(f"OCR job {job_id}: processing document {request.document_id}")
        try:
            text = self._resolve_text(request)
        except (NetworkError, PdfExtractionError) as exc:
            Log.error(f"OCR job {job_id} failed for document {request.document_id}: {exc}")
            return OcrExtraction(
                success=False,
                job_id=job_id,
                document_id=request.document_id,
                file_name=request.file_name,
                error=str(exc),
            )

        hs_codes = extract_hs_codes(text)
        product_names = extract_product_names(text, self._keyword_source.groups())
        word_count = len(text.split())
        extraction = OcrExtraction(
            success=True,
            job_id=job_id,
            document_id=request.document_id,
            file_name=request.file_name,
            hs_codes=frozenset(hs_codes),
            product_names=tuple(product_names),
            confidence=compute_confidence(len(hs_codes), len(product_names), word_count),
            text_length=len(text),
            word_count=word_count,
        )
        Log.info(
            f"OCR job {job_id} done in {int((time.monotonic() - started) * 1000)}ms: "
            f"{len(hs_codes)} HS codes, {len(product_names)} product names"
        )
        return extraction

    def _resolve_text(self, request: OcrJobRequest) -> str:
        raw = (request.raw_text or "").strip()
        if raw:
            return unicodedata.normalize("NFC", raw)
        if self._http_client is None or self._pdf_extractor is None:
            raise PdfExtractionError(
                f"No text supplied for document {request.document_id} and PDF download is disabled"
            )
        pdf_bytes = self._http_client.get_bytes(request.file_url)
        Log.info(f"Downloaded {len(pdf_bytes)} bytes from {request.file_url}")
        return self._pdf_extractor.extract(pdf_bytes).strip()


def build_ocr_processor(
    settings: Settings,
    http_client: CustomsHttpClient | None = None,
) -> OcrProcessor:
    """Build a processor with DB-backed keyword groups when the pool is open."""
    repository = KeywordGroupRepository()
    keyword_source = KeywordGroupSource(
        loader=repository.list_keyword_groups if is_pool_initialized() else None,
    )
    return OcrProcessor(
        keyword_source=keyword_source,
        http_client=http_client or CustomsHttpClient.from_settings(settings),
        pdf_extractor=PdfExtractorFactory.create(settings),
    )
