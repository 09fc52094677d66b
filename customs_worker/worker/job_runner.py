import time

from customs_worker.database.repositories.queue_job_repository import QueueJobRepository
from customs_worker.logging.logger import Log
from customs_worker.ocr.exceptions import OcrJobFailedError
from customs_worker.ocr.models import OcrExtraction, OcrJobRequest
from customs_worker.ocr.processor import OcrProcessor


class OcrJobRunner:
    """Run one queued OCR job and keep its ledger row in step."""

    def __init__(self, processor: OcrProcessor, job_repo: QueueJobRepository) -> None:
        self._processor = processor
        self._job_repo = job_repo

    def run(
        self,
        job_id: str,
        request: OcrJobRequest,
        final_attempt: bool = True,
    ) -> OcrExtraction:
        """Process the job and record the outcome.

        Raises:
            OcrJobFailedError: when extraction did not succeed, so the broker
                can retry or record the failure.
        """
        Log.info(f"Running OCR job {job_id} for document {request.document_id}")
        started = time.monotonic()
        self._job_repo.mark_processing(job_id)

        extraction = self._processor.process(request, job_id)
        if extraction.success:
            duration_ms = int((time.monotonic() - started) * 1000)
            self._job_repo.mark_done(job_id, duration_ms)
            Log.info(f"OCR job {job_id} completed successfully")
            return extraction

        self._handle_failure(job_id, extraction.error or "OCR job failed", final_attempt)
        raise OcrJobFailedError(extraction.error or f"OCR job {job_id} failed")

    def _handle_failure(self, job_id: str, error: str, final_attempt: bool) -> None:
        """Mark failed on the last attempt, otherwise back to pending."""
        Log.error(f"OCR job {job_id} failed: {error}")
        if final_attempt:
            self._job_repo.mark_failed(job_id, error)
            Log.error(f"OCR job {job_id} permanently failed")
        else:
            self._job_repo.mark_retrying(job_id, error)
            Log.warning(f"OCR job {job_id} will be retried")
