"""Single entry point for OCR work: queue it when a broker is up, else run inline.

Per call:
1. Validate the request (no side effects before this).
2. Probe the broker. The probe runs on every call; availability is never cached.
3. Not ready: run the OCR processor in-process and return ``processed``.
   The broker is never touched and the ledger is never written.
4. Ready: mint one job id, write the ledger row as ``pending``, then submit
   to the broker under that same id and return ``queued``.

A ledger write failure propagates and nothing is submitted. A submit that
fails after the ledger write marks the row failed and falls back to step 3
with the same job id.
"""

import threading
import uuid
from collections.abc import Generator
from contextlib import contextmanager

from customs_worker.config.settings import Settings
from customs_worker.database.repositories.queue_job_repository import QueueJobRepository
from customs_worker.logging.logger import Log
from customs_worker.ocr.models import OCR_JOB_TYPE, OcrJobRequest, OcrJobResult
from customs_worker.ocr.processor import OcrProcessor, build_ocr_processor
from customs_worker.queue.backend import BrokerUnavailableError, JobLedger, QueueBackend
from customs_worker.queue.redis_backend import RedisQueueBackend


def new_job_id() -> str:
    return str(uuid.uuid4())


def new_inline_job_id() -> str:
    return f"inline-{uuid.uuid4()}"


class OcrJobDispatcher:
    """Routes OCR requests to the broker or to the inline processor."""

    def __init__(
        self,
        backend: QueueBackend,
        ledger: JobLedger,
        processor: OcrProcessor,
    ) -> None:
        self._backend = backend
        self._ledger = ledger
        self._processor = processor
        self._in_flight = 0
        self._idle = threading.Condition()

    def enqueue_ocr_job(self, request: OcrJobRequest) -> OcrJobResult:
        """Queue or process ``request``.

        Raises:
            OcrJobValidationError: if documentId or fileUrl is missing.
            psycopg.Error: if the ledger row cannot be written (nothing is queued).
        """
        request.validate()

        with self._track_submission():
            if not self._backend.ensure_ready():
                return self._process_inline(request, new_inline_job_id())

            job_id = new_job_id()
            payload = request.to_payload(job_id)
            try:
                self._ledger.record_queue_job_start(
                    job_id=job_id,
                    document_id=request.document_id,
                    job_type=OCR_JOB_TYPE,
                    status="pending",
                    payload={k: v for k, v in payload.items() if k != "rawText"},
                )
            except Exception as exc:
                Log.error(f"Failed to record OCR job {job_id}, nothing queued: {exc}")
                raise
            try:
                broker_job_id = self._backend.submit(job_id, payload)
            except BrokerUnavailableError as exc:
                Log.warning(f"Broker rejected OCR job {job_id}, processing inline: {exc}")
                self._ledger.mark_failed(job_id, f"broker submit failed: {exc}")
                return self._process_inline(request, job_id)

        if broker_job_id != job_id:
            Log.warning(f"Broker returned job id {broker_job_id} for ledger id {job_id}")
        Log.info(f"Queued OCR job {job_id} for document {request.document_id}")
        return OcrJobResult.queued(job_id)

    def shutdown(self) -> None:
        """Wait for in-flight submissions, then release the broker connection.

        Idempotent and safe to call from several threads.
        """
        with self._idle:
            self._idle.wait_for(lambda: self._in_flight == 0)
        self._backend.shutdown_connection()
        Log.info("OCR dispatcher shut down")

    def _process_inline(self, request: OcrJobRequest, job_id: str) -> OcrJobResult:
        Log.info(f"No broker available, processing document {request.document_id} inline")
        return OcrJobResult.processed(self._processor.process(request, job_id))

    @contextmanager
    def _track_submission(self) -> Generator[None, None, None]:
        with self._idle:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._idle:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self._idle.notify_all()


def build_dispatcher(settings: Settings) -> OcrJobDispatcher:
    """Wire the dispatcher from settings: Redis backend, Postgres ledger, inline processor."""
    return OcrJobDispatcher(
        backend=RedisQueueBackend.from_settings(settings),
        ledger=QueueJobRepository(),
        processor=build_ocr_processor(settings),
    )
