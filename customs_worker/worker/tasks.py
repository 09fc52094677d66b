"""Functions executed by the RQ worker process."""

from typing import Any

from rq import get_current_job

from customs_worker.ocr.models import OcrJobRequest
from customs_worker.worker.job_runner import OcrJobRunner

_runner: OcrJobRunner | None = None


def configure_runner(runner: OcrJobRunner | None) -> None:
    global _runner  # noqa: PLW0603
    _runner = runner


def process_ocr_job(payload: dict[str, Any]) -> dict[str, Any]:
    """RQ entry point for a queued OCR job. Returns the extraction as a dict."""
    if _runner is None:
        raise RuntimeError("OCR job runner not configured. Call configure_runner() first.")

    request = OcrJobRequest.from_payload(payload)
    job = get_current_job()
    job_id = job.id if job is not None else str(payload.get("jobId") or "")
    if not job_id:
        raise RuntimeError("OCR job payload carries no job id")
    final_attempt = job is None or not job.retries_left

    return _runner.run(job_id, request, final_attempt=final_attempt).to_dict()
