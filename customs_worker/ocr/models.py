from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from customs_worker.ocr.exceptions import OcrJobValidationError

OCR_JOB_TYPE = "ocr"


@dataclass(frozen=True)
class ProductKeywordGroup:
    """A named category of product keywords (e.g. garments)."""

    name: str
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class OcrJobRequest:
    """Input to the dispatcher: one document's PDF to mine for HS codes."""

    document_id: int
    file_name: str
    file_url: str
    raw_text: str | None = None

    def validate(self) -> None:
        """Raise OcrJobValidationError unless document_id and file_url are usable."""
        if isinstance(self.document_id, bool) or not isinstance(self.document_id, int):
            raise OcrJobValidationError("documentId is required and must be an integer")
        if not isinstance(self.file_url, str) or not self.file_url.strip():
            raise OcrJobValidationError("fileUrl is required")
        if self.raw_text is not None and not isinstance(self.raw_text, str):
            raise OcrJobValidationError("rawText must be a string when provided")

    def to_payload(self, job_id: str) -> dict[str, Any]:
        """Serialize for the broker, tagged with the job id."""
        return {
            "documentId": self.document_id,
            "fileName": self.file_name,
            "fileUrl": self.file_url,
            "rawText": self.raw_text,
            "jobId": job_id,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OcrJobRequest":
        """Rebuild a request from a broker payload and validate it."""
        request = cls(
            document_id=payload.get("documentId"),  # type: ignore[arg-type]
            file_name=str(payload.get("fileName") or ""),
            file_url=payload.get("fileUrl"),  # type: ignore[arg-type]
            raw_text=payload.get("rawText"),
        )
        request.validate()
        return request


@dataclass(frozen=True)
class OcrExtraction:
    """Outcome of mining one document's text for HS codes and product names."""

    success: bool
    job_id: str
    document_id: int
    file_name: str
    hs_codes: frozenset[str] = frozenset()
    product_names: tuple[str, ...] = ()
    confidence: float = 0.0
    text_length: int = 0
    word_count: int = 0
    processed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "jobId": self.job_id,
            "documentId": self.document_id,
            "fileName": self.file_name,
            "hsCodes": sorted(self.hs_codes),
            "productNames": list(self.product_names),
            "confidence": self.confidence,
            "textLength": self.text_length,
            "wordCount": self.word_count,
            "processedAt": self.processed_at.isoformat(),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class OcrJobResult:
    """What enqueue_ocr_job returns: an inline result or a queue reference."""

    status: Literal["processed", "queued"]
    job_id: str
    result: OcrExtraction | None = None

    @classmethod
    def processed(cls, result: OcrExtraction) -> "OcrJobResult":
        return cls(status="processed", job_id=result.job_id, result=result)

    @classmethod
    def queued(cls, job_id: str) -> "OcrJobResult":
        return cls(status="queued", job_id=job_id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status, "jobId": self.job_id}
        if self.result is not None:
            data["result"] = self.result.to_dict()
        return data
