from dataclasses import dataclass
from datetime import datetime

QUEUE_JOB_STATUSES = frozenset({"pending", "processing", "done", "failed"})


@dataclass
class QueueJobRecord:
    """Represents a row from the queue_jobs ledger table."""

    id: str
    type: str
    status: str
    document_id: int | None
    attempts: int = 0
    payload: dict[str, object] | None = None
    error_message: str | None = None
    duration_ms: int | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
