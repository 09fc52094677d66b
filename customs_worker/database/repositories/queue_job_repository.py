from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from customs_worker.database.connection import get_connection
from customs_worker.database.models import QUEUE_JOB_STATUSES, QueueJobRecord


class QueueJobRepository:
    """Database operations for the queue_jobs ledger table."""

    def record_queue_job_start(
        self,
        *,
        job_id: str,
        document_id: int,
        job_type: str,
        status: str = "pending",
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Insert the ledger row for a job about to be submitted.

        A duplicate id refreshes the existing row instead of failing, so a
        retried submission keeps a single ledger entry.

        Raises:
            ValueError: if ``status`` is not a known queue job status.
        """
        if status not in QUEUE_JOB_STATUSES:
            raise ValueError(f"Unknown queue job status: {status!r}")
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO queue_jobs (id, type, status, document_id, payload,
                                        attempts, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, 0, NOW(), NOW())
                ON CONFLICT (id) DO UPDATE
                SET type = EXCLUDED.type,
                    status = EXCLUDED.status,
                    document_id = EXCLUDED.document_id,
                    payload = EXCLUDED.payload,
                    updated_at = NOW()
                """,
                (
                    job_id,
                    job_type,
                    status,
                    document_id,
                    Jsonb(payload) if payload is not None else None,
                ),
            )
            conn.commit()

    def mark_processing(self, job_id: str) -> None:
        """Mark a job as picked up by a worker."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE queue_jobs
                SET status = 'processing', started_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def mark_done(self, job_id: str, duration_ms: int | None = None) -> None:
        """Mark a job as done."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE queue_jobs
                SET status = 'done', duration_ms = %s, error_message = NULL,
                    completed_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (duration_ms, job_id),
            )
            conn.commit()

    def mark_retrying(self, job_id: str, error: str) -> None:
        """Increment attempt count and return job to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE queue_jobs
                SET attempts = attempts + 1, status = 'pending',
                    error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def mark_failed(self, job_id: str, error: str) -> None:
        """Mark a job as permanently failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE queue_jobs
                SET status = 'failed', attempts = attempts + 1, error_message = %s,
                    completed_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (error, job_id),
            )
            conn.commit()

    def find_by_id(self, job_id: str) -> QueueJobRecord | None:
        """Find a ledger row by job id."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, type, status, document_id, payload, attempts,
                           error_message, duration_ms, started_at, completed_at,
                           created_at, updated_at
                    FROM queue_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return QueueJobRecord(
            id=row["id"],
            type=row["type"],
            status=row["status"],
            document_id=row["document_id"],
            attempts=row["attempts"],
            payload=row["payload"],
            error_message=row["error_message"],
            duration_ms=row["duration_ms"],
            started_at=row["started_at"],
            completed_at=row["completed_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
