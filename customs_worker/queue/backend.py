from typing import Any, Protocol


class QueueError(Exception):
    """Base exception for broker interaction."""


class BrokerUnavailableError(QueueError):
    """Raised when the broker cannot accept a job."""


class QueueBackend(Protocol):
    """Capabilities the dispatcher needs from a broker.

    Any object with these methods works, including test doubles.
    """

    def ensure_ready(self) -> bool:
        """True when a broker is configured and reachable. Never raises."""
        ...

    def get_connection(self) -> Any | None:
        """The shared connection handle, or None when no broker is configured."""
        ...

    def submit(self, job_id: str, payload: dict[str, Any]) -> str:
        """Enqueue ``payload`` under ``job_id`` and return the broker's job id.

        Raises:
            BrokerUnavailableError: if the broker rejects or cannot take the job.
        """
        ...

    def shutdown_connection(self) -> None:
        """Close the connection if open. Safe to call repeatedly."""
        ...


class JobLedger(Protocol):
    """Durable record of queued jobs, written before each broker submit."""

    def record_queue_job_start(
        self,
        *,
        job_id: str,
        document_id: int,
        job_type: str,
        status: str = "pending",
        payload: dict[str, Any] | None = None,
    ) -> None: ...

    def mark_failed(self, job_id: str, error: str) -> None: ...
