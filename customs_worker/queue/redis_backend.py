import threading
from typing import Any

import redis
from rq import Queue, Retry

from customs_worker.config.settings import Settings
from customs_worker.logging.logger import Log
from customs_worker.queue.backend import BrokerUnavailableError

OCR_JOB_FUNCTION = "customs_worker.worker.tasks.process_ocr_job"


class RedisQueueBackend:
    """Owns the single shared Redis connection and submits RQ jobs on it.

    The connection is created lazily under a lock; submits are not
    serialized since redis-py connections are pooled and thread-safe.
    """

    def __init__(
        self,
        redis_url: str,
        *,
        queue_name: str = "queue:ocr",
        job_attempts: int = 3,
        backoff_seconds: int = 30,
        result_ttl_seconds: int = 3600,
        failure_ttl_seconds: int = 7 * 24 * 3600,
        socket_timeout_seconds: float = 5.0,
        job_function: str = OCR_JOB_FUNCTION,
    ) -> None:
        self._redis_url = redis_url.strip()
        self._queue_name = queue_name
        self._job_attempts = max(1, job_attempts)
        self._backoff_seconds = backoff_seconds
        self._result_ttl = result_ttl_seconds
        self._failure_ttl = failure_ttl_seconds
        self._socket_timeout = socket_timeout_seconds
        self._job_function = job_function
        self._connection: redis.Redis | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisQueueBackend":
        return cls(
            settings.redis_url,
            queue_name=settings.ocr_queue_name,
            job_attempts=settings.ocr_job_attempts,
            backoff_seconds=settings.ocr_job_backoff_seconds,
            result_ttl_seconds=settings.ocr_result_ttl_seconds,
            failure_ttl_seconds=settings.ocr_failure_ttl_seconds,
            socket_timeout_seconds=settings.redis_socket_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self._redis_url)

    @property
    def queue_name(self) -> str:
        return self._queue_name

    def get_connection(self) -> redis.Redis | None:
        connection = self._connection
        if connection is not None:
            return connection
        if not self._redis_url:
            return None
        with self._lock:
            if self._connection is None:
                self._connection = redis.Redis.from_url(
                    self._redis_url,
                    socket_connect_timeout=self._socket_timeout,
                    socket_timeout=self._socket_timeout,
                    health_check_interval=30,
                )
            return self._connection

    def ensure_ready(self) -> bool:
        try:
            connection = self.get_connection()
            if connection is None:
                return False
            return bool(connection.ping())
        except (redis.exceptions.RedisError, ValueError) as exc:
            Log.warning(f"Redis not ready: {exc}")
            return False

    def submit(self, job_id: str, payload: dict[str, Any]) -> str:
        try:
            connection = self.get_connection()
        except (redis.exceptions.RedisError, ValueError) as exc:
            raise BrokerUnavailableError(f"Invalid broker configuration: {exc}") from exc
        if connection is None:
            raise BrokerUnavailableError("No broker configured (REDIS_URL is empty)")
        queue = Queue(self._queue_name, connection=connection)
        try:
            job = queue.enqueue(
                self._job_function,
                payload,
                job_id=job_id,
                retry=self._retry_policy(),
                result_ttl=self._result_ttl,
                failure_ttl=self._failure_ttl,
                description=f"ocr document {payload.get('documentId')}",
            )
        except redis.exceptions.RedisError as exc:
            raise BrokerUnavailableError(f"Failed to enqueue job {job_id}: {exc}") from exc
        return str(job.id)

    def shutdown_connection(self) -> None:
        with self._lock:
            connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except redis.exceptions.RedisError as exc:
            Log.warning(f"Error closing Redis connection: {exc}")

    def _retry_policy(self) -> Retry | None:
        retries = self._job_attempts - 1
        if retries <= 0:
            return None
        intervals = [self._backoff_seconds * (2**attempt) for attempt in range(retries)]
        return Retry(max=retries, interval=intervals)
