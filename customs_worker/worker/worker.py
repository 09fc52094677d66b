from rq import Queue, SimpleWorker

from customs_worker.logging.logger import Log
from customs_worker.queue.redis_backend import RedisQueueBackend


class Worker:
    """Consume the OCR queue in-process: connect -> listen -> dispatch."""

    def __init__(self, backend: RedisQueueBackend) -> None:
        self._backend = backend

    def run(self, burst: bool = False) -> bool:
        """Block consuming jobs until interrupted.

        If burst is set, return once the queue is empty (for testing).
        Returns False without consuming when the broker is unreachable.
        """
        if not self._backend.ensure_ready():
            Log.error("Cannot connect to Redis. Check REDIS_URL.")
            return False

        connection = self._backend.get_connection()
        queue = Queue(self._backend.queue_name, connection=connection)
        rq_worker = SimpleWorker([queue], connection=connection)
        Log.info(f"Worker started, listening on {queue.name}")
        try:
            rq_worker.work(burst=burst, with_scheduler=True)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        return True
