import argparse
import json
import sys

from customs_worker.config.settings import Settings
from customs_worker.database.connection import close_pool, init_pool
from customs_worker.database.repositories.queue_job_repository import QueueJobRepository
from customs_worker.http.client import CustomsHttpClient
from customs_worker.labels.reloader import start_label_map_reloader, stop_label_map_reloader
from customs_worker.logging.logger import Log
from customs_worker.ocr.processor import build_ocr_processor
from customs_worker.queue.redis_backend import RedisQueueBackend
from customs_worker.scraper.fetcher import DocumentFetcher
from customs_worker.worker.job_runner import OcrJobRunner
from customs_worker.worker.tasks import configure_runner
from customs_worker.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> consume the OCR queue."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    backend = RedisQueueBackend.from_settings(settings)
    http_client = CustomsHttpClient.from_settings(settings)
    start_label_map_reloader(settings.customs_label_map_reload_interval_seconds)

    try:
        processor = build_ocr_processor(settings, http_client=http_client)
        configure_runner(OcrJobRunner(processor, QueueJobRepository()))
        if not Worker(backend).run():
            sys.exit(1)
    finally:
        configure_runner(None)
        stop_label_map_reloader()
        http_client.close()
        backend.shutdown_connection()
        close_pool()


def fetch_latest(argv: list[str] | None = None) -> None:
    """Fetch the newest circulars and print them as JSON."""
    parser = argparse.ArgumentParser(description="Fetch the latest customs circulars.")
    parser.add_argument("--max-pages", type=int, default=None, help="listing pages to walk")
    parser.add_argument("--output", default="-", help="output file, '-' for stdout")
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level, stream=sys.stderr)

    with CustomsHttpClient.from_settings(settings) as client:
        fetcher = DocumentFetcher.from_settings(settings, client)
        result = fetcher.fetch(max_pages=args.max_pages)

    for error in result.errors:
        Log.warning(f"Fetch error on page {error.page}: {error.message}")

    body = json.dumps(
        {
            "documents": [document.to_dict() for document in result.documents],
            "errors": [
                {"page": error.page, "message": error.message, "url": error.url}
                for error in result.errors
            ],
            "pagesFetched": result.pages_fetched,
        },
        ensure_ascii=False,
        indent=2,
    )
    if args.output == "-":
        sys.stdout.write(body + "\n")
    else:
        with open(args.output, "w", encoding="utf-8") as handle:
            handle.write(body + "\n")
    Log.info(f"Fetched {len(result.documents)} documents from {result.pages_fetched} pages")


if __name__ == "__main__":
    main()
