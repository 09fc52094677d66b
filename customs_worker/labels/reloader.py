import threading
from collections.abc import Callable
from pathlib import Path

from customs_worker.config.settings import Settings
from customs_worker.labels.label_map import reload_label_map
from customs_worker.logging.logger import Log


class LabelMapReloader:
    """Poll the override file and rebuild the label map when it changes."""

    def __init__(
        self,
        path: Path | None,
        interval_seconds: float,
        on_change: Callable[[], object] = reload_label_map,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._path = path
        self._interval = interval_seconds
        self._on_change = on_change
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_mtime = self._current_mtime()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll(self) -> bool:
        """Reload if the file's mtime moved since the last poll. Returns True on reload."""
        mtime = self._current_mtime()
        if mtime == self._last_mtime:
            return False
        self._last_mtime = mtime
        self._on_change()
        return True

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="label-map-reloader", daemon=True
        )
        self._thread.start()
        Log.info(f"Label map reloader started (every {self._interval}s)")

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self.poll()
            except Exception as exc:
                Log.error(f"Label map reload failed: {exc}")

    def _current_mtime(self) -> float | None:
        if self._path is None:
            return None
        try:
            return self._path.stat().st_mtime
        except OSError:
            return None


_reloader: LabelMapReloader | None = None


def start_label_map_reloader(interval_seconds: float | None = None) -> LabelMapReloader | None:
    """Start the process-wide reloader. Returns None when reloading is disabled."""
    global _reloader  # noqa: PLW0603
    settings = Settings()
    interval = (
        interval_seconds
        if interval_seconds is not None
        else settings.customs_label_map_reload_interval_seconds
    )
    path = settings.customs_label_map_path.strip()
    if interval <= 0 or not path:
        return None
    stop_label_map_reloader()
    _reloader = LabelMapReloader(Path(path), interval)
    _reloader.start()
    return _reloader


def stop_label_map_reloader() -> None:
    global _reloader  # noqa: PLW0603
    if _reloader is not None:
        _reloader.stop()
        _reloader = None
