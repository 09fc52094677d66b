"""Resolution of raw Vietnamese detail-page labels to canonical fields.

Layers, lowest precedence first:
1. ``DEFAULT_DETAIL_LABELS`` below.
2. A JSON override file (``*.json``).
3. A YAML (``*.yaml``) or ``label: field`` line file (any other extension).
4. Runtime overrides registered in-process.

Only one override path is read, so layers 2 and 3 are mutually exclusive in
practice. A layer that fails to load is skipped with a warning.

Lookup is exact on the normalized label (NFC, trimmed, trailing colon
removed). There is no case folding: the source vocabulary is a fixed set of
administrative Vietnamese strings.
"""

import re
import threading
import unicodedata
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from customs_worker.config.settings import Settings
from customs_worker.labels.exceptions import LabelOverrideError
from customs_worker.labels.fields import CanonicalField
from customs_worker.labels.loader import load_label_overrides
from customs_worker.logging.logger import Log

DEFAULT_DETAIL_LABELS: Mapping[str, CanonicalField] = MappingProxyType(
    {
        "Số hiệu": CanonicalField.DOCUMENT_NUMBER,
        "Số ký hiệu": CanonicalField.DOCUMENT_NUMBER,
        "Loại văn bản": CanonicalField.DOCUMENT_TYPE,
        "Cơ quan ban hành": CanonicalField.ISSUING_AGENCY,
        "Đơn vị ban hành": CanonicalField.ISSUING_AGENCY,
        "Ngày ban hành": CanonicalField.ISSUE_DATE,
        "Ngày ký": CanonicalField.ISSUE_DATE,
        "Người ký": CanonicalField.SIGNER,
        "Trích yếu nội dung": CanonicalField.TITLE,
        "Trích yêu nội dung": CanonicalField.TITLE,
        "Tải tệp nội dung toàn văn": CanonicalField.FILE_URL,
    }
)

_TRAILING_COLON_RE = re.compile(r"[:：]\s*$")


def normalize_label_text(raw_label: str) -> str:
    """NFC-normalize, trim, and drop one trailing ':' or '：'."""
    normalized = unicodedata.normalize("NFC", raw_label).strip()
    return _TRAILING_COLON_RE.sub("", normalized).strip()


class LabelMap:
    """Immutable merged label table. Build a new instance to pick up changes."""

    def __init__(
        self,
        override_path: Path | str | None = None,
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        self._override_path = Path(override_path) if override_path else None
        self._runtime_overrides = dict(overrides or {})
        self._table: Mapping[str, CanonicalField] = MappingProxyType(self._build())

    @property
    def override_path(self) -> Path | None:
        return self._override_path

    @property
    def table(self) -> Mapping[str, CanonicalField]:
        return self._table

    def normalize(self, raw_label: str) -> CanonicalField | None:
        """Return the canonical field for ``raw_label``, or None if unmapped."""
        if not raw_label:
            return None
        return self._table.get(normalize_label_text(raw_label))

    def rebuild(self) -> "LabelMap":
        """Re-read the override file and return a fresh map with the same layers."""
        return LabelMap(self._override_path, self._runtime_overrides)

    def _build(self) -> dict[str, CanonicalField]:
        table: dict[str, CanonicalField] = dict(DEFAULT_DETAIL_LABELS)
        if self._override_path is not None:
            self._merge(table, self._load_file_layer(self._override_path), str(self._override_path))
        if self._runtime_overrides:
            self._merge(table, self._runtime_overrides, "runtime overrides")
        return table

    @staticmethod
    def _load_file_layer(path: Path) -> Mapping[str, str]:
        try:
            return load_label_overrides(path)
        except LabelOverrideError as exc:
            Log.warning(f"Skipping label override layer: {exc}")
            return {}

    @staticmethod
    def _merge(
        table: dict[str, CanonicalField],
        layer: Mapping[str, str],
        source: str,
    ) -> None:
        for raw_label, raw_field in layer.items():
            label = normalize_label_text(str(raw_label))
            canonical = CanonicalField.parse(raw_field)
            if not label or canonical is None:
                Log.warning(
                    f"Ignoring label override {raw_label!r} -> {raw_field!r} from {source}"
                )
                continue
            table[label] = canonical


_label_map: LabelMap | None = None
_runtime_overrides: dict[str, str] = {}
_lock = threading.Lock()


def _configured_override_path() -> Path | None:
    path = Settings().customs_label_map_path.strip()
    return Path(path) if path else None


def get_label_map() -> LabelMap:
    """Return the process-wide label map, building it on first use."""
    global _label_map  # noqa: PLW0603
    current = _label_map
    if current is not None:
        return current
    with _lock:
        if _label_map is None:
            _label_map = LabelMap(_configured_override_path(), _runtime_overrides)
        return _label_map


def reload_label_map() -> LabelMap:
    """Rebuild the process-wide map from the current configuration."""
    global _label_map  # noqa: PLW0603
    fresh = LabelMap(_configured_override_path(), _runtime_overrides)
    with _lock:
        _label_map = fresh
    Log.info(f"Label map reloaded: {len(fresh.table)} labels")
    return fresh


def reset_label_map() -> None:
    """Drop the cached map so the next lookup rebuilds it."""
    global _label_map  # noqa: PLW0603
    with _lock:
        _label_map = None


def register_label_overrides(overrides: Mapping[str, str]) -> None:
    """Add in-process overrides, the highest-precedence layer."""
    with _lock:
        _runtime_overrides.update(overrides)
    reset_label_map()


def clear_label_overrides() -> None:
    """Drop every runtime override registered in this process."""
    with _lock:
        _runtime_overrides.clear()
    reset_label_map()


def normalize_detail_label(raw_label: str) -> CanonicalField | None:
    """Resolve ``raw_label`` against the process-wide label map."""
    return get_label_map().normalize(raw_label)
