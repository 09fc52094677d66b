from customs_worker.labels.fields import CanonicalField
from customs_worker.labels.label_map import (
    LabelMap,
    clear_label_overrides,
    get_label_map,
    normalize_detail_label,
    register_label_overrides,
    reload_label_map,
    reset_label_map,
)

__all__ = [
    "CanonicalField",
    "LabelMap",
    "clear_label_overrides",
    "get_label_map",
    "normalize_detail_label",
    "register_label_overrides",
    "reload_label_map",
    "reset_label_map",
]
