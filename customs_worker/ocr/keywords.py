import threading
import unicodedata
from collections.abc import Callable, Sequence

from customs_worker.logging.logger import Log
from customs_worker.ocr.models import ProductKeywordGroup

DEFAULT_PRODUCT_KEYWORD_GROUPS: tuple[ProductKeywordGroup, ...] = (
    ProductKeywordGroup(
        name="Dệt may",
        keywords=(
            "áo", "áo khoác", "áo sơ mi", "áo vest", "áo thun", "đầm", "váy",
            "quần jeans", "quần tây", "quần short", "vải", "sợi",
        ),
    ),
    ProductKeywordGroup(
        name="Giày dép & phụ kiện",
        keywords=("giày", "dép", "túi", "vali", "thắt lưng", "mũ", "găng tay"),
    ),
    ProductKeywordGroup(
        name="Điện tử",
        keywords=(
            "điện thoại", "máy tính", "laptop", "máy ảnh", "tivi", "máy chiếu",
            "linh kiện điện tử",
        ),
    ),
    ProductKeywordGroup(
        name="Gia dụng",
        keywords=(
            "tủ lạnh", "máy giặt", "máy lạnh", "lò vi sóng", "nồi", "chảo",
            "dao", "muỗng", "ly", "cốc", "đĩa", "ấm",
        ),
    ),
    ProductKeywordGroup(
        name="Thực phẩm & đồ uống",
        keywords=(
            "nước", "rượu", "bia", "cà phê", "trà", "bánh", "kẹo", "sữa",
            "gạo", "ngô", "đậu", "trái cây",
        ),
    ),
    ProductKeywordGroup(
        name="Nguyên vật liệu",
        keywords=(
            "gỗ", "giấy", "bìa", "sơn", "keo", "chất dẻo", "kim loại", "sắt",
            "thép", "nhôm", "đồng", "xi măng", "kính",
        ),
    ),
    ProductKeywordGroup(
        name="Hóa chất & dược phẩm",
        keywords=(
            "hóa chất", "phân bón", "chất tẩy", "xà phòng", "mỹ phẩm",
            "nước hoa", "thuốc", "dược phẩm",
        ),
    ),
)


def normalize_keyword(keyword: str) -> str:
    return unicodedata.normalize("NFC", keyword).strip().lower()


def build_keyword_dictionary(groups: Sequence[ProductKeywordGroup]) -> list[str]:
    """Flatten groups into unique normalized keywords, first occurrence order."""
    seen: dict[str, None] = {}
    for group in groups:
        for keyword in group.keywords:
            normalized = normalize_keyword(keyword)
            if normalized:
                seen.setdefault(normalized, None)
    return list(seen)


class KeywordGroupSource:
    """Cached keyword groups, loaded from a repository with defaults as fallback."""

    def __init__(
        self,
        loader: Callable[[], Sequence[ProductKeywordGroup]] | None = None,
        defaults: Sequence[ProductKeywordGroup] = DEFAULT_PRODUCT_KEYWORD_GROUPS,
    ) -> None:
        self._loader = loader
        self._defaults = tuple(defaults)
        self._cached: tuple[ProductKeywordGroup, ...] | None = None
        self._lock = threading.Lock()

    def groups(self, force_refresh: bool = False) -> tuple[ProductKeywordGroup, ...]:
        with self._lock:
            if self._cached is None or force_refresh:
                self._cached = self._load()
            return self._cached

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None

    def _load(self) -> tuple[ProductKeywordGroup, ...]:
        if self._loader is None:
            return self._defaults
        try:
            loaded = tuple(self._loader())
        except Exception as exc:
            Log.warning(f"Failed to load product keyword groups, using defaults: {exc}")
            return self._defaults
        return loaded or self._defaults
