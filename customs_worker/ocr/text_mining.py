"""HS-code and product-name mining over extracted document text."""

import re
from collections.abc import Sequence

from customs_worker.ocr.folding import TextFolder
from customs_worker.ocr.keywords import build_keyword_dictionary, normalize_keyword
from customs_worker.ocr.models import ProductKeywordGroup

_HS_CODE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(\d{2,4}\.\d{2}\.\d{2})\b"),
    re.compile(r"\b(\d{2,4}-\d{2}-\d{2})\b"),
)

_folder: TextFolder | None = None


def _get_folder() -> TextFolder:
    global _folder  # noqa: PLW0603
    if _folder is None:
        _folder = TextFolder()
    return _folder


def extract_hs_codes(text: str) -> set[str]:
    """Distinct HS codes written as ``6204.62.20`` or ``6204-62-20``."""
    codes: set[str] = set()
    for pattern in _HS_CODE_PATTERNS:
        codes.update(match.group(1) for match in pattern.finditer(text))
    return codes


def extract_product_names(
    text: str,
    groups: Sequence[ProductKeywordGroup],
    folder: TextFolder | None = None,
) -> list[str]:
    """Find keyword phrases in ``text``, ignoring case.

    A span written with diacritics must carry the keyword's own diacritics,
    so "quản lý" does not hit "ly" and "Đông" does not hit "đồng". A span
    written without any diacritics matches on its folded form, so an
    unaccented "ao khoac" hits "áo khoác".

    Each hit is reported as it is written in the text (lowercased). Results
    are unique and ordered by position, longer phrases first at the same
    position.
    """
    if not text:
        return []
    folder = folder or _get_folder()
    folded = folder.fold_with_positions(text)
    haystack = folded.folded

    hits: list[tuple[int, int, str]] = []
    for keyword in build_keyword_dictionary(groups):
        needle = folder.fold(keyword)
        if not needle:
            continue
        exact = normalize_keyword(keyword)
        start = 0
        while True:
            index = haystack.find(needle, start)
            if index == -1:
                break
            end = index + len(needle)
            if _is_word_boundary(haystack, index, end):
                phrase = folded.original_span(index, end).lower()
                if phrase and (phrase == exact or phrase.isascii()):
                    hits.append((index, -len(phrase), phrase))
            start = index + 1

    hits.sort()
    seen: dict[str, None] = {}
    for _index, _neg_len, phrase in hits:
        seen.setdefault(phrase, None)
    return list(seen)


def _is_word_boundary(haystack: str, start: int, end: int) -> bool:
    before_ok = start == 0 or not haystack[start - 1].isalnum()
    after_ok = end == len(haystack) or not haystack[end].isalnum()
    return before_ok and after_ok


def compute_confidence(hs_codes: int, product_names: int, word_count: int) -> float:
    """Indicator density, capped at 1.0; zero when nothing was found."""
    indicators = hs_codes + product_names
    if indicators == 0:
        return 0.0
    return min(1.0, indicators / max(word_count, 10))
