import unicodedata
from dataclasses import dataclass
from typing import ClassVar

import icu  # type: ignore[import-untyped]


@dataclass(frozen=True)
class FoldedText:
    """ASCII-lowercase view of a text plus a map back to the original indices.

    ``positions[j]`` is the index in ``original`` that produced ``folded[j]``.
    """

    original: str
    folded: str
    positions: tuple[int, ...]

    def original_span(self, start: int, end: int) -> str:
        """Slice of ``original`` covering folded[start:end]."""
        if start >= end or end > len(self.positions):
            return ""
        return self.original[self.positions[start] : self.positions[end - 1] + 1]


class TextFolder:
    """Case and diacritic folding via ICU (``Any-Latin; Latin-ASCII; Lower``).

    Vietnamese "áo khoác" and "AO KHOAC" both fold to "ao khoac"; "đ" folds to "d".
    """

    _ICU_TRANSFORM: ClassVar[str] = "Any-Latin; Latin-ASCII; Lower"

    def __init__(self) -> None:
        self._transliterator: icu.Transliterator = icu.Transliterator.createInstance(
            self._ICU_TRANSFORM
        )

    def fold(self, text: str) -> str:
        return self._transliterator.transliterate(unicodedata.normalize("NFC", text))

    def fold_with_positions(self, text: str) -> FoldedText:
        """Fold character by character so every output char maps to its source."""
        normalized = unicodedata.normalize("NFC", text)
        parts: list[str] = []
        positions: list[int] = []
        for index, ch in enumerate(normalized):
            folded = self._transliterator.transliterate(ch)
            parts.append(folded)
            positions.extend([index] * len(folded))
        return FoldedText(
            original=normalized,
            folded="".join(parts),
            positions=tuple(positions),
        )
