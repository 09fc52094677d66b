import pytest

from customs_worker.ocr.folding import TextFolder
from customs_worker.ocr.keywords import DEFAULT_PRODUCT_KEYWORD_GROUPS
from customs_worker.ocr.models import ProductKeywordGroup
from customs_worker.ocr.text_mining import (
    compute_confidence,
    extract_hs_codes,
    extract_product_names,
)

GARMENTS = (ProductKeywordGroup(name="Dệt may", keywords=("áo", "áo khoác", "vải")),)


class TestExtractHsCodes:
    def test_dotted_codes(self) -> None:
        text = "Mặt hàng thuộc mã 6204.62.20 và 8471.30.20."
        assert extract_hs_codes(text) == {"6204.62.20", "8471.30.20"}

    def test_hyphenated_codes(self) -> None:
        assert extract_hs_codes("mã số 6204-62-20") == {"6204-62-20"}

    def test_short_heading_codes(self) -> None:
        assert extract_hs_codes("nhóm 39.26.90") == {"39.26.90"}

    def test_duplicates_collapse(self) -> None:
        assert extract_hs_codes("6204.62.20, lặp lại 6204.62.20") == {"6204.62.20"}

    def test_ignores_dates_and_long_numbers(self) -> None:
        assert extract_hs_codes("ngày 01.02.2024 số 123456.78.90") == set()

    def test_empty_text(self) -> None:
        assert extract_hs_codes("") == set()


class TestExtractProductNames:
    def test_finds_accented_phrases_longest_first(self) -> None:
        text = "Áo khoác nữ và vải bông, mã HS 6204.62.20"
        assert extract_product_names(text, GARMENTS) == ["áo khoác", "áo", "vải"]

    def test_matches_unaccented_text(self) -> None:
        names = extract_product_names("Ma HS 6204.62.20 ao khoac nu", GARMENTS)
        assert names == ["ao khoac", "ao"]

    def test_matches_uppercase_text(self) -> None:
        assert extract_product_names("VẢI DỆT THOI", GARMENTS) == ["vải"]

    def test_requires_word_boundaries(self) -> None:
        assert extract_product_names("Bao bì carton", GARMENTS) == []

    def test_reports_each_phrase_once(self) -> None:
        assert extract_product_names("vải, vải và vải", GARMENTS) == ["vải"]

    def test_empty_text(self) -> None:
        assert extract_product_names("", GARMENTS) == []

    def test_accepts_explicit_folder(self) -> None:
        groups = (ProductKeywordGroup(name="Kim loại", keywords=("đồng",)),)
        assert extract_product_names("đồng hồ", groups, TextFolder()) == ["đồng"]

    def test_administrative_text_has_no_products(self) -> None:
        text = "Tổng cục Hải quan quản lý hàng hóa"
        assert extract_product_names(text, DEFAULT_PRODUCT_KEYWORD_GROUPS) == []

    def test_differently_accented_words_do_not_match(self) -> None:
        text = "Cục Hải quan Đông Hà, Văn phòng Đạo, thuộc diện quản lý"
        assert extract_product_names(text, DEFAULT_PRODUCT_KEYWORD_GROUPS) == []

    def test_unaccented_span_matches_accented_keyword(self) -> None:
        groups = (ProductKeywordGroup(name="Gia dụng", keywords=("cốc", "đĩa")),)
        assert extract_product_names("Coc thuy tinh, dia su", groups) == ["coc", "dia"]


class TestComputeConfidence:
    def test_zero_without_indicators(self) -> None:
        assert compute_confidence(0, 0, 500) == 0.0

    def test_short_text_uses_minimum_denominator(self) -> None:
        assert compute_confidence(1, 3, 8) == pytest.approx(0.4)

    def test_density_over_word_count(self) -> None:
        assert compute_confidence(2, 3, 100) == pytest.approx(0.05)

    def test_capped_at_one(self) -> None:
        assert compute_confidence(20, 5, 12) == 1.0


class TestTextFolder:
    def test_folds_vietnamese_to_ascii_lowercase(self) -> None:
        assert TextFolder().fold("ÁO KHOÁC Đỏ") == "ao khoac do"

    def test_positions_map_back_to_original(self) -> None:
        folded = TextFolder().fold_with_positions("Giày da")
        start = folded.folded.index("da")
        assert folded.original_span(start, start + 2) == "da"
        assert folded.original_span(0, 4) == "Giày"

    def test_empty_span(self) -> None:
        assert TextFolder().fold_with_positions("abc").original_span(2, 2) == ""
