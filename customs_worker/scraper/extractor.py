"""HTML extraction for the customs portal's list and detail pages."""

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from customs_worker.labels.fields import CanonicalField
from customs_worker.labels.label_map import LabelMap
from customs_worker.scraper.exceptions import DocumentParseError
from customs_worker.scraper.models import Document, ListRow

MIN_LIST_COLUMNS = 4
_FILE_HOST_MARKER = "files.customs.gov.vn"


@dataclass(frozen=True)
class FileLink:
    url: str
    name: str


def _cell_text(cell: Tag) -> str:
    text = " ".join(cell.get_text(" ", strip=True).split())
    return unicodedata.normalize("NFC", text)


def _table_rows(soup: BeautifulSoup, selector: str) -> list[Tag]:
    rows = soup.select(f"table tbody {selector}")
    return rows or soup.select(f"table {selector}")


def extract_list_rows(html: str, base_url: str) -> list[ListRow]:
    """Parse list-page rows: number, agency, date, title by column position.

    Rows with fewer than four cells or an empty first cell are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    rows: list[ListRow] = []
    for tr in _table_rows(soup, "tr"):
        cells = tr.find_all("td")
        if len(cells) < MIN_LIST_COLUMNS:
            continue
        number, agency, issue_date, title = (_cell_text(c) for c in cells[:MIN_LIST_COLUMNS])
        if not number:
            continue
        link = cells[0].find("a", href=True) or cells[3].find("a", href=True)
        detail_url = urljoin(base_url, link["href"]) if link else None
        rows.append(
            ListRow(
                document_number=number,
                issuing_agency=agency,
                issue_date=issue_date,
                title=title,
                detail_url=detail_url,
            )
        )
    return rows


def extract_detail_pairs(html: str) -> list[tuple[str, str]]:
    """Return (label, value) pairs from two-column detail table rows, in page order."""
    soup = BeautifulSoup(html, "html.parser")
    pairs: list[tuple[str, str]] = []
    for tr in soup.select("table tr"):
        cells = tr.find_all(["td", "th"], recursive=False) or tr.find_all(["td", "th"])
        if len(cells) < 2:
            continue
        pairs.append((_cell_text(cells[0]), _cell_text(cells[1])))
    return pairs


def extract_file_link(html: str, base_url: str) -> FileLink | None:
    """First anchor that points at a PDF or the portal's file host."""
    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if ".pdf" in href.lower() or _FILE_HOST_MARKER in href:
            return FileLink(url=urljoin(base_url, href), name=_cell_text(anchor))
    return None


def resolve_fields(
    pairs: Iterable[tuple[str, str]],
    label_map: LabelMap,
) -> dict[CanonicalField, str]:
    """Map raw pairs onto canonical fields. Unmapped labels are dropped; first hit wins."""
    resolved: dict[CanonicalField, str] = {}
    for label, value in pairs:
        canonical = label_map.normalize(label)
        if canonical is None or canonical in resolved:
            continue
        resolved[canonical] = value
    return resolved


def build_document(
    resolved: dict[CanonicalField, str],
    *,
    list_row: ListRow | None = None,
    file_link: FileLink | None = None,
    detail_url: str | None = None,
) -> Document:
    """Combine detail fields with the list row; detail values win when non-empty.

    Raises:
        DocumentParseError: if neither source provides a document number.
    """

    def pick(canonical: CanonicalField, fallback: str = "") -> str:
        return resolved.get(canonical) or fallback

    number = pick(
        CanonicalField.DOCUMENT_NUMBER,
        list_row.document_number if list_row else "",
    ).strip()
    if not number:
        raise DocumentParseError(f"No document number found at {detail_url or 'detail page'}")

    file_url = file_link.url if file_link else _as_url(resolved.get(CanonicalField.FILE_URL))
    return Document(
        document_number=number,
        title=pick(CanonicalField.TITLE, list_row.title if list_row else ""),
        issuing_agency=pick(
            CanonicalField.ISSUING_AGENCY, list_row.issuing_agency if list_row else ""
        ),
        issue_date=pick(CanonicalField.ISSUE_DATE, list_row.issue_date if list_row else ""),
        file_url=file_url,
        document_type=pick(CanonicalField.DOCUMENT_TYPE),
        signer=pick(CanonicalField.SIGNER),
        file_name=file_link.name if file_link else "",
        detail_url=detail_url or (list_row.detail_url if list_row else None),
    )


def document_from_list_row(row: ListRow) -> Document:
    """Partial document for a row whose detail page could not be loaded."""
    return Document(
        document_number=row.document_number,
        title=row.title,
        issuing_agency=row.issuing_agency,
        issue_date=row.issue_date,
        file_url=None,
        detail_url=row.detail_url,
    )


def _as_url(value: str | None) -> str | None:
    if value and value.startswith(("http://", "https://")):
        return value
    return None
