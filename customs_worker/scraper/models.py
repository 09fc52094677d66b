import re
import time
import unicodedata
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlparse


@dataclass(frozen=True)
class ListRow:
    """One row of the paginated list table. Columns are positional."""

    document_number: str
    issuing_agency: str
    issue_date: str
    title: str
    detail_url: str | None = None


@dataclass(frozen=True)
class Document:
    """Canonical customs document built from a detail page (and its list row)."""

    document_number: str
    title: str = ""
    issuing_agency: str = ""
    issue_date: str = ""
    file_url: str | None = None
    document_type: str = ""
    signer: str = ""
    file_name: str = ""
    detail_url: str | None = None

    @property
    def customs_doc_id(self) -> str:
        return derive_customs_doc_id(self.detail_url, self.document_number)

    def to_dict(self) -> dict[str, object]:
        return {
            "documentNumber": self.document_number,
            "customsDocId": self.customs_doc_id,
            "title": self.title,
            "documentType": self.document_type,
            "issuingAgency": self.issuing_agency,
            "issueDate": self.issue_date,
            "signer": self.signer,
            "fileUrl": self.file_url,
            "fileName": self.file_name,
            "detailUrl": self.detail_url,
        }


@dataclass(frozen=True)
class FetchError:
    """A recoverable failure for one list page or one detail page."""

    page: int
    message: str
    url: str | None = None


@dataclass
class FetchResult:
    """Documents collected by one fetch run, plus the failures it survived."""

    documents: list[Document] = field(default_factory=list)
    errors: list[FetchError] = field(default_factory=list)
    pages_fetched: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


_PATH_ID_RE = re.compile(r"\d{4,}")
_NON_ALNUM_RE = re.compile(r"[^0-9a-zA-Z]+")


def derive_customs_doc_id(detail_url: str | None, fallback: str | None = None) -> str:
    """Stable source id: ``id`` query param, else last long digit run in the path."""
    if detail_url:
        parsed = urlparse(detail_url)
        ids = parse_qs(parsed.query).get("id")
        if ids and ids[0].strip():
            return ids[0].strip()
        path_ids = _PATH_ID_RE.findall(parsed.path)
        if path_ids:
            return path_ids[-1]
    return _sanitize_fallback_id(fallback)


def _sanitize_fallback_id(fallback: str | None) -> str:
    if fallback:
        sanitized = _NON_ALNUM_RE.sub("-", unicodedata.normalize("NFC", fallback))[:50]
        if sanitized:
            return sanitized
    return str(int(time.time() * 1000))
