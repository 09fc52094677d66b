from customs_worker.config.settings import Settings
from customs_worker.http.client import CustomsHttpClient
from customs_worker.http.exceptions import NetworkError
from customs_worker.labels.label_map import LabelMap, get_label_map
from customs_worker.logging.logger import Log
from customs_worker.scraper.exceptions import PageFetchError, ScraperError
from customs_worker.scraper.extractor import (
    build_document,
    document_from_list_row,
    extract_detail_pairs,
    extract_file_link,
    extract_list_rows,
    resolve_fields,
)
from customs_worker.scraper.models import Document, FetchError, FetchResult, ListRow


class DocumentFetcher:
    """Paginate the list endpoint and turn each row into a canonical Document.

    Holds no state between runs: fetching the same remote pages twice yields
    equal documents.
    """

    def __init__(
        self,
        client: CustomsHttpClient,
        *,
        list_url: str,
        base_url: str,
        max_pages: int | None = None,
        label_map: LabelMap | None = None,
    ) -> None:
        self._client = client
        self._list_url = list_url
        self._base_url = base_url
        self._max_pages = max_pages
        self._label_map = label_map

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: CustomsHttpClient | None = None,
    ) -> "DocumentFetcher":
        return cls(
            client or CustomsHttpClient.from_settings(settings),
            list_url=settings.customs_list_url,
            base_url=settings.customs_base_url,
            max_pages=settings.scraper_max_pages,
        )

    def fetch(self, max_pages: int | None = None) -> FetchResult:
        """Fetch pages from 1 until a page has no rows or the page limit is hit.

        A failing list page is recorded and ends pagination; documents from
        earlier pages are kept.
        """
        limit = max_pages if max_pages is not None else self._max_pages
        label_map = self._label_map or get_label_map()
        result = FetchResult()
        page = 1
        while limit is None or page <= limit:
            try:
                rows = self.fetch_page(page)
            except PageFetchError as exc:
                Log.error(f"List page {page} failed: {exc}")
                result.errors.append(FetchError(page=exc.page, message=str(exc)))
                break
            result.pages_fetched += 1
            if not rows:
                Log.info(f"List page {page} is empty, stopping")
                break
            for row in rows:
                document, error = self.fetch_document(row, page, label_map)
                result.documents.append(document)
                if error is not None:
                    result.errors.append(error)
            page += 1

        Log.info(
            f"Fetched {len(result.documents)} documents from {result.pages_fetched} pages "
            f"({len(result.errors)} errors)"
        )
        return result

    def fetch_page(self, page: int) -> list[ListRow]:
        """Fetch and parse one list page.

        Raises:
            PageFetchError: on network or parse failure, carrying the page index.
        """
        try:
            html = self._client.get_text(self._list_url, params={"page": page})
            rows = extract_list_rows(html, self._base_url)
        except NetworkError as exc:
            raise PageFetchError(page, str(exc)) from exc
        except Exception as exc:
            raise PageFetchError(page, f"unparseable list page: {exc}") from exc
        Log.debug(f"List page {page}: {len(rows)} rows")
        return rows

    def fetch_document(
        self,
        row: ListRow,
        page: int,
        label_map: LabelMap | None = None,
    ) -> tuple[Document, FetchError | None]:
        """Build a Document for one row.

        When the detail page cannot be loaded the row's own fields are returned
        with ``file_url`` left as None, together with the error.
        """
        if not row.detail_url:
            return document_from_list_row(row), None
        try:
            html = self._client.get_text(row.detail_url)
            resolved = resolve_fields(extract_detail_pairs(html), label_map or get_label_map())
            document = build_document(
                resolved,
                list_row=row,
                file_link=extract_file_link(html, self._base_url),
                detail_url=row.detail_url,
            )
        except (NetworkError, ScraperError) as exc:
            Log.error(f"Detail page for {row.document_number} failed: {exc}")
            error = FetchError(page=page, message=str(exc), url=row.detail_url)
            return document_from_list_row(row), error
        Log.debug(f"Collected {document.document_number}: {document.title}")
        return document, None
