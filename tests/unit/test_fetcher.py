from unittest.mock import MagicMock

from customs_worker.http.exceptions import NetworkError
from customs_worker.labels import LabelMap
from customs_worker.scraper.fetcher import DocumentFetcher
from customs_worker.scraper.models import ListRow

BASE_URL = "https://www.customs.gov.vn"
LIST_URL = f"{BASE_URL}/index.jsp?pageId=8&cid=1294"


def _list_page(*numbers: str, start: int = 1000) -> str:
    rows = "".join(
        f'<tr><td><a href="/index.jsp?pageId=4&amp;id={index}">{number}</a></td>'
        f"<td>Tổng cục Hải quan</td><td>01/02/2024</td><td>Trích yếu {number}</td></tr>"
        for index, number in enumerate(numbers, start=start)
    )
    return f"<table><tbody>{rows}</tbody></table>"


def _detail_page(number: str, issue_date: str = "05/02/2024") -> str:
    return (
        "<table>"
        f"<tr><td>Số hiệu</td><td>{number}</td></tr>"
        f"<tr><td>Ngày ban hành</td><td>{issue_date}</td></tr>"
        f'<tr><td>Tải tệp nội dung toàn văn</td><td><a href="/files/{number[:4]}.pdf">'
        f"{number[:4]}.pdf</a></td></tr>"
        "</table>"
    )


def _make_fetcher(
    pages: dict[int, str | Exception],
    details: dict[str, str | Exception],
) -> tuple[DocumentFetcher, MagicMock]:
    """Fetcher over a mocked client that serves list pages by number and details by URL."""

    def get_text(url: str, params: dict[str, int] | None = None) -> str:
        if params is not None:
            body = pages.get(params["page"], "<table></table>")
        else:
            body = details[url]
        if isinstance(body, Exception):
            raise body
        return body

    client = MagicMock()
    client.get_text.side_effect = get_text
    fetcher = DocumentFetcher(
        client, list_url=LIST_URL, base_url=BASE_URL, max_pages=5, label_map=LabelMap()
    )
    return fetcher, client


def _detail_url(index: int) -> str:
    return f"{BASE_URL}/index.jsp?pageId=4&id={index}"


class TestFetchPagination:
    def test_stops_at_first_empty_page(self) -> None:
        fetcher, _client = _make_fetcher(
            {1: _list_page("1/TB"), 2: _list_page("2/TB", start=2000)},
            {
                _detail_url(1000): _detail_page("1/TB"),
                _detail_url(2000): _detail_page("2/TB"),
            },
        )

        result = fetcher.fetch()

        assert [d.document_number for d in result.documents] == ["1/TB", "2/TB"]
        assert result.pages_fetched == 3
        assert result.ok

    def test_respects_page_limit(self) -> None:
        fetcher, client = _make_fetcher(
            {1: _list_page("1/TB"), 2: _list_page("2/TB")},
            {_detail_url(1000): _detail_page("1/TB")},
        )

        result = fetcher.fetch(max_pages=1)

        assert result.pages_fetched == 1
        assert len(result.documents) == 1
        list_calls = [c for c in client.get_text.call_args_list if c.kwargs.get("params")]
        assert [c.kwargs["params"] for c in list_calls] == [{"page": 1}]

    def test_page_error_is_recorded_and_stops(self) -> None:
        fetcher, _client = _make_fetcher(
            {1: _list_page("1/TB"), 2: NetworkError("503 Service Unavailable")},
            {_detail_url(1000): _detail_page("1/TB")},
        )

        result = fetcher.fetch()

        assert [d.document_number for d in result.documents] == ["1/TB"]
        assert len(result.errors) == 1
        assert result.errors[0].page == 2
        assert "503" in result.errors[0].message
        assert result.pages_fetched == 1


class TestFetchDocuments:
    def test_detail_values_override_list_row(self) -> None:
        fetcher, _client = _make_fetcher(
            {1: _list_page("1234/TB-TCHQ")},
            {_detail_url(1000): _detail_page("1234/TB-TCHQ", issue_date="09/09/2024")},
        )

        document = fetcher.fetch().documents[0]

        assert document.issue_date == "09/09/2024"
        assert document.title == "Trích yếu 1234/TB-TCHQ"
        assert document.file_url == f"{BASE_URL}/files/1234.pdf"
        assert document.customs_doc_id == "1000"

    def test_detail_failure_yields_partial_document(self) -> None:
        fetcher, _client = _make_fetcher(
            {1: _list_page("1/TB", "2/TB")},
            {
                _detail_url(1000): NetworkError("timeout"),
                _detail_url(1001): _detail_page("2/TB"),
            },
        )

        result = fetcher.fetch()

        assert [d.document_number for d in result.documents] == ["1/TB", "2/TB"]
        partial = result.documents[0]
        assert partial.file_url is None
        assert partial.issue_date == "01/02/2024"
        assert result.errors[0].url == _detail_url(1000)
        assert result.errors[0].page == 1

    def test_row_without_detail_link(self) -> None:
        fetcher, client = _make_fetcher({}, {})
        row = ListRow("7/TB", "Cục", "01/01/2024", "Trích yếu")

        document, error = fetcher.fetch_document(row, 1)

        assert error is None
        assert document.document_number == "7/TB"
        client.get_text.assert_not_called()

    def test_repeated_fetch_is_idempotent(self) -> None:
        fetcher, _client = _make_fetcher(
            {1: _list_page("1/TB", "2/TB")},
            {
                _detail_url(1000): _detail_page("1/TB"),
                _detail_url(1001): _detail_page("2/TB"),
            },
        )

        assert fetcher.fetch().documents == fetcher.fetch().documents
