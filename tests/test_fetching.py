import pytest
import requests

from errors import UnsupportedContentType, UpstreamFetchError
from models import ExtractedText, InputKind, NoContentFound
from services import fetching


class FakeResponse:
    def __init__(self, status_code=200, text="", content_type="text/plain", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self.headers = {"Content-Type": content_type}


@pytest.fixture
def serve(monkeypatch):
    calls = []

    def install(response):
        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(fetching.requests, "get", fake_get)
        return calls

    return install


def test_plain_text_body_is_returned(serve):
    calls = serve(FakeResponse(text="Plain lecture notes", content_type="text/plain; charset=utf-8"))
    result = fetching.fetch_link("https://example.org/notes.txt")

    assert isinstance(result, ExtractedText)
    assert result.text == "Plain lecture notes"
    assert result.source_kind == InputKind.link
    assert result.url == "https://example.org/notes.txt"
    assert len(calls) == 1
    assert "timeout" in calls[0][1]


def test_html_is_reduced_to_visible_text(serve):
    html = (
        "<html><head><title>Cells</title><style>p {color: red}</style></head>"
        "<body><h1>Cell biology</h1><script>var x = 1;</script><p>Cells are small.</p></body></html>"
    )
    serve(FakeResponse(text=html, content_type="text/html"))
    result = fetching.fetch_link("https://example.org/cells")

    assert "Cell biology" in result.text
    assert "Cells are small." in result.text
    assert "var x" not in result.text
    assert "color: red" not in result.text


def test_non_2xx_raises_with_upstream_status(serve):
    serve(FakeResponse(status_code=404, reason="Not Found"))
    with pytest.raises(UpstreamFetchError) as exc_info:
        fetching.fetch_link("https://example.org/missing")
    assert exc_info.value.status == 404
    assert exc_info.value.status_code == 404
    assert "Not Found" in exc_info.value.message


def test_redirect_status_is_not_treated_as_success(serve):
    serve(FakeResponse(status_code=302, text="moved", reason="Found"))
    with pytest.raises(UpstreamFetchError) as exc_info:
        fetching.fetch_link("https://example.org/old")
    assert exc_info.value.status == 302


def test_content_type_is_matched_case_insensitively(serve):
    serve(FakeResponse(text="<p>Mixed case header</p>", content_type="Text/HTML; charset=UTF-8"))
    result = fetching.fetch_link("https://example.org/page")
    assert isinstance(result, ExtractedText)
    assert result.text == "Mixed case header"


def test_unsupported_content_type(serve):
    serve(FakeResponse(text="%PDF", content_type="application/pdf"))
    with pytest.raises(UnsupportedContentType):
        fetching.fetch_link("https://example.org/paper.pdf")


def test_empty_body_is_no_content_not_an_error(serve):
    serve(FakeResponse(text="", content_type="text/plain"))
    result = fetching.fetch_link("https://example.org/empty")
    assert isinstance(result, NoContentFound)
    assert result.url == "https://example.org/empty"


def test_html_without_visible_text_is_no_content(serve):
    serve(FakeResponse(text="<html><script>1</script></html>", content_type="text/html"))
    assert isinstance(fetching.fetch_link("https://example.org/blank"), NoContentFound)


def test_connection_errors_become_bad_gateway(serve):
    serve(requests.ConnectionError("name resolution failed"))
    with pytest.raises(UpstreamFetchError) as exc_info:
        fetching.fetch_link("https://nowhere.invalid")
    assert exc_info.value.status == 502
