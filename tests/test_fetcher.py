"""Tests for the embed page fetcher."""

from unittest.mock import MagicMock, Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from magyartv.config import EMBED_HEADERS, EMBED_URL
from magyartv.errors import (
    InvalidHTMLContentError,
    InvalidHTTPResponseError,
    InvalidURLError,
    NetworkError,
    UnexpectedContentTypeError,
)
from magyartv.fetcher import EmbedFetcher, build_embed_url, mime_type


def make_response(
    status_code: int = 200,
    content: bytes = b"<html></html>",
    content_type: str | None = "text/html; charset=utf-8",
) -> Mock:
    """Build a fake requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.content = content
    response.url = f"{EMBED_URL}?video=mtv4live&noflash=yes"
    response.headers = CaseInsensitiveDict()
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    return response


def make_fetcher(response: Mock | None = None, error: Exception | None = None) -> EmbedFetcher:
    """Build a fetcher around a mocked session."""
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return EmbedFetcher(session=session, timeout=7.5)


def test_build_embed_url() -> None:
    """Test the embed URL format."""
    assert build_embed_url("mtv4live") == (
        "https://player.mediaklikk.hu/playernew/player.php?video=mtv4live&noflash=yes"
    )


def test_build_embed_url_custom_base() -> None:
    """Test building against a different embed endpoint."""
    url = build_embed_url("mtv1live", "http://localhost:8080/player.php")

    assert url == "http://localhost:8080/player.php?video=mtv1live&noflash=yes"


@pytest.mark.parametrize("channel", ["", "mtv 4", "mtv\n4", "mtv\x004"])
def test_build_embed_url_invalid_channel(channel: str) -> None:
    """Test that unusable channel ids are rejected."""
    with pytest.raises(InvalidURLError):
        build_embed_url(channel)


def test_build_embed_url_invalid_base() -> None:
    """Test that a base URL without scheme is rejected."""
    with pytest.raises(InvalidURLError):
        build_embed_url("mtv4live", "player.mediaklikk.hu/player.php")


def test_fetch_sends_pinned_headers() -> None:
    """Test the request carries the exact browser header set and timeout."""
    fetcher = make_fetcher(make_response())

    fetcher.fetch("mtv4live")

    fetcher.session.get.assert_called_once()
    args, kwargs = fetcher.session.get.call_args
    assert args[0] == build_embed_url("mtv4live")
    assert kwargs["timeout"] == 7.5
    headers = kwargs["headers"]
    assert headers["Host"] == "player.mediaklikk.hu"
    assert headers["Referer"] == "https://m4sport.hu/"
    assert headers["Sec-Fetch-Dest"] == "iframe"
    assert headers["Sec-Fetch-Mode"] == "navigate"
    assert headers["Sec-Fetch-Site"] == "cross-site"
    assert headers["Priority"] == "u=0, i"
    for name, value in EMBED_HEADERS.items():
        assert headers[name] == value


def test_fetch_returns_html() -> None:
    """Test a valid response yields the decoded document."""
    fetcher = make_fetcher(make_response(content='<p>árvíztűrő</p>'.encode()))

    assert fetcher.fetch("mtv4live") == "<p>árvíztűrő</p>"


def test_fetch_empty_body_is_valid_document() -> None:
    """Test that an empty 200 text/html body is not a fetch error."""
    fetcher = make_fetcher(make_response(content=b""))

    assert fetcher.fetch("mtv4live") == ""


def test_fetch_404() -> None:
    """Test a 404 response is reported with its status code."""
    fetcher = make_fetcher(make_response(status_code=404))

    with pytest.raises(InvalidHTTPResponseError) as exc_info:
        fetcher.fetch("mtv4live")

    assert exc_info.value.status_code == 404
    assert "404" in str(exc_info.value)


def test_fetch_404_without_content_type() -> None:
    """Test a 404 without a content type is still an HTTP response error."""
    fetcher = make_fetcher(make_response(status_code=404, content_type=None))

    with pytest.raises(InvalidHTTPResponseError):
        fetcher.fetch("mtv4live")


@pytest.mark.parametrize("status_code", [200, 204, 404, 500])
def test_fetch_json_content_type(status_code: int) -> None:
    """Test a non-HTML content type fails regardless of status."""
    fetcher = make_fetcher(
        make_response(status_code=status_code, content_type="application/json")
    )

    with pytest.raises(UnexpectedContentTypeError):
        fetcher.fetch("mtv4live")


def test_fetch_missing_content_type() -> None:
    """Test a 200 response without content type is rejected."""
    fetcher = make_fetcher(make_response(content_type=None))

    with pytest.raises(UnexpectedContentTypeError):
        fetcher.fetch("mtv4live")


def test_fetch_invalid_utf8() -> None:
    """Test a body that isn't UTF-8 is rejected."""
    fetcher = make_fetcher(make_response(content=b"\xff\xfe<html>"))

    with pytest.raises(InvalidHTMLContentError):
        fetcher.fetch("mtv4live")


def test_fetch_transport_error() -> None:
    """Test transport failures are wrapped as network errors."""
    cause = requests.ConnectionError("connection refused")
    fetcher = make_fetcher(error=cause)

    with pytest.raises(NetworkError) as exc_info:
        fetcher.fetch("mtv4live")

    assert exc_info.value.cause is cause


def test_fetch_timeout_is_network_error() -> None:
    """Test a timeout is reported as a network error."""
    fetcher = make_fetcher(error=requests.Timeout("read timed out"))

    with pytest.raises(NetworkError):
        fetcher.fetch("mtv4live")


def test_fetch_invalid_channel_makes_no_request() -> None:
    """Test an invalid channel fails before any network call."""
    fetcher = make_fetcher(make_response())

    with pytest.raises(InvalidURLError):
        fetcher.fetch("")

    fetcher.session.get.assert_not_called()


def test_mime_type() -> None:
    """Test content type parameters are ignored."""
    assert mime_type("text/html; charset=UTF-8") == "text/html"
    assert mime_type("TEXT/HTML") == "text/html"
    assert mime_type(None) is None
    assert mime_type("") is None
