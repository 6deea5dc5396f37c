"""Embed page fetching with pinned browser headers."""

import logging
import re
from urllib.parse import quote, urlsplit

import requests

from .config import DEFAULT_REQUEST_TIMEOUT, EMBED_URL, embed_headers
from .errors import (
    InvalidHTMLContentError,
    InvalidHTTPResponseError,
    InvalidURLError,
    NetworkError,
    UnexpectedContentTypeError,
)
from .types import Channel

logger = logging.getLogger(__name__)

HTML_MIME_TYPE = "text/html"
HTTP_SUCCESS_MIN = 200
HTTP_SUCCESS_MAX = 299

_INVALID_CHANNEL_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


def build_embed_url(channel: Channel, embed_url: str = EMBED_URL) -> str:
    """
    Build the embed page URL for a channel.

    Args:
        channel: Channel identifier, e.g. "mtv4live".
        embed_url: Base URL of the embed player page.

    Returns:
        The URL ``<embed_url>?video=<channel>&noflash=yes``.

    Raises:
        InvalidURLError: If the channel or base URL cannot form a valid URL.
    """
    if not channel or _INVALID_CHANNEL_CHARS.search(channel):
        logger.error("Invalid channel identifier: %r", channel)
        raise InvalidURLError

    url = f"{embed_url}?video={quote(channel, safe='')}&noflash=yes"
    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.error("Invalid URL: %s (%s)", url, e)
        raise InvalidURLError from e

    if parts.scheme not in ("http", "https") or not parts.netloc:
        logger.error("Invalid URL: %s", url)
        raise InvalidURLError
    return url


def mime_type(content_type: str | None) -> str | None:
    """Return the bare MIME type of a Content-Type header value."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


class EmbedFetcher:
    """
    Fetches the channel embed page and validates the response.

    One GET per call, no retries. Transport failures are reported as
    NetworkError, bad responses as the matching ResolutionError subclass.

    Attributes:
        session: The requests session used for the GET.
        timeout: Request timeout in seconds.
        embed_url: Base URL of the embed player page.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        embed_url: str = EMBED_URL,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            session: Session to reuse (a new one is created if None).
            timeout: Request timeout in seconds (default: 15).
            embed_url: Base URL of the embed player page.
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.embed_url = embed_url

    def fetch(self, channel: Channel) -> str:
        """
        Fetch the embed page HTML for a channel.

        Args:
            channel: Channel identifier.

        Returns:
            The decoded HTML document.

        Raises:
            InvalidURLError: The channel does not form a valid URL.
            NetworkError: The request failed at the transport level.
            InvalidHTTPResponseError: The status is outside 200-299.
            UnexpectedContentTypeError: The response is not text/html.
            InvalidHTMLContentError: The body is not valid UTF-8.
        """
        url = build_embed_url(channel, self.embed_url)
        logger.debug("Initiating network request to: %s", url)

        try:
            response = self.session.get(
                url,
                headers=embed_headers(self.embed_url),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise NetworkError(e) from e

        return self._validate(response)

    def _validate(self, response: requests.Response) -> str:
        """
        Check status, content type and encoding of an embed page response.

        Args:
            response: The response to validate.

        Returns:
            The decoded body.
        """
        content_type = response.headers.get("Content-Type")
        mime = mime_type(content_type)

        # An explicit non-HTML type wins over the status code
        if mime is not None and mime != HTML_MIME_TYPE:
            logger.error("Unexpected content type %s from %s", content_type, response.url)
            raise UnexpectedContentTypeError(content_type)

        if not HTTP_SUCCESS_MIN <= response.status_code <= HTTP_SUCCESS_MAX:
            logger.error("HTTP %d from %s", response.status_code, response.url)
            raise InvalidHTTPResponseError(response.status_code)

        if mime is None:
            logger.error("Missing content type from %s", response.url)
            raise UnexpectedContentTypeError

        try:
            html = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error("Response body is not valid UTF-8: %s", e)
            raise InvalidHTMLContentError from e

        logger.debug("Received %d characters of HTML", len(html))
        return html

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
