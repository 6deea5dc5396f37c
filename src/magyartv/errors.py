"""Error taxonomy for stream resolution and playback."""


class ResolutionError(Exception):
    """Base class for every failure surfaced to the caller.

    Attributes:
        kind: Stable machine-readable tag for the failure.
    """

    kind = "resolution_error"
    default_message = "Stream resolution failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidURLError(ResolutionError):
    """The channel identifier does not yield a valid request URL."""

    kind = "invalid_url"
    default_message = "Invalid URL for fetching HTML content"


class NetworkUnavailableError(ResolutionError):
    """The connectivity monitor reports that the network is unreachable."""

    kind = "network_unavailable"
    default_message = "Network is unavailable"


class NetworkError(ResolutionError):
    """Transport-level failure while fetching the embed page."""

    kind = "network_error"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class InvalidHTTPResponseError(ResolutionError):
    """The embed page answered with a status outside 200-299."""

    kind = "invalid_http_response"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Invalid HTTP response. Status code: {status_code}")
        self.status_code = status_code


class UnexpectedContentTypeError(ResolutionError):
    """The embed page is not served as text/html."""

    kind = "unexpected_content_type"

    def __init__(self, content_type: str | None = None) -> None:
        message = "Unexpected content type received"
        if content_type:
            message = f"{message}: {content_type}"
        super().__init__(message)
        self.content_type = content_type


class InvalidHTMLContentError(ResolutionError):
    """The response body cannot be decoded as UTF-8 text."""

    kind = "invalid_html_content"
    default_message = "Invalid HTML content received"


class VideoURLNotFoundError(ResolutionError):
    """No acceptable stream candidate was found in the document."""

    kind = "video_url_not_found"
    default_message = "Video URL not found in HTML content"


class RegexError(ResolutionError):
    """The extraction pattern could not be compiled or applied."""

    kind = "regex_error"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Regex error: {cause}")
        self.cause = cause


class PlaybackError(ResolutionError):
    """The player reported a failure after the stream started."""

    kind = "playback_error"

    def __init__(self, cause: BaseException | str, exit_code: int | None = None) -> None:
        super().__init__(f"Playback error: {cause}")
        self.cause = cause
        self.exit_code = exit_code
