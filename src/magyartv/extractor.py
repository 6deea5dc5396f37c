"""Stream URL extraction from embed page HTML."""

import logging
import re
from collections.abc import Iterator
from urllib.parse import unquote, urlsplit

from .errors import RegexError, VideoURLNotFoundError
from .types import StreamURL

logger = logging.getLogger(__name__)

# Matches the player setup JSON, e.g. "file": "https:\/\/...\/index.m3u8?v=..."
FILE_FIELD_PATTERN = r'"file":\s*"(.*?)"'

DECOY_MARKER = "bumper"

# A "%" not followed by two hex digits
MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_candidate(raw: str) -> str:
    """
    Resolve escapes in a captured file value and strip its query string.

    Args:
        raw: The value captured from a "file" field.

    Returns:
        The unescaped, percent-decoded URL without query parameters.
    """
    url = raw.replace("%5C/", "/")
    url = url.replace("\\", "")
    if MALFORMED_ESCAPE.search(url):
        logger.debug("Malformed percent escape, keeping raw candidate: %s", url)
    else:
        try:
            url = unquote(url, errors="strict")
        except UnicodeDecodeError:
            logger.debug("Percent-decoding failed, keeping raw candidate: %s", url)

    # Drop trailing parameters such as ?v=5iip:149.200.69.2
    return url.split("?", 1)[0]


def is_decoy(url: str) -> bool:
    """Return True for bumper/pre-roll assets."""
    return DECOY_MARKER in url.lower()


def is_well_formed_url(url: str) -> bool:
    """Return True if ``url`` is an absolute URL with a scheme and host."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def iter_candidates(
    html: str,
    pattern: str | re.Pattern[str] = FILE_FIELD_PATTERN,
) -> Iterator[StreamURL]:
    """
    Yield every acceptable stream URL in order of appearance.

    Args:
        html: The embed page HTML.
        pattern: Regex with one capture group for the file value.

    Yields:
        Normalized URLs that are neither decoys nor malformed.

    Raises:
        RegexError: If the pattern cannot be compiled.
    """
    try:
        regex = re.compile(pattern, re.DOTALL) if isinstance(pattern, str) else pattern
    except re.error as e:
        logger.error("Regex error: %s", e)
        raise RegexError(e) from e

    for match in regex.finditer(html):
        url = normalize_candidate(match.group(1))

        if is_decoy(url):
            logger.debug("Skipping bumper candidate: %s", url)
            continue

        if not is_well_formed_url(url):
            logger.error("Invalid video URL extracted: %s", url)
            continue

        yield url


def extract_stream_url(
    html: str,
    pattern: str | re.Pattern[str] = FILE_FIELD_PATTERN,
) -> StreamURL:
    """
    Extract the first playable stream URL from embed page HTML.

    Args:
        html: The embed page HTML.
        pattern: Regex with one capture group for the file value.

    Returns:
        The first candidate that survives normalization and filtering.

    Raises:
        VideoURLNotFoundError: If no acceptable candidate exists.
        RegexError: If the pattern cannot be compiled.
    """
    for url in iter_candidates(html, pattern):
        logger.debug("Extracted video URL: %s", url)
        return url

    logger.error("No suitable video URL found in HTML content")
    raise VideoURLNotFoundError
