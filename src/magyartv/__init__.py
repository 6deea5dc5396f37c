"""
magyartv - Live Hungarian television in your video player.

This package resolves a channel's embed page into a direct stream URL and
plays it in an external player, reloading when the network comes back.
"""

from .config import AppConfig, load_config
from .connectivity import ConnectivityMonitor
from .errors import (
    InvalidHTMLContentError,
    InvalidHTTPResponseError,
    InvalidURLError,
    NetworkError,
    NetworkUnavailableError,
    PlaybackError,
    RegexError,
    ResolutionError,
    UnexpectedContentTypeError,
    VideoURLNotFoundError,
)
from .extractor import extract_stream_url
from .fetcher import EmbedFetcher, build_embed_url
from .player import StreamPlayer
from .resolver import StreamResolver
from .session import ChannelSession
from .types import ReachabilityStatus, ResolutionResult, ResolvedStream

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "ChannelSession",
    "ConnectivityMonitor",
    "EmbedFetcher",
    "InvalidHTMLContentError",
    "InvalidHTTPResponseError",
    "InvalidURLError",
    "NetworkError",
    "NetworkUnavailableError",
    "PlaybackError",
    "ReachabilityStatus",
    "RegexError",
    "ResolutionError",
    "ResolutionResult",
    "ResolvedStream",
    "StreamPlayer",
    "StreamResolver",
    "UnexpectedContentTypeError",
    "VideoURLNotFoundError",
    "build_embed_url",
    "extract_stream_url",
    "load_config",
]
