"""Resolution of a channel identifier into a playable stream URL."""

import asyncio
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from .errors import NetworkError, PlaybackError, ResolutionError
from .extractor import extract_stream_url
from .fetcher import EmbedFetcher
from .player import StreamPlayer
from .types import Channel, ResolutionResult, ResolvedStream

logger = logging.getLogger(__name__)


class StreamResolver:
    """
    Sequences the embed fetch and URL extraction for a channel.

    The blocking fetch runs on a worker thread; extraction is pure and runs
    inline. Every failure comes back as a ResolutionError inside the
    returned ResolutionResult.

    Attributes:
        fetcher: Fetcher used for the embed page request.
        executor: ThreadPoolExecutor for the blocking HTTP call.
    """

    def __init__(
        self,
        fetcher: EmbedFetcher | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 2,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            fetcher: Embed page fetcher (a default one is created if None).
            executor: Executor for the fetch (a private one is created if None).
            max_workers: Worker threads for the private executor (default: 2).
        """
        self.fetcher = fetcher or EmbedFetcher()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="resolver",
        )

    async def resolve(self, channel: Channel) -> ResolutionResult:
        """
        Resolve a channel into a playable stream URL.

        Args:
            channel: Channel identifier.

        Returns:
            A ResolutionResult holding the stream or the error.
        """
        logger.info("Starting video loading process for %s", channel)
        start_time = time.monotonic()
        loop = asyncio.get_running_loop()

        try:
            html = await loop.run_in_executor(self.executor, self.fetcher.fetch, channel)
            url = extract_stream_url(html)
        except ResolutionError as e:
            logger.error("Completion error: %s", e)
            return ResolutionResult.failure(e)
        except Exception as e:
            logger.exception("Unexpected error resolving %s", channel)
            return ResolutionResult.failure(NetworkError(e))

        elapsed = time.monotonic() - start_time
        logger.info("Successfully extracted video URL: %s", url)
        logger.info("Resolved %s in %.2f seconds", channel, elapsed)
        return ResolutionResult.success(
            ResolvedStream(channel=channel, url=url, elapsed_seconds=elapsed)
        )

    def observe_playback(
        self,
        player: StreamPlayer,
        on_error: Callable[[PlaybackError], None],
    ) -> Callable[[], None]:
        """
        Translate player failures into PlaybackError notifications.

        Args:
            player: The player to observe.
            on_error: Called with a PlaybackError on every failure.

        Returns:
            A callable that removes the observer.
        """

        def on_failure(exit_code: int) -> None:
            error = PlaybackError(f"player exited with code {exit_code}", exit_code=exit_code)
            logger.error("Failed to play video: %s", error)
            on_error(error)

        player.add_failure_listener(on_failure)
        return lambda: player.remove_failure_listener(on_failure)

    def close(self) -> None:
        """Release the executor and HTTP session."""
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)
        self.fetcher.close()
