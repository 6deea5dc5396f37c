"""Playback session for a single channel."""

import asyncio
import logging
from collections.abc import Callable

from .connectivity import ConnectivityMonitor
from .errors import NetworkUnavailableError, PlaybackError, ResolutionError
from .player import StreamPlayer
from .resolver import StreamResolver
from .types import Channel, ReachabilityStatus, ResolutionResult, ResolvedStream

logger = logging.getLogger(__name__)


class ChannelSession:
    """
    Ties resolution, connectivity and playback together for one channel.

    All session state (stream, error, player) is mutated on the event loop
    the session was started on. Monitor and player callbacks arrive on
    worker threads and are marshaled with call_soon_threadsafe.

    Only the newest resolution attempt may apply its result: starting a new
    attempt, losing connectivity, or stopping the session cancels the
    pending one and its eventual result is dropped.

    Attributes:
        channel: The channel identifier played by this session.
        resolver: Resolver used for each attempt.
        player: Player the resolved stream is handed to.
        monitor: Connectivity monitor owned by this session, if any.
        stream: The last successfully resolved stream.
        error: The last error surfaced to the user.
    """

    def __init__(
        self,
        channel: Channel,
        resolver: StreamResolver,
        player: StreamPlayer,
        monitor: ConnectivityMonitor | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        on_error: Callable[[ResolutionError], None] | None = None,
        on_stream: Callable[[ResolvedStream], None] | None = None,
    ) -> None:
        self.channel = channel
        self.resolver = resolver
        self.player = player
        self.monitor = monitor
        self.on_error = on_error
        self.on_stream = on_stream
        self.stream: ResolvedStream | None = None
        self.error: ResolutionError | None = None

        self._loop = loop
        self._active = False
        self._generation = 0
        self._pending: asyncio.Task[ResolutionResult] | None = None
        self._unobserve: Callable[[], None] | None = None

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_loading(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def start(self) -> None:
        """
        Activate the session on the running event loop.

        Starts connectivity monitoring; the first reachable report triggers
        resolution. Without a monitor, resolution is scheduled immediately.
        """
        if self._active:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        self._active = True
        logger.info("Session started for %s", self.channel)

        if self.monitor is not None:
            self.monitor.add_listener(self._on_status_threadsafe)
            self.monitor.start()
        else:
            self.schedule_load()

    def stop(self) -> asyncio.Future | None:
        """
        Deactivate the session and release the monitor and player.

        The blocking teardown (joining the monitor thread, terminating the
        player) runs on a worker thread.

        Returns:
            A future that completes when the teardown is done, or None if
            the session was not active.
        """
        if not self._active:
            return None
        self._active = False

        if self.monitor is not None:
            self.monitor.remove_listener(self._on_status_threadsafe)

        self._invalidate_pending()

        if self._unobserve is not None:
            self._unobserve()
            self._unobserve = None

        logger.info("Session stopped for %s", self.channel)
        return self._loop.run_in_executor(None, self._teardown)

    def _teardown(self) -> None:
        if self.monitor is not None:
            self.monitor.stop()
        self.player.stop()

    def schedule_load(self) -> asyncio.Task:
        """
        Schedule a resolution attempt on the session's loop.

        The attempt is owned from the moment it is scheduled: a newer
        attempt, a lost connection or stop() before it starts makes it
        return without fetching.
        """
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._invalidate_pending()
        return self._loop.create_task(self._load(self._generation))

    async def load(self) -> ResolutionResult | None:
        """
        Resolve the channel and start playback.

        Returns:
            The result of this attempt, or None if a newer attempt, a lost
            connection or stop() superseded it.
        """
        self._invalidate_pending()
        return await self._load(self._generation)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._active

    async def _load(self, generation: int) -> ResolutionResult | None:
        if not self._is_current(generation):
            logger.info("Skipping superseded resolution for %s", self.channel)
            return None

        task = asyncio.ensure_future(self.resolver.resolve(self.channel))
        self._pending = task

        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info("Discarded superseded resolution for %s", self.channel)
            return None
        finally:
            if self._pending is task:
                self._pending = None

        if not self._is_current(generation):
            logger.info("Ignoring stale resolution for %s", self.channel)
            return None

        if not result.ok:
            self._set_error(result.error)
            return result

        if not await self._apply_stream(result.stream, generation):
            return None
        return result

    def play(self) -> asyncio.Future | None:
        """
        Start playback, resolving first if nothing has been resolved yet.

        Returns:
            The scheduled resolution or player resume, or None if a
            resolution is already running.
        """
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        if self.stream is None:
            if self.is_loading:
                return None
            return self.schedule_load()
        return self._loop.run_in_executor(None, self._resume_player)

    def pause(self) -> asyncio.Future:
        """Pause playback on a worker thread."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop.run_in_executor(None, self.player.pause)

    def _resume_player(self) -> None:
        try:
            self.player.resume()
        except PlaybackError as e:
            self._loop.call_soon_threadsafe(self._set_error, e)

    def _invalidate_pending(self) -> None:
        """Bump the generation and cancel the in-flight attempt, if any."""
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            logger.debug("Cancelling pending resolution for %s", self.channel)
            self._pending.cancel()
        self._pending = None

    async def _apply_stream(self, stream: ResolvedStream, generation: int) -> bool:
        """Hand the stream to the player; returns False if it was superseded."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.player.start, stream.url)
        except PlaybackError as e:
            if self._is_current(generation):
                self._set_error(e)
            return self._is_current(generation)

        if not self._is_current(generation):
            logger.info("Ignoring stale playback start for %s", self.channel)
            return False

        self.stream = stream
        self.error = None

        if self._unobserve is None:
            self._unobserve = self.resolver.observe_playback(
                self.player, self._on_playback_error_threadsafe
            )

        logger.info(
            "Video loaded and started playing in %.2f seconds", stream.elapsed_seconds
        )
        if self.on_stream:
            self.on_stream(stream)
        return True

    def _set_error(self, error: ResolutionError) -> None:
        self.error = error
        logger.error("%s: %s", self.channel, error)
        if self.on_error:
            self.on_error(error)

    def _handle_status(self, status: str) -> None:
        if not self._active:
            return
        if status == ReachabilityStatus.REACHABLE:
            self.schedule_load()
        else:
            self._invalidate_pending()
            self._set_error(NetworkUnavailableError())

    def _handle_playback_error(self, error: PlaybackError) -> None:
        if self._active:
            self._set_error(error)

    def _on_status_threadsafe(self, status: str) -> None:
        self._loop.call_soon_threadsafe(self._handle_status, status)

    def _on_playback_error_threadsafe(self, error: PlaybackError) -> None:
        self._loop.call_soon_threadsafe(self._handle_playback_error, error)
