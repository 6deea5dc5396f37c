"""External video player adapter with failure notification."""

import logging
import subprocess
import threading
from collections.abc import Callable
from typing import TypeAlias

from .errors import PlaybackError
from .types import StreamURL

logger = logging.getLogger(__name__)

SUPPORTED_PLAYERS = ("mpv", "vlc", "ffplay")

FailureListener: TypeAlias = Callable[[int], None]


class StreamPlayer:
    """
    Plays a resolved stream URL in an external player process.

    Supports mpv, vlc, and ffplay. A watcher thread waits on the player
    process and notifies failure listeners when it exits with a non-zero
    code that was not caused by pause() or stop().

    Attributes:
        player_cmd: Preferred video player command (auto-detected if None).
        current_url: The URL most recently passed to start().
        process: The running player process, if any.
    """

    def __init__(self, player_cmd: str | None = None) -> None:
        """
        Initialize the stream player.

        Args:
            player_cmd: Preferred video player (default: first one found).
        """
        self.player_cmd = player_cmd
        self.current_url: StreamURL | None = None
        self.process: subprocess.Popen | None = None
        self._listeners: list[FailureListener] = []
        self._lock = threading.Lock()
        self._watcher: threading.Thread | None = None
        self._expected_exit = False

    def _find_available_player(self) -> str | None:
        """
        Find an available video player on the system.

        Returns:
            Name of the first available player, or None if none found.
        """
        players = list(SUPPORTED_PLAYERS)
        if self.player_cmd:
            players = [self.player_cmd] + [p for p in players if p != self.player_cmd]

        for player in players:
            try:
                result = subprocess.run(
                    ["which", player],
                    capture_output=True,
                    text=True,
                    check=False,
                )
                if result.returncode == 0:
                    logger.info("Found player: %s", player)
                    return player
            except OSError:
                continue
        return None

    def _build_player_command(self, player: str, url: StreamURL) -> list[str]:
        """
        Build the command line for the video player.

        Args:
            player: Name of the player to use.
            url: Stream URL to play.

        Returns:
            List of command arguments.
        """
        if player == "mpv":
            return ["mpv", url]
        if player == "vlc":
            return ["vlc", url]
        if player == "ffplay":
            return ["ffplay", "-autoexit", url]
        return [player, url]

    @property
    def is_playing(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def add_failure_listener(self, listener: FailureListener) -> None:
        """
        Register a callback for playback failures.

        Args:
            listener: Called from the watcher thread with the exit code.
        """
        with self._lock:
            self._listeners.append(listener)

    def remove_failure_listener(self, listener: FailureListener) -> None:
        """Unregister a previously added failure callback."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def start(self, url: StreamURL) -> None:
        """
        Start playing a stream, replacing any current playback.

        Args:
            url: The resolved stream URL.

        Raises:
            PlaybackError: If no player is installed or it cannot be launched.
        """
        self._terminate()

        player = self._find_available_player()
        if not player:
            logger.error("No video player found! Install mpv, vlc, or ffplay")
            raise PlaybackError("no video player found (install mpv, vlc, or ffplay)")

        cmd = self._build_player_command(player, url)
        logger.info("Playing stream with %s: %s", player, url)
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.exception("Failed to launch %s", player)
            raise PlaybackError(e) from e

        with self._lock:
            self.current_url = url
            self.process = process
            self._expected_exit = False

        self._watcher = threading.Thread(
            target=self._watch,
            args=(process,),
            daemon=True,
            name=f"PlayerWatcher-{url[:30]}",
        )
        self._watcher.start()

    def pause(self) -> None:
        """
        Pause playback.

        A live stream cannot be held in place, so the player process is
        stopped and the URL is kept for resume().
        """
        if self._terminate():
            logger.info("Playback paused")

    def resume(self) -> None:
        """Restart playback of the last started URL from the live edge."""
        if self.current_url is None:
            logger.warning("Nothing to resume")
            return
        if self.is_playing:
            return
        self.start(self.current_url)

    def stop(self) -> None:
        """Stop playback and forget the current URL."""
        self._terminate()
        self.current_url = None
        logger.info("Playback stopped")

    def _terminate(self) -> bool:
        """Terminate the player process without reporting it as a failure."""
        with self._lock:
            process = self.process
            self.process = None
            self._expected_exit = True

        if process is None:
            return False

        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
        return True

    def _watch(self, process: subprocess.Popen) -> None:
        """Wait for the player to exit and report unexpected failures."""
        return_code = process.wait()

        with self._lock:
            current = process is self.process
            expected = self._expected_exit or not current
            listeners = list(self._listeners)
            if current:
                self.process = None

        if expected:
            logger.debug("Player exited with code %d after stop request", return_code)
            return

        if return_code == 0:
            logger.info("Stream ended normally")
            return

        logger.warning("Stream failed with code %d", return_code)
        for listener in listeners:
            try:
                listener(return_code)
            except Exception:
                logger.exception("Error in playback failure callback")
