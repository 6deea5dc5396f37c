"""Network reachability monitoring."""

import logging
import threading
import time
from collections.abc import Callable
from typing import TypeAlias

import requests

from .config import DEFAULT_PROBE_INTERVAL, EMBED_URL
from .types import ReachabilityStatus

logger = logging.getLogger(__name__)

Probe: TypeAlias = Callable[[], bool]
StatusListener: TypeAlias = Callable[[str], None]


def http_probe(url: str = EMBED_URL, timeout: float = 3.0) -> bool:
    """
    Check whether a host answers HTTP at all.

    Any response, including error statuses, counts as reachable; only a
    transport failure counts as unreachable.

    Args:
        url: URL to send a HEAD request to.
        timeout: Request timeout in seconds (default: 3.0).

    Returns:
        True if the host responded, False otherwise.
    """
    try:
        requests.head(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        logger.debug("Connectivity probe failed: %s - %s", url, e)
        return False
    return True


class ConnectivityMonitor:
    """
    Observes network reachability and reports transitions.

    Runs the probe in a background thread. The first observation is
    reported immediately; after that a flip is reported only once it has
    been seen on ``confirmations`` consecutive probes, so a flapping link
    does not trigger a burst of resolutions.

    Attributes:
        probe: Callable returning True when the network is reachable.
        interval: Seconds between probes.
        confirmations: Consecutive probes needed to accept a flip.
        status: Last reported status, or None before the first probe.
    """

    def __init__(
        self,
        probe: Probe | None = None,
        interval: float = DEFAULT_PROBE_INTERVAL,
        confirmations: int = 2,
        on_change: StatusListener | None = None,
    ) -> None:
        """
        Initialize the connectivity monitor.

        Args:
            probe: Reachability check (default: HEAD request to the embed host).
            interval: Seconds between probes (default: 5.0).
            confirmations: Probes needed to confirm a flip (default: 2).
            on_change: Listener registered up front (optional).
        """
        if confirmations < 1:
            msg = "confirmations must be at least 1"
            raise ValueError(msg)

        self.probe = probe or http_probe
        self.interval = interval
        self.confirmations = confirmations
        self.status: str | None = None

        self._listeners: list[StatusListener] = []
        if on_change:
            self._listeners.append(on_change)
        self._pending: str | None = None
        self._pending_count = 0
        self._monitoring = False
        self._monitor_thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback invoked with each status transition."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        """Unregister a status callback."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def is_running(self) -> bool:
        return self._monitoring

    def check_now(self) -> str | None:
        """
        Run one probe and report a transition if it is confirmed.

        Returns:
            The new status if a transition was reported, otherwise None.
        """
        try:
            reachable = bool(self.probe())
        except Exception:
            logger.exception("Connectivity probe raised")
            reachable = False

        observed = ReachabilityStatus.REACHABLE if reachable else ReachabilityStatus.UNREACHABLE

        with self._lock:
            if observed == self.status:
                self._pending = None
                self._pending_count = 0
                return None

            if self.status is not None:
                if observed != self._pending:
                    self._pending = observed
                    self._pending_count = 0
                self._pending_count += 1
                if self._pending_count < self.confirmations:
                    logger.debug(
                        "Network looks %s (%d/%d confirmations)",
                        observed,
                        self._pending_count,
                        self.confirmations,
                    )
                    return None

            self.status = observed
            self._pending = None
            self._pending_count = 0
            listeners = list(self._listeners)

        logger.info("Network is %s", observed)
        for listener in listeners:
            try:
                listener(observed)
            except Exception:
                logger.exception("Error in connectivity callback")
        return observed

    def _monitor_loop(self) -> None:
        """Main monitoring loop running in background thread."""
        logger.info("Connectivity monitoring started")

        while self._monitoring:
            self.check_now()

            # Sleep for the interval (with early exit check)
            for _ in range(max(1, int(self.interval * 10))):
                if not self._monitoring:
                    break
                time.sleep(0.1)

        logger.info("Connectivity monitoring stopped")

    def start(self) -> None:
        """Start monitoring in a background thread."""
        with self._lock:
            if self._monitoring:
                logger.warning("Connectivity monitoring already running")
                return

            self._monitoring = True
            self.status = None
            self._monitor_thread = threading.Thread(
                target=self._monitor_loop,
                daemon=True,
                name="ConnectivityMonitor",
            )
            self._monitor_thread.start()

    def stop(self) -> None:
        """Stop monitoring and wait for the thread to finish."""
        with self._lock:
            if not self._monitoring:
                return
            self._monitoring = False

        thread = self._monitor_thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=5.0)
        self._monitor_thread = None
