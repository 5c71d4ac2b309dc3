"""Connectivity tracking used to short-circuit fetches while offline.

``NetworkReachabilityMonitor`` keeps the last known connectivity state and
announces transitions. A background thread can refresh the state by probing
a lightweight URL, the same way discovery probes hosts with short timeouts.

Dependencies:
    - ``requests`` for the default HEAD probe.
    - ``threading`` for the optional monitor loop.

Call context:
    - ``RemoteUserClient`` reads ``is_connected`` before every fetch.
    - The composition root starts/stops monitoring with the app lifecycle.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import requests

from userdeck.domain.events import Dispatch, EventEmitter, Subscription

DEFAULT_PROBE_URL = "https://randomuser.me/"

ProbeFn = Callable[[], bool]


def http_probe(url: str = DEFAULT_PROBE_URL, timeout_s: float = 2.0) -> ProbeFn:
    """Build a probe that reports True when ``url`` answers at all.

    Any HTTP status counts as reachable; only transport errors mean offline.
    """

    def _probe() -> bool:
        try:
            requests.head(url, timeout=timeout_s, allow_redirects=False)
        except requests.RequestException:
            return False
        return True

    return _probe


class NetworkReachabilityMonitor:
    """Track connectivity transitions and notify subscribers on change."""

    def __init__(
        self,
        probe: Optional[ProbeFn] = None,
        *,
        interval_s: float = 5.0,
        initially_connected: bool = True,
        dispatch: Optional[Dispatch] = None,
    ) -> None:
        """Create a monitor.

        Args:
            probe: Connectivity check; defaults to ``http_probe()``.
            interval_s: Seconds between probes while monitoring.
            initially_connected: State assumed before the first probe.
            dispatch: Delivery hook for transition callbacks.
        """
        self._log = logging.getLogger(__name__)
        self._probe = probe or http_probe()
        self._interval_s = max(0.05, float(interval_s))
        self._lock = threading.Lock()
        self._connected = bool(initially_connected)
        self._events: EventEmitter[bool] = EventEmitter(dispatch)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._connected

    @property
    def is_monitoring(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def subscribe(self, callback: Callable[[bool], None]) -> Subscription:
        return self._events.subscribe(callback)

    def update(self, connected: bool) -> bool:
        """Record a connectivity reading. Returns True on a transition."""
        connected = bool(connected)
        with self._lock:
            if connected == self._connected:
                return False
            self._connected = connected
        self._log.info("Network %s", "reachable" if connected else "unreachable")
        self._events.emit(connected)
        return True

    def check_now(self) -> bool:
        """Probe once and return the resulting state."""
        try:
            connected = bool(self._probe())
        except Exception as exc:
            self._log.debug("Reachability probe raised: %s", exc)
            connected = False
        self.update(connected)
        return connected

    # ------------------------------------------------------------------
    # Background monitoring
    # ------------------------------------------------------------------
    def start_monitoring(self) -> None:
        if self.is_monitoring:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="reachability-monitor", daemon=True
        )
        self._thread.start()

    def stop_monitoring(self, timeout_s: Optional[float] = None) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        thread.join(timeout_s)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_now()
            self._stop.wait(self._interval_s)


__all__ = ["DEFAULT_PROBE_URL", "NetworkReachabilityMonitor", "http_probe"]
