from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Poller:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, callback: Callable[[], object], interval: float, name: str = "poller") -> None:
        self.callback = callback
        self.interval = max(0.01, float(interval))
        self.name = name
        self._stop_flag = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_flag.is_set()

    def start(self) -> None:
        if self.running:
            return
        # Each loop owns its flag, so a loop still finishing a tick after a
        # timed-out stop() exits instead of resuming next to the new one.
        self._stop_flag = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_flag,), name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_flag.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is not None and not thread.is_alive():
            self._thread = None

    def _loop(self, stop_flag: threading.Event) -> None:
        while not stop_flag.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("%s tick failed", self.name)


class Debouncer:
    """Delays ``callback`` until ``wait`` seconds pass without another trigger."""

    def __init__(self, callback: Callable[..., object], wait: float) -> None:
        self.callback = callback
        self.wait = max(0.0, float(wait))
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.wait, self._fire, args=(args, kwargs))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, args, kwargs) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        self.callback(*args, **kwargs)
