"""Background timer that re-runs the rate update cycle."""

from __future__ import annotations

import threading
from typing import Any, Callable

from dollar_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RateUpdater:
    """Run ``cycle`` immediately and then every ``interval_minutes``."""

    def __init__(self, cycle: Callable[[], Any], *, interval_minutes: float = 30) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._cycle = cycle
        self.interval_seconds = interval_minutes * 60
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> None:
        LOGGER.info("Updating bank rates...")
        try:
            self._cycle()
        except Exception:
            LOGGER.exception("Bank rates update failed")
        else:
            LOGGER.info("Bank rates update complete.")

    def run_forever(self) -> None:
        """Block the calling thread until :meth:`stop` is called."""

        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name="rate-updater", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait up to ``timeout`` seconds for it.

        A thread still busy with a cycle stays referenced, so :meth:`start`
        will not spawn a second loop next to it.
        """

        self._stop.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            LOGGER.warning("Rate updater still finishing a cycle after %ss", timeout)
            return
        self._thread = None


__all__ = ["RateUpdater"]
