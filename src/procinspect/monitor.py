"""Background re-inspection of a single process for procinspect."""

import logging
import threading
from queue import Queue

from procinspect.errors import InspectionError
from procinspect.inspector import ProcessInspector
from procinspect.models import Process

logger = logging.getLogger(__name__)

MIN_POLL_RATE = 0.1

WatchUpdate = Process | InspectionError


class ProcessWatcher:
    """
    Watcher that re-inspects one pid on a daemon thread.

    Each poll pushes either a fresh Process or the InspectionError raised for
    it onto a thread-safe Queue. Nothing is retained between polls.
    """

    def __init__(
        self,
        pid: int,
        update_queue: Queue[WatchUpdate],
        inspector: ProcessInspector | None = None,
        poll_rate: float = 2.0,
    ) -> None:
        """
        Initialize the ProcessWatcher.

        Args:
            pid: Process to inspect.
            update_queue: Thread-safe queue to push updates to.
            inspector: Inspector to use. Defaults to ProcessInspector().
            poll_rate: How often to re-inspect (in seconds). Default 2.0s.
        """
        self._pid = pid
        self._queue = update_queue
        self._inspector = inspector or ProcessInspector()
        self._poll_rate = max(MIN_POLL_RATE, poll_rate)
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def pid(self) -> int:
        """Get the watched pid."""
        return self._pid

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(MIN_POLL_RATE, value)

    @property
    def is_running(self) -> bool:
        """Check if the watcher thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the watcher thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="ProcessWatcher",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the watcher thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def refresh(self) -> None:
        """Re-inspect now instead of waiting for the next poll."""
        self._wake_event.set()

    def poll_once(self) -> WatchUpdate:
        """Inspect the pid once and queue the outcome."""
        update: WatchUpdate
        try:
            update = self._inspector.inspect(self._pid)
        except InspectionError as exc:
            logger.warning("cannot inspect pid %d: %s", self._pid, exc)
            update = exc
        self._queue.put(update)
        return update

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            # A refresh arriving during the poll leaves the event set
            self._wake_event.clear()
            try:
                self.poll_once()
            except Exception:
                # Keep the loop alive; the next poll may succeed
                logger.exception("unexpected error inspecting pid %d", self._pid)

            if not self._stop_event.is_set():
                self._wake_event.wait(timeout=self._poll_rate)
