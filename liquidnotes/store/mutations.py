"""Single-writer channel that serializes every note store mutation.

Background workers never touch note records directly. They submit closures to
the channel, which runs them one at a time, in submission order, on its own
writer thread.
"""

import threading
from queue import Empty, Queue
from typing import Callable

from loguru import logger

POLL_INTERVAL_SECONDS = 0.1


class MutationChannel:
    """FIFO queue of mutation closures drained by a single daemon thread."""

    def __init__(self, name: str = "note-writer") -> None:
        self._name = name
        self._queue: Queue[Callable[[], None]] = Queue()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the writer thread."""
        if self.is_running:
            logger.warning(f"Mutation channel '{self._name}' already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Mutation channel '{self._name}' started")

    def stop(self, timeout: float = 10) -> None:
        """Run what is already queued, then stop the writer thread."""
        if self._thread is None:
            return
        self.flush(timeout=timeout)
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(f"Mutation channel '{self._name}' did not stop within {timeout}s")
        self._thread = None

    def submit(self, job: Callable[[], None]) -> None:
        """Queue a closure to run on the writer thread."""
        self._queue.put(job)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every job submitted so far has run.

        Returns:
            False if the timeout expired first
        """
        if not self.is_running:
            return self._queue.unfinished_tasks == 0

        done = threading.Event()

        def mark_done() -> None:
            done.set()

        self.submit(mark_done)
        return done.wait(timeout)

    def is_writer_thread(self) -> bool:
        """True when called from this channel's writer thread."""
        return self._thread is not None and threading.current_thread() is self._thread

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                job = self._queue.get(timeout=POLL_INTERVAL_SECONDS)
            except Empty:
                continue

            try:
                job()
            except Exception:
                logger.exception(f"Mutation failed on channel '{self._name}'")
            finally:
                self._queue.task_done()
