"""
Subscriptions - background producers with cancellation and error delivery.

A subscription runs a producer function on a daemon thread.  The producer
receives a ``threading.Event`` that is set when the consumer unsubscribes
and returns ``None`` on clean completion or an exception describing why it
stopped.  Whatever it returns (or raises) is delivered exactly once on the
``err()`` queue.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

Producer = Callable[[threading.Event], Optional[BaseException]]


class Subscription:
    """Handle on a running producer thread."""

    def __init__(self, producer: Producer, name: str = "subscription") -> None:
        self._quit = threading.Event()
        self._err: "queue.Queue[Optional[BaseException]]" = queue.Queue(maxsize=1)
        self._thread = threading.Thread(
            target=self._run, args=(producer,), name=name, daemon=True
        )
        self._thread.start()

    def _run(self, producer: Producer) -> None:
        try:
            err = producer(self._quit)
        except Exception as exc:
            logger.debug("%s stopped with error: %s", self._thread.name, exc)
            err = exc
        self._err.put(err)

    def err(self) -> "queue.Queue[Optional[BaseException]]":
        """Queue receiving the terminal error (``None`` on clean completion)."""
        return self._err

    @property
    def active(self) -> bool:
        return self._thread.is_alive()

    def unsubscribe(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the producer to stop and wait for it to exit."""
        self._quit.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)
        logger.debug("%s unsubscribed", self._thread.name)


def new_subscription(producer: Producer, name: str = "subscription") -> Subscription:
    """Start ``producer`` on a background thread and return its handle."""
    return Subscription(producer, name=name)


def polling_subscription(
    poll: Callable[[], Iterable],
    sink: queue.Queue,
    interval: float,
    uninstall: Optional[Callable[[], None]] = None,
    name: str = "log-poller",
) -> Subscription:
    """
    Subscription that calls ``poll`` every ``interval`` seconds and pushes
    each returned item into ``sink``.

    Args:
        poll: Returns the items that arrived since the previous call
        sink: Destination queue
        interval: Seconds between polls
        uninstall: Called once when the producer exits (e.g. to drop a filter)
        name: Thread name
    """

    def producer(quit_event: threading.Event) -> None:
        try:
            while not quit_event.is_set():
                for item in poll():
                    sink.put(item)
                quit_event.wait(interval)
        finally:
            if uninstall is not None:
                uninstall()
        return None

    return new_subscription(producer, name=name)
