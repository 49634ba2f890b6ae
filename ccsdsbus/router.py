"""Software bus: queues packets and routes telecommands to subscribers by APID.

Telemetry packets leaving the queue go to the data link. Packets that
arrive over the data link are published onto the bus.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .ccsds import PacketError, PrimaryHeader
from .packet_queue import PacketQueue, QueueFullError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUBSCRIBERS = 16

PacketHandler = Callable[[bytes], None]


class RouterError(Exception):
    """Raised when a packet cannot be queued or a subscriber cannot be added."""


class DataLink(Protocol):
    """Link that carries packets to and from the outside world."""

    def receive(self) -> bytes | None:
        """Return the next received packet, or None when there is none."""

    def send(self, packet: bytes) -> None:
        """Send a packet over the link."""

    def stop(self) -> None:
        """Shut the link down."""


@dataclass(frozen=True)
class _Subscriber:
    apid: int
    handler: PacketHandler


class Router:
    """Packet router with a bounded queue and a fixed number of subscribers."""

    def __init__(
        self,
        queue_capacity: int,
        max_subscribers: int = DEFAULT_MAX_SUBSCRIBERS,
        data_link: DataLink | None = None,
    ) -> None:
        self.max_subscribers = max_subscribers
        self.data_link = data_link
        self.rejected_packets = 0
        self.subscriber_not_found = 0
        self._queue = PacketQueue(queue_capacity)
        self._subscribers: list[_Subscriber] = []
        self._running = False
        self._thread: threading.Thread | None = None

    def publish(self, packet: bytes) -> None:
        """Queue a packet for routing; raise RouterError if the queue is full."""
        try:
            self._queue.add(packet)
        except QueueFullError as exc:
            self.rejected_packets += 1
            logger.warning("publish: packet rejected")
            raise RouterError("packet rejected: queue full") from exc

    def subscribe(self, apid: int, handler: PacketHandler) -> None:
        """Deliver telecommands for ``apid`` to ``handler``."""
        if len(self._subscribers) >= self.max_subscribers:
            raise RouterError(f"no room for more than {self.max_subscribers} subscribers")
        self._subscribers.append(_Subscriber(apid, handler))

    def execute(self) -> None:
        """Run one routing cycle: pull from the data link, then drain the queue."""
        if self.data_link is not None:
            while (incoming := self.data_link.receive()) is not None:
                try:
                    self.publish(incoming)
                except RouterError:
                    pass
        for packet in self._queue:
            self._dispatch(packet)

    def start(
        self, start_semaphore: threading.Semaphore, end_semaphore: threading.Semaphore
    ) -> threading.Thread:
        """Run cycles in a thread, each one after ``start_semaphore`` is released.

        ``end_semaphore`` is released after every cycle.
        """
        self._running = True
        self._thread = threading.Thread(
            target=self._run,
            args=(start_semaphore, end_semaphore),
            name="SBRO_EXEC",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Make the execution thread leave its loop and stop the data link."""
        self._running = False
        if self.data_link is not None:
            self.data_link.stop()

    def _run(
        self, start_semaphore: threading.Semaphore, end_semaphore: threading.Semaphore
    ) -> None:
        while self._running:
            start_semaphore.acquire()
            self.execute()
            end_semaphore.release()

    def _find_subscriber(self, apid: int) -> _Subscriber | None:
        return next((sub for sub in self._subscribers if sub.apid == apid), None)

    def _dispatch(self, packet: bytes) -> None:
        try:
            header = PrimaryHeader.unpack(packet)
        except PacketError as exc:
            logger.warning("dropping malformed packet: %s", exc)
            return
        if header.is_tc:
            logger.info("received packet for apid: %d", header.apid)
            subscriber = self._find_subscriber(header.apid)
            if subscriber is None:
                logger.warning("subscriber not found for apid %d", header.apid)
                self.subscriber_not_found += 1
                return
            subscriber.handler(packet)
        elif self.data_link is not None:
            self.data_link.send(packet)
        else:
            logger.debug("no data link: telemetry packet dropped")