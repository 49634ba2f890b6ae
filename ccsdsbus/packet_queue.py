"""Bounded FIFO of byte packets, limited both in element count and bytes."""

from __future__ import annotations

import threading
from collections import deque

DEFAULT_MAX_ELEMENTS = 80


class QueueFullError(Exception):
    """Raised when a packet does not fit in the queue."""


class PacketQueue:
    """Thread-safe FIFO of packets with a byte capacity and an element limit."""

    def __init__(self, capacity: int, max_elements: int = DEFAULT_MAX_ELEMENTS) -> None:
        if capacity < 0 or max_elements < 0:
            raise ValueError("capacity and max_elements must not be negative")
        self.capacity = capacity
        self.max_elements = max_elements
        self._items: deque[bytes] = deque()
        self._data_size = 0
        self._lock = threading.Lock()

    @property
    def data_size(self) -> int:
        """Number of bytes currently queued."""
        return self._data_size

    def add(self, element: bytes) -> None:
        """Append a packet; raise QueueFullError if it does not fit."""
        packet = bytes(element)
        with self._lock:
            if len(self._items) >= self.max_elements:
                raise QueueFullError(f"queue holds {len(self._items)} elements already")
            if self._data_size + len(packet) > self.capacity:
                raise QueueFullError(
                    f"{len(packet)} bytes do not fit: {self._data_size} of {self.capacity} used"
                )
            self._items.append(packet)
            self._data_size += len(packet)

    def get(self) -> bytes | None:
        """Remove and return the oldest packet, or None when empty."""
        with self._lock:
            if not self._items:
                return None
            packet = self._items.popleft()
            self._data_size -= len(packet)
            return packet

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        """Drain the queue, yielding packets oldest first."""
        while (packet := self.get()) is not None:
            yield packet