"""Device operator application: receives telecommands and drives the PDU."""

from __future__ import annotations

import logging
import threading

from .ccsds import PacketError, format_packet
from .packet_queue import PacketQueue, QueueFullError
from .pdu import PUS_SERVICE_ID, PacketCounter, Pdu
from .pus import get_tc_header, is_packet_size_valid, is_pus_tc
from .router import Router

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_CAPACITY = 2048
DEFAULT_MAX_TCS_PER_CYCLE = 16


class DeviceMain:
    """Application that queues its telecommands and hands them to the PDU."""

    def __init__(
        self,
        router: Router,
        apid: int,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        max_tcs_per_cycle: int = DEFAULT_MAX_TCS_PER_CYCLE,
    ) -> None:
        self.router = router
        self.apid = apid
        self.max_tcs_per_cycle = max_tcs_per_cycle
        self.sent_packets = PacketCounter()
        self.received_packets = 0
        self.rejected_packets = 0
        self.packet_queue = PacketQueue(queue_capacity)
        self.pdu = Pdu(router, apid, self.sent_packets)
        self._running = False
        self._thread: threading.Thread | None = None
        router.subscribe(apid, self.handle_packet)

    def handle_packet(self, packet: bytes) -> None:
        """Queue a packet delivered by the router; count it if it is rejected."""
        try:
            self.packet_queue.add(packet)
        except QueueFullError:
            logger.warning("handle_packet: packet rejected")
            self.rejected_packets += 1
            return
        self.received_packets += 1

    def handle_tcs(self) -> int:
        """Process queued telecommands, at most ``max_tcs_per_cycle`` of them.

        Returns the number of packets taken from the queue.
        """
        processed = 0
        while processed < self.max_tcs_per_cycle:
            packet = self.packet_queue.get()
            if packet is None:
                break
            processed += 1
            self._process(packet)
        return processed

    def execute(self) -> None:
        """Run one cycle: handle telecommands, then step the PDU simulation."""
        self.handle_tcs()
        self.pdu.execute()

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
            name="DEV_EXEC",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Make the execution thread leave its loop."""
        self._running = False

    def _run(
        self, start_semaphore: threading.Semaphore, end_semaphore: threading.Semaphore
    ) -> None:
        while self._running:
            start_semaphore.acquire()
            self.execute()
            end_semaphore.release()

    def _process(self, packet: bytes) -> None:
        try:
            logger.debug("received packet:\n%s", format_packet(packet))
            if not is_packet_size_valid(packet) or not is_pus_tc(packet):
                return
            header = get_tc_header(packet)
            if header.service_type == PUS_SERVICE_ID:
                self.pdu.handle_tc(packet)
        except PacketError as exc:
            logger.warning("dropping malformed packet: %s", exc)