# ccsdsbus

A small toolkit for building and routing CCSDS space packets that carry
PUS (Packet Utilisation Standard) secondary headers, together with a
simulated power distribution unit (PDU) that answers telecommands.

## Modules

- `ccsdsbus.crc` – `ccsds_crc16(data, seed=0xFFFF, bias=0)`, the
  table-driven CCSDS CRC-16 (polynomial 0x1021). `bias` is added after
  every byte; use 0 for the standard algorithm.
- `ccsdsbus.byteorder` – `swap`, `host_to_network` and `network_to_host`
  for values of up to eight bytes; longer values raise `ValueError`.
- `ccsdsbus.comparators` – `compare(received, wanted, is_smaller,
  is_equal_allowed)` for threshold checks and `compare_equal(received,
  wanted)`.
- `ccsdsbus.packet_queue` – `PacketQueue(capacity, max_elements=80)`, a
  thread-safe FIFO of byte packets limited both by total bytes and by
  element count. `add` raises `QueueFullError` when a packet does not
  fit, `get` returns the oldest packet or `None`, `len()` gives the number
  of queued packets, `data_size` the queued bytes, and iterating drains
  the queue.
- `ccsdsbus.ccsds` – `PrimaryHeader` (six bytes, `pack`/`unpack`,
  `is_tc`), `create_packet`, `packet_total_length`,
  `is_packet_size_valid`, and `format_primary_header` / `format_packet`,
  which return a text description. Errors raise `PacketError`, a
  `ValueError`.
- `ccsdsbus.pus` – `TcSecondaryHeader` (6 bytes) and `TmSecondaryHeader`
  (12 bytes) with `create`, `pack` and `unpack`;
  `create_tc_data_field` / `create_tm_data_field`; `get_tc_header`,
  `get_tm_header`, `get_tc_data`, `get_tm_data`; `format_tc`,
  `format_tm`, `format_packet` (empty string for packets of invalid
  size); the validators `is_packet_size_valid` and `is_pus_tc`; and
  `set_tm_timestamp`, which sets the time written into TM headers created
  afterwards.
- `ccsdsbus.router` – `Router(queue_capacity, max_subscribers=16,
  data_link=None)`, a publish/subscribe bus. `publish` queues a packet
  (`RouterError` and a `rejected_packets` count when the queue is full),
  `subscribe(apid, handler)` registers a handler for telecommands with
  that APID, and `execute` runs one cycle: packets received from the data
  link are published, then queued telecommands go to their subscriber
  (`subscriber_not_found` counts misses) and telemetry goes to the data
  link. Any object with `receive()`, `send(packet)` and `stop()` methods
  (the `DataLink` protocol) can serve as the link.
- `ccsdsbus.pdu` – `Pdu(router, apid, packet_counter=None)`, a
  four-channel power distribution unit simulation serving PUS service
  140: subservice 1 switches a channel on or off (`ChannelOnOff` data),
  subservice 2 requests a status report, answered with subservice 3
  telemetry carrying `PduStatus`. `execute` sets the battery level and
  gives switched-on channels their nominal voltage and current;
  `status()` returns a snapshot. `PacketCounter` is a 16-bit counter
  that can be shared between parts of one application.
- `ccsdsbus.device` – `DeviceMain(router, apid, queue_capacity=2048,
  max_tcs_per_cycle=16)`, which subscribes to its APID, queues incoming
  packets (`handle_packet`), and each cycle feeds up to
  `max_tcs_per_cycle` PUS telecommands for service 140 to its `pdu`
  before stepping the simulation.

Diagnostics go through the standard `logging` module.

## Example

```python
from ccsdsbus.ccsds import create_packet
from ccsdsbus.pus import create_tc_data_field
from ccsdsbus.router import Router
from ccsdsbus.device import DeviceMain

router = Router(queue_capacity=4096, max_subscribers=8, data_link=None)
device = DeviceMain(router, apid=10, queue_capacity=2048, max_tcs_per_cycle=10)

# Switch channel 0 on: service 140, subservice 1, data = channel, state.
field = create_tc_data_field(bytes([0, 1]), True, True, 140, 1, 1, 1024)
router.publish(create_packet(True, True, 10, 0, field, 1024))

router.execute()   # dispatch the TC to the device queue
device.execute()   # handle the TC and run one PDU simulation step
print(device.pdu.status())
```

Both `Router` and `DeviceMain` can also run on their own threads with
`start(start_semaphore, end_semaphore)`: each waits on the start
semaphore, runs one cycle and releases the end semaphore, until `stop()`
is called.

## What it does not do

- There is no command-line program and no server: the package is a
  library to be driven from your own code.
- No data link is included. Without a `data_link`, the router drops
  telemetry; to exchange packets with the outside world (sockets, serial
  lines and so on) supply your own object with `receive`, `send` and
  `stop`.
- No scheduler is included: something must release the start
  semaphores, or call `execute()` directly, to make cycles happen.

## Tests

```
pip install -e .[test]
pytest
```