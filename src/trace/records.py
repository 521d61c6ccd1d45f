"""
Data classes for NS2 trace analysis.

This module contains the typed records produced by the trace parser and
the result structures produced by the aggregators. Each class carries
field-level docstrings describing the meaning of its values.
"""

import math
import typing as tp
from dataclasses import asdict, dataclass, field
from enum import Enum, IntFlag

ACCEPTED_PACKET_TYPES: tp.Tuple[str, ...] = ("tcp", "udp", "cbr")

FlowKey = tp.Tuple[int, int, str]


class EventType(Enum):
    """Event type of a trace entry. RECEIVE is the zero value."""

    RECEIVE = 0
    ENQUEUE = 1
    DEQUEUE = 2
    DROP = 3
    COLLISION = 4  # MAC level


EVENT_CODES: tp.Dict[str, EventType] = {
    "r": EventType.RECEIVE,
    "+": EventType.ENQUEUE,
    "-": EventType.DEQUEUE,
    "d": EventType.DROP,
}


class TraceFlag(IntFlag):
    """Reserved trace flags. Not decoded by the parser."""

    NONE = 0x0000
    ECN = 0x0001  # Explicit Congestion Notification echo is enabled
    PRI = 0x0002  # Priority in IP header is enabled
    CONA = 0x0004  # Congestion action
    TCPF = 0x0008  # TCP fast start is used
    ECNO = 0x0010  # Explicit Congestion Notification is on


@dataclass(frozen=True)
class Address:
    """NS2 pseudo-address in ``address.port`` form."""

    address: int = 0
    """Node address component."""

    port: int = 0
    """Port component."""


@dataclass(frozen=True)
class TraceRecord:
    """
    One parsed line of an NS2 trace file.

    Records are immutable once parsed and are shared read-only between
    the aggregation passes.
    """

    event: EventType
    """Kind of event (receive, enqueue, dequeue, drop, collision)."""

    time: float
    """Simulation timestamp in seconds."""

    from_node: int
    """Node the packet leaves on this hop."""

    to_node: int
    """Node the packet arrives at on this hop."""

    packet_type: str
    """Packet type tag as written in the trace (e.g., 'tcp', 'cbr')."""

    packet_size: int
    """Packet size in bytes."""

    flags: int
    """Flags bitmask (see TraceFlag). Always 0, the raw field is not decoded."""

    flow_id: int
    """Flow identifier assigned by the simulator."""

    source_addr: Address
    """Source pseudo-address."""

    dest_addr: Address
    """Destination pseudo-address."""

    sequence_num: int
    """Sequence number of the packet within its flow."""

    unique_packet_id: int
    """Identifier correlating a packet's enqueue and receive events."""


@dataclass
class JitterStat:
    """
    Jitter time series for one (from node, to node, packet type) flow.

    The running state (last receive time and sequence number) is private
    to the jitter aggregator and is only advanced through ``record``.
    """

    from_node: int
    """Source node of the flow."""

    to_node: int
    """Destination node of the flow."""

    packet_type: str
    """Packet type of the flow."""

    jitter: tp.Dict[int, float] = field(default_factory=dict)
    """Jitter value indexed by sequence number. Keys may be sparse."""

    _last_time: float = field(default=0.0, init=False, repr=False)
    _last_seq: int = field(default=0, init=False, repr=False)

    @property
    def key(self) -> FlowKey:
        return (self.from_node, self.to_node, self.packet_type)

    def record(self, sequence_num: int, time: float) -> bool:
        """
        Fold one receive event into the series.

        A repeated sequence number counts as a step of one. Sequence
        numbers that go backwards are ignored and leave the state untouched.

        Returns:
            True if a jitter value was stored for ``sequence_num``
        """
        diff = sequence_num - self._last_seq
        if diff == 0:
            diff = 1
        if diff < 0:
            return False

        self.jitter[sequence_num] = (time - self._last_time) / diff
        self._last_time = time
        self._last_seq = sequence_num
        return True


@dataclass
class TraceStats:
    """
    Aggregate statistics for a whole trace.

    Ratios are NaN when their denominator is zero.
    """

    total_entries: int = 0
    """Records with an accepted packet type."""

    received_packets: int = 0
    """Receive events."""

    dropped_packets: int = 0
    """Drop events."""

    collisions: int = 0
    """Collision events."""

    lost_packets: int = 0
    """Dequeued packets that were never received (may be negative)."""

    throughput: float = math.nan
    """Received packets as a percentage of dequeued packets."""

    avg_hops: float = math.nan
    """Paired enqueue/dequeue hops per received packet."""

    avg_delay: float = math.nan
    """Mean time between first enqueue and receive, in seconds."""

    active_nodes: int = 0
    """Distinct node ids seen as either endpoint of an event."""

    total_bandwidth: int = 0
    """Sum of packet sizes in bytes."""

    network_time: float = 0.0
    """Largest timestamp seen, i.e. the simulated duration."""

    def to_dict(self) -> tp.Dict[str, tp.Any]:
        return asdict(self)
