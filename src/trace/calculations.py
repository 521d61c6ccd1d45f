"""
Aggregation passes over parsed NS2 traces.

Both passes walk the records once, in input order, and never raise on
degenerate input: ratios whose denominator is zero come out as NaN.
"""

import math
import typing as tp

import numpy as np

from src.trace.records import (
    ACCEPTED_PACKET_TYPES,
    EventType,
    FlowKey,
    JitterStat,
    TraceRecord,
    TraceStats,
)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, returning NaN instead of raising when the denominator is 0."""
    if denominator == 0:
        return math.nan
    return numerator / denominator


def compute_stats(
    records: tp.Sequence[TraceRecord],
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
) -> TraceStats:
    """
    Calculate aggregate statistics for a trace.

    Hops are approximated by pairing each dequeue with an outstanding
    enqueue. Delay is measured from a packet's first enqueue to each of
    its receive events.

    Args:
        records: Parsed trace records in input order
        packet_types: Packet types to include; others are ignored entirely

    Returns:
        TraceStats for the trace
    """
    stats = TraceStats()

    enqueue_backlog = 0
    hops = 0
    total_sent = 0
    delay_sum = 0.0
    delay_samples = 0
    sent_time: tp.Dict[int, float] = {}
    nodes: tp.Set[int] = set()

    for record in records:
        if record.packet_type not in packet_types:
            continue
        stats.total_entries += 1

        if record.event is EventType.RECEIVE:
            stats.received_packets += 1
            if record.unique_packet_id in sent_time:
                delay_sum += record.time - sent_time[record.unique_packet_id]
                delay_samples += 1
        elif record.event is EventType.DROP:
            stats.dropped_packets += 1
        elif record.event is EventType.ENQUEUE:
            enqueue_backlog += 1
            if record.unique_packet_id not in sent_time:
                sent_time[record.unique_packet_id] = record.time
        elif record.event is EventType.DEQUEUE:
            total_sent += 1
            if enqueue_backlog > 0:
                enqueue_backlog -= 1
                hops += 1
        elif record.event is EventType.COLLISION:
            stats.collisions += 1

        for node in (record.from_node, record.to_node):
            if node not in nodes:
                nodes.add(node)
                stats.active_nodes += 1

        stats.total_bandwidth += record.packet_size
        if record.time > stats.network_time:
            stats.network_time = record.time

    stats.lost_packets = total_sent - stats.received_packets
    stats.throughput = safe_ratio(stats.received_packets, total_sent) * 100
    stats.avg_hops = safe_ratio(hops, stats.received_packets)
    stats.avg_delay = safe_ratio(delay_sum, delay_samples)

    return stats


def compute_jitter(
    records: tp.Sequence[TraceRecord],
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
) -> tp.Dict[FlowKey, JitterStat]:
    """
    Calculate per-flow jitter from receive events.

    Flows are keyed by (from node, to node, packet type). Each flow
    starts from time 0 and sequence number 0.

    Args:
        records: Parsed trace records in input order
        packet_types: Packet types to include

    Returns:
        Dictionary mapping flow key to its JitterStat
    """
    flows: tp.Dict[FlowKey, JitterStat] = {}

    for record in records:
        if record.event is not EventType.RECEIVE:
            continue
        if record.packet_type not in packet_types:
            continue

        key = (record.from_node, record.to_node, record.packet_type)
        stat = flows.get(key)
        if stat is None:
            stat = JitterStat(
                from_node=record.from_node,
                to_node=record.to_node,
                packet_type=record.packet_type,
            )
            flows[key] = stat

        stat.record(record.sequence_num, record.time)

    return flows


def jitter_series(stat: JitterStat) -> tp.Tuple[np.ndarray, np.ndarray]:
    """
    Return a flow's jitter samples ordered by sequence number.

    Returns:
        Tuple of (sequence numbers, jitter values) as float arrays
    """
    ordered = sorted(stat.jitter)
    seqs = np.array(ordered, dtype=np.float64)
    values = np.array([stat.jitter[seq] for seq in ordered], dtype=np.float64)
    return seqs, values
