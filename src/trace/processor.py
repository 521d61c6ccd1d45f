"""
Trace analysis orchestration and export.

This module runs the parser and both aggregation passes, and writes
the results to JSON/CSV files (plus optional jitter charts).
"""

import csv
import json
import os
import typing as tp
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from loguru import logger

from src.trace.calculations import compute_jitter, compute_stats
from src.trace.parsers import parse_trace, parse_trace_file
from src.trace.records import (
    ACCEPTED_PACKET_TYPES,
    FlowKey,
    JitterStat,
    TraceRecord,
    TraceStats,
)
from src.utils.types import LoguruLogger


@dataclass
class Analysis:
    """Result of analyzing one trace."""

    records: tp.List[TraceRecord]
    """Parsed records in input order."""

    stats: TraceStats
    """Aggregate statistics."""

    jitter_stats: tp.Dict[FlowKey, JitterStat] = field(default_factory=dict)
    """Per-flow jitter series."""

    def jitter_for(self, from_node: int, to_node: int, packet_type: str) -> JitterStat:
        """Look up a flow's jitter stat. Raises KeyError if the flow is unknown."""
        return self.jitter_stats[(from_node, to_node, packet_type)]


def run_analysis(
    records: tp.List[TraceRecord],
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
    concurrent: bool = True,
) -> Analysis:
    """
    Run the stats and jitter passes over parsed records.

    With ``concurrent`` the two passes run on separate worker threads and
    both are joined before the analysis is assembled. The records are only
    read, so no locking is involved.

    Args:
        records: Parsed trace records
        packet_types: Packet types to include in both passes
        concurrent: Run the passes in parallel

    Returns:
        Analysis holding the records and both results
    """
    if concurrent:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="trace-pass") as pool:
            jitter_future = pool.submit(compute_jitter, records, packet_types)
            stats_future = pool.submit(compute_stats, records, packet_types)
            jitter_stats = jitter_future.result()
            stats = stats_future.result()
    else:
        jitter_stats = compute_jitter(records, packet_types)
        stats = compute_stats(records, packet_types)

    logger.info(
        f"Analyzed {len(records)} records: {stats.total_entries} entries, "
        f"{len(jitter_stats)} flows"
    )
    return Analysis(records=records, stats=stats, jitter_stats=jitter_stats)


def analyze_lines(
    lines: tp.Iterable[str],
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
    concurrent: bool = True,
    strict_event_codes: bool = False,
) -> Analysis:
    """Parse raw trace lines and analyze them. FormatError propagates."""
    records = parse_trace(lines, strict_event_codes)
    return run_analysis(records, packet_types, concurrent)


def analyze_file(
    filepath: str,
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
    concurrent: bool = True,
    strict_event_codes: bool = False,
) -> Analysis:
    """Parse a trace file and analyze it. FormatError propagates."""
    records = parse_trace_file(filepath, strict_event_codes)
    return run_analysis(records, packet_types, concurrent)


def log_stats_summary(stats: TraceStats, log: LoguruLogger = logger) -> None:
    log.info(f"Total entries:    {stats.total_entries}")
    log.info(f"Received packets: {stats.received_packets}")
    log.info(f"Dropped packets:  {stats.dropped_packets}")
    log.info(f"Lost packets:     {stats.lost_packets}")
    log.info(f"Collisions:       {stats.collisions}")
    log.info(f"Throughput:       {stats.throughput:.2f}%")
    log.info(f"Average hops:     {stats.avg_hops:.3f}")
    log.info(f"Average delay:    {stats.avg_delay:.6f}s")
    log.info(f"Active nodes:     {stats.active_nodes}")
    log.info(f"Total bandwidth:  {stats.total_bandwidth} bytes")
    log.info(f"Network time:     {stats.network_time}s")


def export_stats_json(stats: TraceStats, output_path: str) -> None:
    """
    Export aggregate statistics to a JSON file.

    Undefined ratios are written as NaN.
    """
    with open(output_path, "w") as f:
        json.dump(stats.to_dict(), f, indent=2)

    logger.info(f"Exported trace stats to {output_path}")


def export_jitter_csv(
    jitter_stats: tp.Dict[FlowKey, JitterStat],
    output_path: str,
) -> None:
    """
    Export jitter samples to a CSV file.

    One row per (flow, sequence number), flows in key order and samples
    in sequence order.

    Args:
        jitter_stats: Per-flow jitter stats
        output_path: Path for output CSV file
    """
    if not jitter_stats:
        logger.warning("No jitter data to export")
        return

    rows = []
    for key in sorted(jitter_stats):
        stat = jitter_stats[key]
        for seq in sorted(stat.jitter):
            rows.append(
                {
                    "from_node": stat.from_node,
                    "to_node": stat.to_node,
                    "packet_type": stat.packet_type,
                    "sequence_num": seq,
                    "jitter": stat.jitter[seq],
                }
            )

    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(
            f,
            fieldnames=["from_node", "to_node", "packet_type", "sequence_num", "jitter"],
        )
        writer.writeheader()
        writer.writerows(rows)

    logger.info(f"Exported {len(rows)} jitter samples to {output_path}")


def process_and_export(
    trace_path: str,
    output_dir: str,
    packet_types: tp.Collection[str] = ACCEPTED_PACKET_TYPES,
    concurrent: bool = True,
    strict_event_codes: bool = False,
    export_stats: bool = True,
    export_jitter: bool = True,
    render_charts: bool = False,
    zoom_charts: bool = False,
) -> Analysis:
    """
    Analyze a trace file and write the results in one step.

    Args:
        trace_path: Path to the NS2 trace file
        output_dir: Directory for the exported files
        packet_types: Packet types to include
        concurrent: Run the aggregation passes in parallel
        strict_event_codes: Reject unknown event codes
        export_stats: Write trace_stats.json
        export_jitter: Write jitter.csv
        render_charts: Write one HTML jitter chart per flow
        zoom_charts: Clamp chart y-axes to the zoomed range

    Returns:
        The Analysis that was exported
    """
    analysis = analyze_file(trace_path, packet_types, concurrent, strict_event_codes)
    log_stats_summary(analysis.stats)

    os.makedirs(output_dir, exist_ok=True)

    if export_stats:
        export_stats_json(analysis.stats, os.path.join(output_dir, "trace_stats.json"))
    if export_jitter:
        export_jitter_csv(analysis.jitter_stats, os.path.join(output_dir, "jitter.csv"))
    if render_charts:
        from src.utils.viz import save_jitter_chart

        charts_dir = os.path.join(output_dir, "charts")
        os.makedirs(charts_dir, exist_ok=True)
        for stat in analysis.jitter_stats.values():
            filename = f"jitter_{stat.from_node}_{stat.to_node}_{stat.packet_type}.html"
            save_jitter_chart(stat, os.path.join(charts_dir, filename), zoom=zoom_charts)
        logger.info(f"Rendered {len(analysis.jitter_stats)} jitter charts to {charts_dir}")

    return analysis
