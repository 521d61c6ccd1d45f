"""
Dataclass configuration for NS2 trace analysis.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class TraceInputConfig:
    """Configuration for reading the trace."""

    # Path to the NS2 trace file
    path: str = "trace.tr"
    # Fail on event codes other than r, +, - and d instead of reading them as receives
    strict_event_codes: bool = False


@dataclass
class AggregationConfig:
    """Configuration for the stats and jitter passes."""

    # Packet types included in both passes; other types are ignored
    packet_types: List[str] = field(default_factory=lambda: ["tcp", "udp", "cbr"])
    # Run the two passes on separate threads
    concurrent: bool = True


@dataclass
class OutputConfig:
    """Configuration for exported results."""

    # Output directory for stats, jitter samples and charts
    output_dir: str = "results"
    # Write trace_stats.json
    export_stats: bool = True
    # Write jitter.csv
    export_jitter: bool = True
    # Write one HTML jitter chart per flow
    render_charts: bool = False
    # Clamp chart y-axes to (-0.5, 0.5)
    zoom_charts: bool = False


@dataclass
class AnalysisConfig:
    """Root configuration for trace analysis."""

    trace: TraceInputConfig = field(default_factory=TraceInputConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
