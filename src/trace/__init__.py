"""
NS2 trace analysis modules.

This package provides components for:
- Parsing NS2 trace files into typed records
- Aggregate traffic statistics (throughput, loss, hops, delay)
- Per-flow jitter series
- Running both passes concurrently and exporting the results
- In-memory storage of finished analyses
"""

from src.trace.calculations import (
    compute_jitter,
    compute_stats,
    jitter_series,
    safe_ratio,
)
from src.trace.parsers import (
    FormatError,
    parse_address,
    parse_trace,
    parse_trace_file,
    parse_trace_line,
)
from src.trace.processor import (
    Analysis,
    analyze_file,
    analyze_lines,
    export_jitter_csv,
    export_stats_json,
    process_and_export,
    run_analysis,
)
from src.trace.records import (
    ACCEPTED_PACKET_TYPES,
    Address,
    EventType,
    FlowKey,
    JitterStat,
    TraceFlag,
    TraceRecord,
    TraceStats,
)
from src.trace.store import AnalysisNotFoundError, AnalysisStore

__all__ = [
    "ACCEPTED_PACKET_TYPES",
    "Address",
    "Analysis",
    "AnalysisNotFoundError",
    "AnalysisStore",
    "EventType",
    "FlowKey",
    "FormatError",
    "JitterStat",
    "TraceFlag",
    "TraceRecord",
    "TraceStats",
    "analyze_file",
    "analyze_lines",
    "compute_jitter",
    "compute_stats",
    "export_jitter_csv",
    "export_stats_json",
    "jitter_series",
    "parse_address",
    "parse_trace",
    "parse_trace_file",
    "parse_trace_line",
    "process_and_export",
    "run_analysis",
    "safe_ratio",
]
