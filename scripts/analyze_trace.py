"""
NS2 trace analysis with Hydra configuration.

This script parses an NS2 trace file and computes:
- Aggregate statistics (throughput, loss, hops, delay, bandwidth)
- Per-flow jitter series

Results are written as JSON/CSV, with optional per-flow jitter charts.

Usage:
    python scripts/analyze_trace.py trace.path=out.tr output.render_charts=true
"""

import sys

import hydra
from hydra.core.config_store import ConfigStore
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from src.analysis_config import AnalysisConfig
from src.trace import AnalysisStore, FormatError, process_and_export

# Register the config with Hydra
cs = ConfigStore.instance()
cs.store(name="analyze_trace_config", node=AnalysisConfig)


def run(config: DictConfig, store: AnalysisStore) -> str:
    """
    Analyze the configured trace and keep the result in ``store``.

    Returns:
        Id of the stored analysis
    """
    analysis = process_and_export(
        trace_path=config.trace.path,
        output_dir=config.output.output_dir,
        packet_types=tuple(config.aggregation.packet_types),
        concurrent=config.aggregation.concurrent,
        strict_event_codes=config.trace.strict_event_codes,
        export_stats=config.output.export_stats,
        export_jitter=config.output.export_jitter,
        render_charts=config.output.render_charts,
        zoom_charts=config.output.zoom_charts,
    )

    analysis_id = store.create(analysis)
    for from_node, to_node, packet_type in sorted(analysis.jitter_stats):
        stat = analysis.jitter_for(from_node, to_node, packet_type)
        logger.debug(
            f"[{analysis_id}] flow {from_node}->{to_node} {packet_type}: "
            f"{len(stat.jitter)} jitter samples"
        )
    return analysis_id


@hydra.main(
    version_base="1.2",
    config_path="../config",
    config_name="analyze_trace",
)
def main(cfg: DictConfig) -> None:
    """Main entry point with Hydra configuration."""
    schema = OmegaConf.structured(AnalysisConfig)
    cfg = OmegaConf.merge(schema, cfg)

    logger.info("Configuration:")
    logger.info(OmegaConf.to_yaml(cfg))

    store = AnalysisStore()
    try:
        analysis_id = run(cfg, store)
    except FormatError as e:
        logger.error(f"Failed to parse trace: {e}")
        sys.exit(1)

    logger.info(f"Analysis {analysis_id} complete")


if __name__ == "__main__":
    main()
