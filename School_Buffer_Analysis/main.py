#!/usr/bin/env python3
"""
School Buffer Analysis - Main Entry Point

Batch run of the buffer-zone risk analysis: load official and community
school records plus civic-infrastructure layers, merge the school records,
count every category per ring around the configured centre, and export the
results.

Usage:
    python main.py

    Or from the repository root:
    python -m School_Buffer_Analysis.main
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

# Add repository root to path so `python main.py` resolves package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Workspace root for resolving config paths
WORKSPACE_ROOT = Path(__file__).parent.parent

from School_Buffer_Analysis.buffer_zones import RingZoneBuilder
from School_Buffer_Analysis.config import CONFIG
from School_Buffer_Analysis.config_types import AppConfig
from School_Buffer_Analysis.exporters import export_analysis_outputs
from School_Buffer_Analysis.models.data_models import (
    COUNTED_CATEGORIES,
    Feature,
    LatLng,
    LayerSnapshot,
    LayerType,
    School,
)
from School_Buffer_Analysis.models.zone_stats import AnalysisResult
from School_Buffer_Analysis.school_linkage import SchoolRecordLinker
from School_Buffer_Analysis.sources.geodataframe import (
    features_from_geodataframe,
    load_layer_file,
)
from School_Buffer_Analysis.sources.http_client import (
    fetch_community_schools,
    fetch_layer_features,
    fetch_official_schools,
)
from School_Buffer_Analysis.sources.overpass_parser import (
    parse_amenity_features,
    parse_community_schools,
)
from School_Buffer_Analysis.sources.wfs_parser import parse_official_schools
from School_Buffer_Analysis.spatial_aggregation import SpatialAggregator

# ═══════════════════════════════════════════════════════════════════════════
# 🎯 MODULE-LEVEL CONFIG (Single Source of Truth)
# ═══════════════════════════════════════════════════════════════════════════
APP_CONFIG = AppConfig.from_dict(CONFIG)


def resolve_path(relative_path: str) -> Path:
    """Resolve a config path relative to workspace root."""
    return WORKSPACE_ROOT / relative_path


# ═══════════════════════════════════════════════════════════════════════════
# 📋 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging() -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    Returns:
        Tuple of (logger, run_log_folder) where run_log_folder holds the
        log of this run.

    Folder naming convention: run_{MMDD}_{HHMM}, e.g. run_0129_1028
    """
    log_dir = APP_CONFIG.file_paths.log_dir_path(WORKSPACE_ROOT)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%m%d_%H%M")
    run_log_folder = log_dir / f"run_{timestamp}"
    run_log_folder.mkdir(parents=True, exist_ok=True)
    log_path = run_log_folder / "main.log"

    # Package loggers propagate here
    logger = logging.getLogger("School_Buffer_Analysis")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# 📂 DATA LOADING
# ═══════════════════════════════════════════════════════════════════════════


def load_json(path: Path, logger: logging.Logger, name: str) -> Dict[str, Any]:
    """Load a JSON document (GeoJSON or Overpass response)."""
    logger.info(f"📂 Loading {name}: {path}")
    if not path.exists():
        raise FileNotFoundError(f"{name} file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_layer(
    layer_type: LayerType, relative_path: str, logger: logging.Logger
) -> List[Feature]:
    """
    Load one layer file.

    `.json` files are Overpass responses; anything else is read with
    geopandas. A missing file is logged and treated as an empty layer.
    """
    path = resolve_path(relative_path)
    if not path.exists():
        logger.warning(f"   ⚠️ Layer file not found for {layer_type.value}: {path}")
        return []

    if path.suffix.lower() == ".json":
        payload = load_json(path, logger, name=layer_type.value)
        return parse_amenity_features(payload, layer_type)

    gdf = load_layer_file(path)
    return features_from_geodataframe(gdf, layer_type)


def _load_local_inputs(
    logger: logging.Logger,
) -> Tuple[List[School], List[School], Dict[LayerType, List[Feature]]]:
    """Official schools, community schools and layers from local files."""
    file_paths = APP_CONFIG.file_paths

    official = parse_official_schools(
        load_json(resolve_path(file_paths.official_schools), logger, "official schools")
    )
    community = parse_community_schools(
        load_json(resolve_path(file_paths.community_schools), logger, "community schools")
    )

    layers: Dict[LayerType, List[Feature]] = {}
    for key, relative_path in file_paths.layers.items():
        layer_type = LayerType.coerce(key)
        layers[layer_type] = load_layer(layer_type, relative_path, logger)
    return official, community, layers


def _fetch_remote_inputs(
    logger: logging.Logger,
) -> Tuple[List[School], List[School], Dict[LayerType, List[Feature]]]:
    """Official schools, community schools and layers from the providers."""
    sources = APP_CONFIG.sources
    logger.info("🌐 Remote sources enabled")

    official = fetch_official_schools(sources)
    community = fetch_community_schools(sources)
    layers: Dict[LayerType, List[Feature]] = {
        layer_type: fetch_layer_features(layer_type, sources)
        for layer_type in COUNTED_CATEGORIES
        if layer_type is not LayerType.SCHOOLS
    }
    return official, community, layers


# ═══════════════════════════════════════════════════════════════════════════
# 📊 SUMMARY
# ═══════════════════════════════════════════════════════════════════════════


def _log_zone_summary(
    result: AnalysisResult, builder: RingZoneBuilder, logger: logging.Logger
) -> None:
    """Log one line per ring with its distance band and counts."""
    logger.info("\n📊 Zone statistics:")
    for idx, stats in enumerate(result.statistics):
        counts = stats.counts
        flag = " (approx.)" if stats.ring_is_approximate else ""
        logger.info(
            f"   Zona {stats.zone_id} [{result.zone_range_label(idx)}] "
            f"{builder.risk_label(stats.risk_level)}: "
            f"{counts.schools} escuelas, {counts.hospitals} centros de salud, "
            f"{counts.police} comisarías, {counts.fire_stations} bomberos, "
            f"{counts.risk_zones} zonas de riesgo{flag}"
        )
    logger.info(
        f"   Total en zonas: {result.total_in_all_zones} / {result.totals.total}"
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN WORKFLOW
# ═══════════════════════════════════════════════════════════════════════════


def run_buffer_analysis() -> dict:
    """Run the buffer analysis workflow and return a summary dict."""
    logger, run_log_folder = setup_logging()
    logger.info("=" * 60)
    logger.info("🎯 School Buffer Analysis")
    logger.info("=" * 60)
    logger.info(f"   Log folder: {run_log_folder}")

    app_config = APP_CONFIG
    center = LatLng(*app_config.center)
    logger.info(f"   Centre: ({center.lat:.5f}, {center.lng:.5f})")
    logger.info(
        f"   Rings: {app_config.buffer.total_radius_km} km total, "
        f"{app_config.buffer.zone_width_km} km width"
    )

    output_dir = app_config.file_paths.output_dir_path(WORKSPACE_ROOT)
    output_dir.mkdir(parents=True, exist_ok=True)

    timings: Dict[str, float] = {}
    total_start = time.perf_counter()

    try:
        # Phase 1: Load inputs
        start = time.perf_counter()
        if app_config.sources.use_remote_sources:
            official, community, layers = _fetch_remote_inputs(logger)
        else:
            official, community, layers = _load_local_inputs(logger)
        snapshot = LayerSnapshot.from_mapping(layers)
        timings["load"] = time.perf_counter() - start

        # Phase 2: Merge school records
        start = time.perf_counter()
        linkage = SchoolRecordLinker(app_config.linkage).link(official, community)
        schools = list(linkage.schools)
        timings["linkage"] = time.perf_counter() - start

        # Phase 3: Buffer analysis
        start = time.perf_counter()
        builder = RingZoneBuilder.from_app_config(app_config)
        aggregator = SpatialAggregator(builder=builder)
        result = aggregator.analyze(center, schools, snapshot, app_config.buffer)
        timings["analysis"] = time.perf_counter() - start
        _log_zone_summary(result, builder, logger)

        # Phase 4: Export
        start = time.perf_counter()
        outputs = export_analysis_outputs(result, schools, output_dir, log=logger)
        timings["export"] = time.perf_counter() - start

        timings["total"] = time.perf_counter() - total_start
        logger.info(f"\n✅ Completed in {timings['total']:.2f}s")

        return {
            "center": [center.lat, center.lng],
            "zone_count": len(result.zones),
            "schools": len(schools),
            "hybrid_schools": linkage.hybrid_count,
            "appended_schools": linkage.appended_count,
            "double_surfaced_schools": list(linkage.double_surfaced_ids),
            "total_in_all_zones": result.total_in_all_zones,
            "totals": result.totals.as_dict(),
            "zones": [s.as_dict() for s in result.statistics],
            "approximate_rings": result.has_approximate_rings,
            "outputs": outputs,
            "timings": timings,
        }

    except Exception as e:
        logger.error(f"❌ Analysis failed: {str(e)}")
        import traceback

        logger.error(traceback.format_exc())
        raise


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    run_buffer_analysis()
