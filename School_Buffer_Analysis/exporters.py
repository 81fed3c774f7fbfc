"""
Buffer Analysis Export Module - GeoJSON, GeoDataFrame and CSV exports.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Export zones, per-ring statistics and merged schools for GIS
software and spreadsheets.

Export Formats:
- GeoJSON: Zone buffers / rings and merged school outlines
- GeoDataFrame: Zones with their attributes (EPSG:4326) for further analysis
- CSV: Per-ring statistics with distance band labels

Key Entry Points:
- zones_to_feature_collection() / zones_to_geodataframe()
- statistics_to_dataframe() / export_statistics_to_csv()
- schools_to_feature_collection()
- export_analysis_outputs(): writes all files for one AnalysisResult

Geometries are written as x=lng, y=lat (GeoJSON order).

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import geopandas as gpd
import pandas as pd
from shapely.geometry import mapping

from .geometry.coordinates import ring_to_lnglat
from .models.data_models import School, Zone
from .models.zone_stats import AnalysisResult

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def _zone_geometry(zone: Zone, use_ring: bool) -> Optional[Any]:
    """Ring polygon when requested and available, else the full buffer."""
    if use_ring and zone.ring_polygon is not None:
        return zone.ring_polygon
    return zone.buffer_polygon


def _write_geojson(data: Dict[str, Any], output_path: Path) -> Path:
    """Write a GeoJSON dict, creating parent folders."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# ⭕ ZONES
# ═══════════════════════════════════════════════════════════════════════════


def zones_to_feature_collection(
    zones: Sequence[Zone], use_ring: bool = True
) -> Dict[str, Any]:
    """
    Convert zones to a GeoJSON FeatureCollection.

    Args:
        zones: Zones from RingZoneBuilder or an AnalysisResult
        use_ring: Export ring polygons when present instead of full buffers

    Returns:
        FeatureCollection dict; zones without geometry are omitted
    """
    features = []
    for zone in zones:
        geometry = _zone_geometry(zone, use_ring)
        if geometry is None:
            continue
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(geometry),
                "properties": zone.as_dict(),
            }
        )
    return {"type": "FeatureCollection", "features": features}


def zones_to_geodataframe(
    zones: Sequence[Zone], use_ring: bool = True
) -> gpd.GeoDataFrame:
    """Zones as a GeoDataFrame in EPSG:4326, one row per zone with geometry."""
    rows = []
    geometries = []
    for zone in zones:
        geometry = _zone_geometry(zone, use_ring)
        if geometry is None:
            continue
        rows.append(zone.as_dict())
        geometries.append(geometry)
    return gpd.GeoDataFrame(rows, geometry=geometries, crs="EPSG:4326")


# ═══════════════════════════════════════════════════════════════════════════
# 📊 STATISTICS
# ═══════════════════════════════════════════════════════════════════════════


def statistics_to_dataframe(result: AnalysisResult) -> pd.DataFrame:
    """
    Per-ring statistics as a DataFrame.

    Columns: zone_id, radius_km, range, risk_level, one column per counted
    category, total, ring_is_approximate.
    """
    rows: List[Dict[str, Any]] = []
    for idx, stats in enumerate(result.statistics):
        row = stats.as_dict()
        row["range"] = result.zone_range_label(idx)
        rows.append(row)

    df = pd.DataFrame(rows)
    if not df.empty:
        leading = ["zone_id", "radius_km", "range", "risk_level"]
        df = df[leading + [c for c in df.columns if c not in leading]]
    return df


def export_statistics_to_csv(
    result: AnalysisResult, output_path: Path, log: Optional[logging.Logger] = None
) -> Path:
    """Write per-ring statistics to CSV (overwrites existing file)."""
    if log is None:
        log = logger
    output_path.parent.mkdir(parents=True, exist_ok=True)
    statistics_to_dataframe(result).to_csv(output_path, index=False)
    log.info(f"   📄 Statistics CSV: {output_path}")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# 🏫 SCHOOLS
# ═══════════════════════════════════════════════════════════════════════════


def schools_to_feature_collection(schools: Sequence[School]) -> Dict[str, Any]:
    """
    Merged schools as GeoJSON Polygons.

    Records with fewer than 4 ring vertices cannot form a GeoJSON Polygon and
    are omitted.
    """
    features = []
    for school in schools:
        if len(school.polygon) < 4:
            continue
        props = school.as_dict()
        props.pop("polygon")
        features.append(
            {
                "type": "Feature",
                "id": school.id,
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [ring_to_lnglat(school.polygon)],
                },
                "properties": props,
            }
        )
    return {"type": "FeatureCollection", "features": features}


# ═══════════════════════════════════════════════════════════════════════════
# 📤 COMBINED EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def export_analysis_outputs(
    result: AnalysisResult,
    schools: Sequence[School],
    output_dir: Path,
    log: Optional[logging.Logger] = None,
) -> Dict[str, str]:
    """
    Write zones GeoJSON, statistics CSV and merged schools GeoJSON.

    Args:
        result: Completed analysis
        schools: Merged school list used by the analysis
        output_dir: Destination folder (created when missing)
        log: Logger instance (optional)

    Returns:
        Dict mapping output kind ("zones", "statistics", "schools") to path
    """
    if log is None:
        log = logger

    output_dir.mkdir(parents=True, exist_ok=True)
    log.info(f"📤 Exporting analysis outputs to: {output_dir}")

    zones_path = _write_geojson(
        zones_to_feature_collection(result.zones), output_dir / "buffer_zones.geojson"
    )
    log.info(f"   📄 Zones GeoJSON: {zones_path}")

    stats_path = export_statistics_to_csv(
        result, output_dir / "zone_statistics.csv", log=log
    )

    schools_path = _write_geojson(
        schools_to_feature_collection(schools), output_dir / "merged_schools.geojson"
    )
    log.info(f"   📄 Schools GeoJSON: {schools_path}")

    return {
        "zones": str(zones_path),
        "statistics": str(stats_path),
        "schools": str(schools_path),
    }
