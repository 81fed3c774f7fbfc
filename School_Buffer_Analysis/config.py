#!/usr/bin/env python3
"""
School Buffer Analysis - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the buffer-zone risk analysis.
Single source of truth for ring geometry, risk policy, record linkage,
provider endpoints and file paths.

Configuration Sections (ordered by importance for analysis tuning):
1. buffer: Total radius and ring width (user-adjustable in the map UI)
2. risk_policy: Rank thresholds and opacity ramp for ring classification
3. linkage: Proximity threshold and geometry-upgrade heuristic
4. analysis: Default centre point
5. zone_style: Risk colours and display labels
6. sources: WFS / Overpass endpoints and query parameters
7. file_paths: Input/output file locations (bottom - rarely changed)

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "SBA_TOTAL_RADIUS_KM")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("SBA_ZONE_WIDTH_KM", 1.0, float)
        1.0  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# These settings can be overridden via environment variables:
#
# SBA_TOTAL_RADIUS_KM     - float, outermost ring radius (default: 5.0)
# SBA_ZONE_WIDTH_KM       - float, width of each ring (default: 1.0)
# SBA_CENTER_LAT          - float, analysis centre latitude (default: -31.4201)
# SBA_CENTER_LNG          - float, analysis centre longitude (default: -64.1888)
# SBA_USE_REMOTE_SOURCES  - "true" or "false" (default: "false")
#
# Example usage:
#   export SBA_TOTAL_RADIUS_KM=10
#   export SBA_ZONE_WIDTH_KM=2
#   python -m School_Buffer_Analysis.main
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 📐 BUFFER RINGS
    # ═══════════════════════════════════════════════════════════════════════
    # The UI constrains total radius to 1-20 km and ring width to 0.5-5 km.
    # Only positivity is checked by the ring builder.
    "buffer": {
        "total_radius_km": _env_or_default("SBA_TOTAL_RADIUS_KM", 5.0, float),
        "zone_width_km": _env_or_default("SBA_ZONE_WIDTH_KM", 1.0, float),
        # Vertices per geodesic circle
        "buffer_segments": 64,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🚦 RISK POLICY
    # ═══════════════════════════════════════════════════════════════════════
    # Risk is assigned by rank (ring index / ring count), not by distance:
    #   ratio <= high_max_ratio   -> high
    #   ratio <= medium_max_ratio -> medium
    #   otherwise                 -> low
    "risk_policy": {
        "high_max_ratio": 0.6,
        "medium_max_ratio": 0.8,
        # fill_opacity = opacity_base - ratio * opacity_slope
        "opacity_base": 0.35,
        "opacity_slope": 0.2,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔗 SCHOOL RECORD LINKAGE
    # ═══════════════════════════════════════════════════════════════════════
    # Planar threshold on raw degree differences (~200m at Córdoba latitude).
    # Only valid for a region spanning a narrow latitude band.
    "linkage": {
        "match_threshold_deg": 0.002,
        # Secondary polygon must have MORE vertices than this (closing vertex
        # included) to replace the official placeholder square.
        "min_vertices_for_geometry_upgrade": 5,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📍 ANALYSIS CENTRE
    # ═══════════════════════════════════════════════════════════════════════
    "analysis": {
        # (lat, lng) WGS84 - Córdoba city centre
        "center": [
            _env_or_default("SBA_CENTER_LAT", -31.4201, float),
            _env_or_default("SBA_CENTER_LNG", -64.1888, float),
        ],
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🎨 ZONE STYLE
    # ═══════════════════════════════════════════════════════════════════════
    "zone_style": {
        "risk_colors": {
            "high": "#e74c3c",  # Red
            "medium": "#f39c12",  # Orange
            "low": "#27ae60",  # Green
        },
        "risk_labels": {
            "high": "Alto Riesgo",
            "medium": "Riesgo Medio",
            "low": "Riesgo Bajo",
        },
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🌐 DATA SOURCES
    # ═══════════════════════════════════════════════════════════════════════
    # Single-attempt fetches only. Mirror failover and retries are left to the
    # calling application.
    "sources": {
        "use_remote_sources": _env_bool("SBA_USE_REMOTE_SOURCES", False),
        "wfs_url": "https://idecor-ws.mapascordoba.gob.ar/geoserver/idecor/wfs",
        "overpass_url": "https://overpass-api.de/api/interpreter",
        "request_timeout_s": 60,
        "wfs_max_features": 5000,
        # Province of Córdoba (minx, miny, maxx, maxy)
        "province_bbox": [-66.0, -35.0, -62.0, -29.5],
        # Córdoba city (south, west, north, east) in Overpass order
        "city_bbox": [-31.4800, -64.2500, -31.3500, -64.1200],
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📁 FILE PATHS
    # ═══════════════════════════════════════════════════════════════════════
    "file_paths": {
        "official_schools": "Data/official_schools.geojson",
        "community_schools": "Data/community_schools.json",
        "layers": {
            "hospitals": "Data/hospitals.geojson",
            "police": "Data/police.json",
            "fire_stations": "Data/fire_stations.geojson",
            "risk_zones": "Data/risk_zones.geojson",
        },
        "output_dir": "Output",
        "log_dir": "logs",
    },
}


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════
if __name__ == "__main__":
    # Running config.py directly launches main.py
    import subprocess
    import sys
    from pathlib import Path

    repo_root = Path(__file__).parent.parent
    sys.exit(
        subprocess.call(
            [sys.executable, "-m", "School_Buffer_Analysis.main"], cwd=str(repo_root)
        )
    )
