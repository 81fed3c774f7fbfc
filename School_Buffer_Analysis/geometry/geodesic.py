#!/usr/bin/env python3
"""
Geodesic buffers and distances on the WGS84 ellipsoid.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Produce true geodesic discs around a point and geodesic
distances between points. Radii are kilometres and analysis centres span tens
of degrees, so planar circles in degree space are not acceptable here.

Key Features:
1. Geodesic circle by forward azimuth projection (pyproj.Geod.fwd)
2. Ellipsoidal distance (pyproj.Geod.inv)

Output polygons follow the shapely convention of the package (x=lng, y=lat).
Buffers crossing the antimeridian or containing a pole are not supported.

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging

import numpy as np
from pyproj import Geod
from shapely.geometry import Polygon

from ..models.data_models import LatLng

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

ELLIPSOID = "WGS84"

# Default number of vertices in a geodesic circle
BUFFER_SEGMENTS = 64

_GEOD = Geod(ellps=ELLIPSOID)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# ⭕ GEODESIC BUFFER
# ═══════════════════════════════════════════════════════════════════════════


def geodesic_buffer(
    center: LatLng, radius_km: float, segments: int = BUFFER_SEGMENTS
) -> Polygon:
    """
    Polygon approximating all points within radius_km of center.

    Each vertex lies exactly radius_km from the centre along the ellipsoid,
    at evenly spaced azimuths starting due north and turning clockwise.

    Args:
        center: Disc centre
        radius_km: Geodesic radius in kilometres (> 0)
        segments: Number of distinct vertices (>= 3)

    Returns:
        Shapely Polygon with x=lng, y=lat

    Raises:
        ValueError: If radius_km is not positive or segments < 3
    """
    if not radius_km > 0:
        raise ValueError(f"radius_km must be positive, got {radius_km}")
    if segments < 3:
        raise ValueError(f"segments must be at least 3, got {segments}")

    azimuths = np.linspace(0.0, 360.0, segments, endpoint=False)
    lons = np.full(segments, center.lng, dtype=float)
    lats = np.full(segments, center.lat, dtype=float)
    distances_m = np.full(segments, radius_km * 1000.0, dtype=float)

    out_lons, out_lats, _ = _GEOD.fwd(lons, lats, azimuths, distances_m)

    # Clockwise azimuths give a clockwise ring; shapely accepts either order
    return Polygon(list(zip(out_lons.tolist(), out_lats.tolist())))


# ═══════════════════════════════════════════════════════════════════════════
# 📏 GEODESIC DISTANCE
# ═══════════════════════════════════════════════════════════════════════════


def geodesic_distance_km(a: LatLng, b: LatLng) -> float:
    """Ellipsoidal distance between two points in kilometres."""
    _, _, distance_m = _GEOD.inv(a.lng, a.lat, b.lng, b.lat)
    return float(distance_m) / 1000.0
