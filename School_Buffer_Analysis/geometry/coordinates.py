"""
Coordinate order conversions at the system boundary.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Own the single coordinate convention of the package and the
conversions to every external ordering.

Conventions:
- Domain model: LatLng(lat, lng), WGS84 degrees
- GeoJSON / WFS payloads: [lng, lat]
- Overpass geometry nodes: {"lat": ..., "lon": ...}
- Shapely geometries: x = lng, y = lat

Nothing outside this module builds a shapely geometry from a LatLng or
reads a raw provider coordinate pair.

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import Point, Polygon

from ..models.data_models import LatLng, Ring

logger = logging.getLogger(__name__)

# Half side of the placeholder square drawn around point-only school records
POINT_POLYGON_OFFSET_DEG = 0.0005


# ═══════════════════════════════════════════════════════════════════════════════
# 🔄 POINT CONVERSIONS
# ═══════════════════════════════════════════════════════════════════════════════


def latlng_from_lnglat(coord: Sequence[float]) -> LatLng:
    """Convert a GeoJSON position [lng, lat(, alt)] to LatLng.

    Extra dimensions (altitude) are dropped.
    """
    return LatLng(lat=float(coord[1]), lng=float(coord[0]))


def lnglat_from_latlng(point: LatLng) -> Tuple[float, float]:
    """Convert LatLng to a GeoJSON (lng, lat) pair."""
    return (point.lng, point.lat)


def latlng_from_overpass(node: Mapping[str, Any]) -> LatLng:
    """Convert an Overpass geometry node {"lat", "lon"} to LatLng."""
    return LatLng(lat=float(node["lat"]), lng=float(node["lon"]))


def to_shapely_point(point: LatLng) -> Point:
    """Shapely point with x=lng, y=lat."""
    return Point(point.lng, point.lat)


# ═══════════════════════════════════════════════════════════════════════════════
# 🔷 RING CONVERSIONS
# ═══════════════════════════════════════════════════════════════════════════════


def ring_from_lnglat(coords: Iterable[Sequence[float]]) -> Ring:
    """Convert a GeoJSON linear ring ([lng, lat] positions) to a LatLng ring."""
    return tuple(latlng_from_lnglat(c) for c in coords)


def ring_from_latlng_pairs(pairs: Iterable[Sequence[float]]) -> Ring:
    """Convert (lat, lng) pairs, as used by the map UI, to a LatLng ring."""
    return tuple(LatLng(lat=float(p[0]), lng=float(p[1])) for p in pairs)


def ring_to_lnglat(ring: Ring) -> list:
    """Convert a LatLng ring to GeoJSON [lng, lat] positions."""
    return [[p.lng, p.lat] for p in ring]


def ring_from_shapely(polygon: Polygon) -> Ring:
    """Exterior ring of a shapely polygon (x=lng, y=lat) as LatLng vertices."""
    return tuple(LatLng(lat=float(y), lng=float(x)) for x, y, *_ in polygon.exterior.coords)


def is_closed(ring: Ring) -> bool:
    """True when the first and last vertices are identical."""
    return len(ring) > 0 and ring[0] == ring[-1]


def close_ring(ring: Ring) -> Ring:
    """Append the first vertex when the ring is not already closed."""
    if not ring or is_closed(ring):
        return ring
    return ring + (ring[0],)


def distinct_vertex_count(ring: Ring) -> int:
    """Number of distinct vertices in a ring."""
    return len(set(ring))


def to_shapely_polygon(ring: Optional[Ring]) -> Optional[Polygon]:
    """
    Build a shapely polygon (x=lng, y=lat) from a LatLng ring.

    Args:
        ring: Exterior ring, closed or not

    Returns:
        Polygon, or None when fewer than 3 distinct vertices are present
    """
    if not ring or distinct_vertex_count(ring) < 3:
        return None
    closed = close_ring(ring)
    return Polygon([lnglat_from_latlng(p) for p in closed])


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 DERIVED POINTS AND SHAPES
# ═══════════════════════════════════════════════════════════════════════════════


def vertex_centroid(ring: Optional[Ring]) -> Optional[LatLng]:
    """
    Arithmetic mean of all ring vertices.

    This is NOT the area-weighted centroid: every listed vertex counts once,
    including the closing vertex and any duplicated vertex. Statistics shown
    to users are defined relative to this exact computation.

    Args:
        ring: Sequence of LatLng vertices

    Returns:
        Mean LatLng, or None for an empty ring
    """
    if not ring:
        return None
    coords = np.asarray(ring, dtype=float)
    mean = coords.mean(axis=0)
    return LatLng(lat=float(mean[0]), lng=float(mean[1]))


def point_square_polygon(
    point: LatLng, offset_deg: float = POINT_POLYGON_OFFSET_DEG
) -> Ring:
    """
    Closed square ring around a point, used for point-only school records.

    Vertex order: NW, NE, SE, SW, NW (5 vertices, closed).

    Args:
        point: Square centre
        offset_deg: Half side length in degrees

    Returns:
        LatLng ring of 5 vertices
    """
    lat, lng = point.lat, point.lng
    return (
        LatLng(lat + offset_deg, lng - offset_deg),
        LatLng(lat + offset_deg, lng + offset_deg),
        LatLng(lat - offset_deg, lng + offset_deg),
        LatLng(lat - offset_deg, lng - offset_deg),
        LatLng(lat + offset_deg, lng - offset_deg),
    )


def planar_distance_deg(a: LatLng, b: LatLng) -> float:
    """Euclidean distance on raw degree differences (not geodesic)."""
    return float(np.hypot(a.lat - b.lat, a.lng - b.lng))
