"""Geometry package: coordinate conventions, geodesic buffers and ring differences."""

from .coordinates import (
    POINT_POLYGON_OFFSET_DEG,
    close_ring,
    latlng_from_lnglat,
    latlng_from_overpass,
    lnglat_from_latlng,
    planar_distance_deg,
    point_square_polygon,
    ring_from_latlng_pairs,
    ring_from_lnglat,
    ring_from_shapely,
    ring_to_lnglat,
    to_shapely_point,
    to_shapely_polygon,
    vertex_centroid,
)
from .geodesic import BUFFER_SEGMENTS, geodesic_buffer, geodesic_distance_km
from .ring_difference import (
    DegenerateRingError,
    RingDifferenceBackend,
    RingGeometry,
    ShapelyDifferenceBackend,
    compute_ring,
    compute_rings,
    polygonal_parts,
)

__all__ = [
    # Coordinate conventions
    "POINT_POLYGON_OFFSET_DEG",
    "close_ring",
    "latlng_from_lnglat",
    "latlng_from_overpass",
    "lnglat_from_latlng",
    "planar_distance_deg",
    "point_square_polygon",
    "ring_from_latlng_pairs",
    "ring_from_lnglat",
    "ring_from_shapely",
    "ring_to_lnglat",
    "to_shapely_point",
    "to_shapely_polygon",
    "vertex_centroid",
    # Geodesic
    "BUFFER_SEGMENTS",
    "geodesic_buffer",
    "geodesic_distance_km",
    # Rings
    "DegenerateRingError",
    "RingDifferenceBackend",
    "RingGeometry",
    "ShapelyDifferenceBackend",
    "compute_ring",
    "compute_rings",
    "polygonal_parts",
]
