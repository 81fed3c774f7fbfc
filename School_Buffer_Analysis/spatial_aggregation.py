"""
Per-ring feature counting for the buffer risk analysis.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Count, per ring and per category, the features whose
representative point lies inside the ring polygon.

Key Features:
- Ring i is buffer(i) - buffer(i-1), computed on full buffers
  (geometry/ring_difference.py); failures fall back to the full buffer and
  are flagged on the resulting ZoneStatistics
- Containment is boundary-inclusive (`covers`) for every category
- A feature is counted at most once: the first ring, scanning outward, whose
  polygon covers its point
- Schools are located by the vertex mean of their polygon
- Features without a usable point are skipped in spatial tests but still
  appear in the raw totals

Inputs are immutable snapshots; nothing here reads ambient state, blocks or
performs I/O.

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
from collections import Counter
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from shapely.prepared import prep

from .buffer_zones import RingZoneBuilder
from .config_types import BufferConfig
from .geometry.coordinates import to_shapely_point
from .geometry.geodesic import geodesic_distance_km
from .geometry.ring_difference import (
    RingDifferenceBackend,
    RingGeometry,
    ShapelyDifferenceBackend,
    compute_ring,
)
from .models.data_models import (
    COUNTED_CATEGORIES,
    Feature,
    LatLng,
    LayerSnapshot,
    LayerType,
    School,
    Zone,
)
from .models.zone_stats import AnalysisResult, CategoryCounts, ZoneStatistics

logger = logging.getLogger(__name__)

LayerInput = Union[LayerSnapshot, Mapping[Union[str, LayerType], Sequence[Feature]], None]


# ═══════════════════════════════════════════════════════════════════════════════
# 📍 POINT HELPERS
# ═══════════════════════════════════════════════════════════════════════════════


def _usable_point(point: Optional[LatLng]) -> bool:
    """True when a representative point can enter a containment test."""
    return (
        point is not None
        and math.isfinite(point.lat)
        and math.isfinite(point.lng)
    )


def _category_points(
    layer_type: LayerType, schools: Sequence[School], snapshot: LayerSnapshot
) -> List[Optional[LatLng]]:
    """Representative points of one category, None where unusable."""
    if layer_type is LayerType.SCHOOLS:
        return [school.centroid() for school in schools]
    return [feature.point for feature in snapshot.get(layer_type)]


def is_point_in_zone(point: LatLng, zone: Zone) -> bool:
    """True when point lies inside the zone's full buffer (boundary included)."""
    if zone.buffer_polygon is None or not _usable_point(point):
        return False
    return zone.buffer_polygon.covers(to_shapely_point(point))


def get_zone_for_point(point: LatLng, zones: Sequence[Zone]) -> Optional[Zone]:
    """
    Innermost zone whose full buffer contains point.

    Args:
        point: Location to classify
        zones: Zones in any order

    Returns:
        Matching Zone, or None when the point is outside every buffer
    """
    for zone in sorted(zones, key=lambda z: (z.radius_km, z.id)):
        if is_point_in_zone(point, zone):
            return zone
    return None


def calculate_distance_km(a: LatLng, b: LatLng) -> float:
    """Geodesic distance between two points in kilometres."""
    return geodesic_distance_km(a, b)


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 SPATIAL AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════════════


class SpatialAggregator:
    """
    Counts categorized features per ring.

    Args:
        backend: Ring difference implementation (default: shapely)
        builder: Zone builder used by analyze() (default risk policy/style)
    """

    def __init__(
        self,
        backend: Optional[RingDifferenceBackend] = None,
        builder: Optional[RingZoneBuilder] = None,
    ) -> None:
        self.backend = backend or ShapelyDifferenceBackend()
        self.builder = builder or RingZoneBuilder()

    # ───────────────────────────────────────────────────────────────────────
    # Rings
    # ───────────────────────────────────────────────────────────────────────

    def compute_ring_geometries(
        self, zones: Sequence[Zone]
    ) -> List[Optional[RingGeometry]]:
        """
        Ring polygon for each zone, same order as zones.

        Rings are derived in ascending radius order regardless of input order.
        A zone without a buffer polygon gets None and matches nothing.
        """
        rings: List[Optional[RingGeometry]] = [None] * len(zones)
        previous = None
        for idx in _outward_order(zones):
            zone = zones[idx]
            if zone.buffer_polygon is None:
                logger.debug(f"Zone {zone.id} has no buffer polygon, skipping")
                continue
            rings[idx] = compute_ring(
                zone.buffer_polygon, previous, self.backend, zone_id=zone.id
            )
            previous = zone.buffer_polygon
        return rings

    # ───────────────────────────────────────────────────────────────────────
    # Counting
    # ───────────────────────────────────────────────────────────────────────

    def _aggregate_with_rings(
        self,
        zones: Sequence[Zone],
        schools: Sequence[School],
        snapshot: LayerSnapshot,
    ) -> Tuple[List[Zone], List[ZoneStatistics]]:
        """Shared implementation of aggregate() and analyze()."""
        rings = self.compute_ring_geometries(zones)
        prepared = [prep(r.polygon) if r is not None else None for r in rings]
        scan_order = _outward_order(zones)

        per_zone: List[Counter] = [Counter() for _ in zones]
        skipped = 0
        outside = 0

        for layer_type in COUNTED_CATEGORIES:
            for point in _category_points(layer_type, schools, snapshot):
                if not _usable_point(point):
                    skipped += 1
                    continue
                shapely_point = to_shapely_point(point)
                for idx in scan_order:
                    ring = prepared[idx]
                    if ring is not None and ring.covers(shapely_point):
                        per_zone[idx][layer_type] += 1
                        break
                else:
                    outside += 1

        statistics = [
            ZoneStatistics(
                zone_id=zone.id,
                radius_km=zone.radius_km,
                risk_level=zone.risk_level,
                counts=CategoryCounts.from_mapping(per_zone[idx]),
                ring_is_approximate=bool(rings[idx] and rings[idx].is_approximate),
            )
            for idx, zone in enumerate(zones)
        ]
        zones_with_rings = [
            zone.with_ring(rings[idx].polygon) if rings[idx] is not None else zone
            for idx, zone in enumerate(zones)
        ]

        logger.debug(
            f"   ✅ Counted {sum(s.total for s in statistics)} features in "
            f"{len(zones)} zones ({outside} outside, {skipped} without usable point)"
        )
        return zones_with_rings, statistics

    def aggregate(
        self,
        zones: Sequence[Zone],
        schools: Sequence[School],
        features_by_category: LayerInput = None,
    ) -> List[ZoneStatistics]:
        """
        Count features per ring and category.

        Args:
            zones: Zones from RingZoneBuilder
            schools: Merged school records
            features_by_category: Snapshot or mapping of layer type to features.
                Only hospitals, police, fire stations and risk zones are read;
                schools always come from the `schools` argument

        Returns:
            One ZoneStatistics per zone, same order as zones
        """
        snapshot = LayerSnapshot.from_mapping(features_by_category)
        _, statistics = self._aggregate_with_rings(zones, schools or (), snapshot)
        return statistics

    def analyze(
        self,
        center: LatLng,
        schools: Sequence[School],
        features_by_category: LayerInput = None,
        config: Optional[BufferConfig] = None,
    ) -> AnalysisResult:
        """
        Build zones around center and count every category in each ring.

        Args:
            center: Analysis centre
            schools: Merged school records
            features_by_category: Snapshot or mapping of layer type to features
            config: Ring layout (default: 5 km total, 1 km width)

        Returns:
            AnalysisResult with zones carrying their ring polygons
        """
        schools = tuple(schools or ())
        snapshot = LayerSnapshot.from_mapping(features_by_category)
        zones = self.builder.build(center, config)
        zones_with_rings, statistics = self._aggregate_with_rings(zones, schools, snapshot)

        totals = CategoryCounts.from_mapping(
            {
                layer_type: (
                    len(schools)
                    if layer_type is LayerType.SCHOOLS
                    else snapshot.count(layer_type)
                )
                for layer_type in COUNTED_CATEGORIES
            }
        )

        result = AnalysisResult(
            center=center,
            zones=tuple(zones_with_rings),
            statistics=tuple(statistics),
            totals=totals,
        )
        logger.info(
            f"📊 Buffer analysis at ({center.lat:.5f}, {center.lng:.5f}): "
            f"{len(zones)} zones, {result.total_in_all_zones}/{totals.total} features in range"
        )
        if result.has_approximate_rings:
            logger.warning(
                "⚠️ Some rings use their full buffer; counts for those rings are approximate"
            )
        return result


def _outward_order(zones: Sequence[Zone]) -> List[int]:
    """Indices of zones sorted by ascending radius, then id."""
    return sorted(range(len(zones)), key=lambda i: (zones[i].radius_km, zones[i].id))


def analyze_buffer_zones(
    center: LatLng,
    schools: Sequence[School],
    features_by_category: LayerInput = None,
    config: Optional[BufferConfig] = None,
) -> AnalysisResult:
    """Run a buffer analysis with the default aggregator."""
    return SpatialAggregator().analyze(center, schools, features_by_category, config)
