"""
Ring polygon construction with an explicit fallback policy.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Compute the area exclusive to each ring as
`buffer(i) - buffer(i-1)` (full buffers, never the previous ring).

Key Features:
- Boolean difference sits behind a small backend interface so that the
  failure path can be exercised in isolation
- A failed or degenerate difference falls back to the ring's full buffer.
  The fallback double-counts inner area and is reported through
  RingGeometry.is_approximate, never silently

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

logger = logging.getLogger(__name__)


class DegenerateRingError(ValueError):
    """Raised by a backend when a difference result is unusable."""


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 DATA CONTAINERS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RingGeometry:
    """Ring polygon for one zone.

    Attributes:
        polygon: Polygon or MultiPolygon used for containment tests
        is_approximate: True when the full buffer was used as a fallback
    """

    polygon: BaseGeometry
    is_approximate: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# 🔧 DIFFERENCE BACKENDS
# ═══════════════════════════════════════════════════════════════════════════════


class RingDifferenceBackend:
    """Interface for computing `outer - inner`.

    Implementations return a polygonal geometry or raise. They never
    substitute a fallback themselves; that policy lives in compute_ring().
    """

    name = "abstract"

    def difference(self, outer: BaseGeometry, inner: BaseGeometry) -> BaseGeometry:
        raise NotImplementedError


class ShapelyDifferenceBackend(RingDifferenceBackend):
    """Exact boolean difference using GEOS through shapely."""

    name = "shapely"

    def difference(self, outer: BaseGeometry, inner: BaseGeometry) -> BaseGeometry:
        """
        Compute outer minus inner.

        Raises:
            GEOSException: If GEOS fails on the inputs
            DegenerateRingError: If the result is empty or not polygonal
        """
        return polygonal_parts(outer.difference(inner))


def polygonal_parts(result: BaseGeometry) -> BaseGeometry:
    """
    Reduce a difference result to its polygonal area.

    GeometryCollections (slivers, touching lines) keep their Polygon members
    and the members of any MultiPolygon, flattened into one MultiPolygon.

    Raises:
        DegenerateRingError: If the result is empty or has no polygonal part
    """
    if result.is_empty:
        raise DegenerateRingError("ring difference is empty")
    if isinstance(result, (Polygon, MultiPolygon)):
        return result

    parts: List[Polygon] = []
    for geom in getattr(result, "geoms", []):
        if isinstance(geom, Polygon):
            parts.append(geom)
        elif isinstance(geom, MultiPolygon):
            parts.extend(geom.geoms)
    parts = [p for p in parts if not p.is_empty]
    if not parts:
        raise DegenerateRingError(
            f"ring difference is not polygonal ({result.geom_type})"
        )
    return MultiPolygon(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# ⭕ RING COMPUTATION
# ═══════════════════════════════════════════════════════════════════════════════


def compute_ring(
    outer: BaseGeometry,
    inner: Optional[BaseGeometry],
    backend: Optional[RingDifferenceBackend] = None,
    zone_id: Optional[int] = None,
) -> RingGeometry:
    """
    Compute the area of `outer` not covered by `inner`.

    Args:
        outer: Full buffer of the current zone
        inner: Full buffer of the preceding zone, or None for the first zone
        backend: Difference implementation (default: shapely)
        zone_id: Used in log messages only

    Returns:
        RingGeometry; falls back to `outer` with is_approximate=True when the
        difference raises or degenerates
    """
    if inner is None or inner.is_empty:
        return RingGeometry(polygon=outer)

    backend = backend or ShapelyDifferenceBackend()
    try:
        return RingGeometry(polygon=backend.difference(outer, inner))
    except (GEOSException, ValueError) as e:
        logger.warning(
            f"⚠️ Ring difference failed for zone {zone_id} ({backend.name}): {e}. "
            "Using full buffer; inner features may be double-counted"
        )
        return RingGeometry(polygon=outer, is_approximate=True)


def compute_rings(
    buffers: Sequence[BaseGeometry],
    backend: Optional[RingDifferenceBackend] = None,
) -> List[RingGeometry]:
    """
    Compute ring polygons for buffers ordered from the centre outward.

    Ring i is buffer(i) minus buffer(i-1); buffer(0) is empty.

    Args:
        buffers: Full buffer polygons in ascending radius order
        backend: Difference implementation (default: shapely)

    Returns:
        One RingGeometry per buffer, same order
    """
    backend = backend or ShapelyDifferenceBackend()
    rings: List[RingGeometry] = []
    previous: Optional[BaseGeometry] = None
    for idx, buffer_polygon in enumerate(buffers, start=1):
        rings.append(compute_ring(buffer_polygon, previous, backend, zone_id=idx))
        previous = buffer_polygon
    return rings
