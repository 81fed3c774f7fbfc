"""
Typed dataclasses for buffer analysis statistics.

Architectural Overview:
=======================
This module provides typed access to per-ring counts and to the overall
analysis result handed to the presentation layer. Totals are derived
properties so that `total == sum of category counts` holds by construction.

Key Interactions:
-----------------
- Input: spatial_aggregation.py builds CategoryCounts per ring
- Output: exporters.py and the map UI read AnalysisResult
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

MODIFICATION POINT: Add a field here when a new category joins COUNTED_CATEGORIES
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from .data_models import COUNTED_CATEGORIES, LatLng, LayerType, RiskLevel, Zone


# ═══════════════════════════════════════════════════════════════════════════
# 🔢 CATEGORY COUNTS
# ═══════════════════════════════════════════════════════════════════════════

# LayerType -> attribute name on CategoryCounts
CATEGORY_FIELDS: Dict[LayerType, str] = {
    LayerType.SCHOOLS: "schools",
    LayerType.HOSPITALS: "hospitals",
    LayerType.POLICE: "police",
    LayerType.FIRE_STATIONS: "fire_stations",
    LayerType.RISK_ZONES: "risk_zones",
}


@dataclass(frozen=True)
class CategoryCounts:
    """Feature counts for the five counted categories."""

    schools: int = 0
    hospitals: int = 0
    police: int = 0
    fire_stations: int = 0
    risk_zones: int = 0

    @classmethod
    def from_mapping(cls, counts: Mapping[LayerType, int]) -> "CategoryCounts":
        """Build from a LayerType -> count mapping; missing categories are 0."""
        return cls(
            **{CATEGORY_FIELDS[lt]: int(counts.get(lt, 0)) for lt in COUNTED_CATEGORIES}
        )

    @property
    def total(self) -> int:
        """Sum of the five category counts."""
        return (
            self.schools
            + self.hospitals
            + self.police
            + self.fire_stations
            + self.risk_zones
        )

    def get(self, layer_type: LayerType) -> int:
        """Count for one category.

        Raises:
            KeyError: If layer_type is not a counted category
        """
        return getattr(self, CATEGORY_FIELDS[layer_type])

    def as_dict(self) -> Dict[str, int]:
        """Counts keyed by field name, total included."""
        result = {name: getattr(self, name) for name in CATEGORY_FIELDS.values()}
        result["total"] = self.total
        return result


# ═══════════════════════════════════════════════════════════════════════════
# 📊 PER-ZONE STATISTICS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ZoneStatistics:
    """Counts of features whose representative point falls in one ring.

    Attributes:
        zone_id: Ring index this row describes
        radius_km: Outer radius of the ring
        risk_level: Risk class of the ring
        counts: Per-category counts for the ring
        ring_is_approximate: True when the ring polygon could not be computed
            by difference and the full buffer was used instead. Counts for
            such a ring may include features already counted by inner rings.
    """

    zone_id: int
    radius_km: float
    risk_level: RiskLevel
    counts: CategoryCounts = field(default_factory=CategoryCounts)
    ring_is_approximate: bool = False

    @property
    def total(self) -> int:
        """Sum of all category counts for this ring."""
        return self.counts.total

    def as_dict(self) -> Dict[str, Any]:
        """Flat dict suitable for a statistics table row."""
        return {
            "zone_id": self.zone_id,
            "radius_km": self.radius_km,
            "risk_level": self.risk_level.value,
            **self.counts.as_dict(),
            "ring_is_approximate": self.ring_is_approximate,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 🎯 ANALYSIS RESULT
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of one buffer analysis request.

    statistics has the same order and length as zones. totals counts every
    input feature per category, whether or not it fell inside a ring.
    """

    center: LatLng
    zones: Tuple[Zone, ...]
    statistics: Tuple[ZoneStatistics, ...]
    totals: CategoryCounts

    @property
    def total_in_all_zones(self) -> int:
        """Sum of per-ring totals across all rings."""
        return sum(s.total for s in self.statistics)

    @property
    def has_approximate_rings(self) -> bool:
        """True when any ring fell back to its full buffer."""
        return any(s.ring_is_approximate for s in self.statistics)

    def zone_range_label(self, index: int) -> str:
        """Distance band label for the ring at a 0-based position.

        Returns:
            String like "2.0-3.0 km"; the first ring starts at 0
        """
        prev_radius = self.statistics[index - 1].radius_km if index > 0 else 0
        return f"{prev_radius}-{self.statistics[index].radius_km} km"

    def category_sum(self, layer_type: LayerType) -> int:
        """Per-ring counts of one category summed over all rings."""
        return sum(s.counts.get(layer_type) for s in self.statistics)
