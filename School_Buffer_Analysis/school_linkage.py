"""
Record linkage between official and community school datasets.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Reconcile two independently sourced school collections into
one list, preferring traced outlines over placeholder squares.

Key Algorithm:
1. Geometry enrichment: for each primary record, the FIRST secondary record
   (original order) whose vertex-mean centroid is closer than the threshold,
   measured as planar distance on raw degrees. When its polygon has more than
   `min_vertices_for_geometry_upgrade` vertices, the primary record takes that
   polygon and becomes HYBRID; otherwise the primary record is kept as is
2. Name deduplication: secondary records whose normalized name is not among
   the normalized primary names are appended, in original order

Steps 1 and 2 are independent passes. A secondary record whose outline was
reused in step 1 is still appended in step 2 when its name differs from every
primary name. This double surfacing is preserved and reported in
LinkageResult.double_surfaced_ids.

Matching is best effort and never fails: worst case the primary records come
back unchanged and every secondary record is appended.

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import KDTree

from .config_types import LinkageConfig
from .models.data_models import LatLng, School

logger = logging.getLogger(__name__)

_COMBINING_MARKS = re.compile("[\\u0300-\\u036f]")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")

# Widening applied to the KD-tree radius before the strict distance check
_QUERY_RADIUS_SLACK = 1e-9


# ═══════════════════════════════════════════════════════════════════════════════
# 🔤 NAME NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════════


def normalize_school_name(name: Optional[str]) -> str:
    """
    Normalize a school name for duplicate detection.

    Lowercases, strips diacritics and removes every non-alphanumeric
    character: "Escuela Nº 5 'José Martí'" -> "escuela5josemarti".
    """
    decomposed = unicodedata.normalize("NFD", (name or "").lower())
    without_marks = _COMBINING_MARKS.sub("", decomposed)
    return _NON_ALPHANUMERIC.sub("", without_marks)


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 DATA CONTAINERS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LinkageResult:
    """Merged school list plus linkage counters.

    Attributes:
        schools: Primary records (possibly enriched) then appended secondaries
        hybrid_count: Primary records that took a secondary outline
        appended_count: Secondary records appended by name
        double_surfaced_ids: Secondary ids both reused for geometry and
            appended as separate records
    """

    schools: Tuple[School, ...]
    hybrid_count: int = 0
    appended_count: int = 0
    double_surfaced_ids: Tuple[str, ...] = ()


class _CentroidIndex:
    """KD-tree over secondary centroids returning the first match in order."""

    def __init__(self, schools: Sequence[School]) -> None:
        positions: List[int] = []
        coords: List[Tuple[float, float]] = []
        for idx, school in enumerate(schools):
            centroid = school.centroid()
            if centroid is None or not (
                math.isfinite(centroid.lat) and math.isfinite(centroid.lng)
            ):
                continue
            positions.append(idx)
            coords.append((centroid.lat, centroid.lng))

        self._positions = positions
        self._coords = np.asarray(coords, dtype=float).reshape(-1, 2)
        self._tree = KDTree(self._coords) if coords else None

    def first_within(self, point: Optional[LatLng], threshold: float) -> Optional[int]:
        """
        Lowest original index whose centroid is strictly closer than threshold.

        Equivalent to scanning the secondary list in order and stopping at the
        first record under the threshold.
        """
        if self._tree is None or point is None:
            return None
        if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
            return None

        query = np.array([point.lat, point.lng], dtype=float)
        candidates = self._tree.query_ball_point(
            query, r=threshold * (1.0 + _QUERY_RADIUS_SLACK)
        )
        matches = [
            self._positions[k]
            for k in candidates
            if float(np.hypot(*(self._coords[k] - query))) < threshold
        ]
        return min(matches) if matches else None


# ═══════════════════════════════════════════════════════════════════════════════
# 🔗 SCHOOL RECORD LINKER
# ═══════════════════════════════════════════════════════════════════════════════


class SchoolRecordLinker:
    """
    Merges a primary (official) and a secondary (community) school collection.

    Args:
        config: Proximity threshold and geometry-upgrade heuristic
    """

    def __init__(self, config: Optional[LinkageConfig] = None) -> None:
        self.config = config or LinkageConfig()

    def is_geometry_upgrade(self, candidate: School) -> bool:
        """True when candidate's polygon looks like a traced outline."""
        return candidate.vertex_count > self.config.min_vertices_for_geometry_upgrade

    def link(
        self, primary: Sequence[School], secondary: Sequence[School]
    ) -> LinkageResult:
        """
        Merge both collections and report what happened.

        Args:
            primary: Records whose attributes are authoritative
            secondary: Records providing outlines and extra schools

        Returns:
            LinkageResult with primary records first, in original order,
            followed by unmatched-by-name secondary records in original order
        """
        primary = list(primary or ())
        secondary = list(secondary or ())
        index = _CentroidIndex(secondary)

        # === STEP 1: GEOMETRY ENRICHMENT ===
        merged: List[School] = []
        reused: Set[int] = set()
        upgraded = 0
        for record in primary:
            match_idx = index.first_within(
                record.centroid(), self.config.match_threshold_deg
            )
            if match_idx is not None and self.is_geometry_upgrade(secondary[match_idx]):
                merged.append(record.with_geometry_from(secondary[match_idx]))
                reused.add(match_idx)
                upgraded += 1
            else:
                merged.append(record)

        # === STEP 2: NAME DEDUPLICATION ===
        primary_names = {normalize_school_name(r.name) for r in primary}
        additional = [
            (idx, school)
            for idx, school in enumerate(secondary)
            if normalize_school_name(school.name) not in primary_names
        ]
        double_surfaced = tuple(school.id for idx, school in additional if idx in reused)

        result = LinkageResult(
            schools=tuple(merged) + tuple(school for _, school in additional),
            hybrid_count=upgraded,
            appended_count=len(additional),
            double_surfaced_ids=double_surfaced,
        )

        logger.info(
            f"🔗 Linked {len(primary)} primary + {len(secondary)} secondary schools -> "
            f"{len(result.schools)} ({result.hybrid_count} hybrid, "
            f"{result.appended_count} appended)"
        )
        if double_surfaced:
            logger.warning(
                f"⚠️ {len(double_surfaced)} secondary schools were used for geometry "
                f"and also appended by name: {', '.join(double_surfaced[:5])}"
                + ("..." if len(double_surfaced) > 5 else "")
            )
        return result

    def merge(
        self, primary: Sequence[School], secondary: Sequence[School]
    ) -> List[School]:
        """Merged, deduplicated school list (see link())."""
        return list(self.link(primary, secondary).schools)


def link_school_records(
    primary: Sequence[School],
    secondary: Sequence[School],
    config: Optional[LinkageConfig] = None,
) -> LinkageResult:
    """Link two school collections with the given (or default) policy."""
    return SchoolRecordLinker(config).link(primary, secondary)


def merge_schools(
    primary: Sequence[School],
    secondary: Sequence[School],
    config: Optional[LinkageConfig] = None,
) -> List[School]:
    """Merged, deduplicated school list with the given (or default) policy."""
    return SchoolRecordLinker(config).merge(primary, secondary)
