"""Data models package for typed school, feature, zone and statistics structures."""

from .data_models import (
    COUNTED_CATEGORIES,
    ContactInfo,
    Feature,
    LatLng,
    LayerSnapshot,
    LayerType,
    RiskLevel,
    School,
    SchoolDetails,
    SchoolSource,
    Zone,
)

from .zone_stats import (
    CATEGORY_FIELDS,
    AnalysisResult,
    CategoryCounts,
    ZoneStatistics,
)

__all__ = [
    # Domain models
    "COUNTED_CATEGORIES",
    "ContactInfo",
    "Feature",
    "LatLng",
    "LayerSnapshot",
    "LayerType",
    "RiskLevel",
    "School",
    "SchoolDetails",
    "SchoolSource",
    "Zone",
    # Statistics models
    "CATEGORY_FIELDS",
    "AnalysisResult",
    "CategoryCounts",
    "ZoneStatistics",
]
