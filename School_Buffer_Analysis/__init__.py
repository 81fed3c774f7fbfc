"""
School Buffer Analysis

Buffer-zone risk analysis around a point: concentric geodesic rings with
rank-based risk classes, per-ring counts of schools and civic-infrastructure
features, and linkage of official and community school records.
"""

from .buffer_zones import RingZoneBuilder, create_buffer_zones
from .config_types import (
    AppConfig,
    BufferConfig,
    LinkageConfig,
    RiskPolicyConfig,
    SourcesConfig,
    ZoneStyleConfig,
)
from .models import (
    AnalysisResult,
    CategoryCounts,
    Feature,
    LatLng,
    LayerSnapshot,
    LayerType,
    RiskLevel,
    School,
    SchoolSource,
    Zone,
    ZoneStatistics,
)
from .school_linkage import (
    LinkageResult,
    SchoolRecordLinker,
    link_school_records,
    merge_schools,
    normalize_school_name,
)
from .spatial_aggregation import (
    SpatialAggregator,
    analyze_buffer_zones,
    calculate_distance_km,
    get_zone_for_point,
    is_point_in_zone,
)

__version__ = "0.1.0"

__all__ = [
    # Components
    "RingZoneBuilder",
    "SpatialAggregator",
    "SchoolRecordLinker",
    # Entry points
    "analyze_buffer_zones",
    "create_buffer_zones",
    "link_school_records",
    "merge_schools",
    "normalize_school_name",
    "calculate_distance_km",
    "get_zone_for_point",
    "is_point_in_zone",
    # Configuration
    "AppConfig",
    "BufferConfig",
    "LinkageConfig",
    "RiskPolicyConfig",
    "SourcesConfig",
    "ZoneStyleConfig",
    # Models
    "AnalysisResult",
    "CategoryCounts",
    "Feature",
    "LatLng",
    "LayerSnapshot",
    "LayerType",
    "LinkageResult",
    "RiskLevel",
    "School",
    "SchoolSource",
    "Zone",
    "ZoneStatistics",
]
