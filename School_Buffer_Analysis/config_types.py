"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the buffer analysis.
Replaces scattered CONFIG dictionary access with typed, validated config objects.

Usage:
    from School_Buffer_Analysis.config import CONFIG
    from School_Buffer_Analysis.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

    # Use throughout the application
    zones = RingZoneBuilder.from_app_config(app_config).build(center, app_config.buffer)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. BUFFER RING CONFIGURATION
# ═════ 2. RISK POLICY CONFIGURATION
# ═════ 3. ZONE STYLE CONFIGURATION
# ═════ 4. LINKAGE CONFIGURATION
# ═════ 5. SOURCES CONFIGURATION
# ═════ 6. FILE PATHS CONFIGURATION
# ═════ 7. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 1. BUFFER RING CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BufferConfig:
    """
    Ring layout around the analysis centre.

    Attributes:
        total_radius_km: Radius of the outermost ring in kilometres.
        zone_width_km: Width of each ring in kilometres. The last ring is
            clamped to total_radius_km when the width does not divide it.
        buffer_segments: Number of vertices in each geodesic circle.
    """

    total_radius_km: float = 5.0
    zone_width_km: float = 1.0
    buffer_segments: int = 64

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BufferConfig":
        """Create BufferConfig from CONFIG['buffer'] dictionary."""
        return cls(
            total_radius_km=float(d.get("total_radius_km", 5.0)),
            zone_width_km=float(d.get("zone_width_km", 1.0)),
            buffer_segments=int(d.get("buffer_segments", 64)),
        )

    def validate(self) -> None:
        """
        Check that the ring layout is usable.

        Raises:
            ValueError: If either radius or width is not strictly positive,
                or if fewer than 3 buffer segments are requested.
        """
        if not self.total_radius_km > 0:
            raise ValueError(
                f"total_radius_km must be positive, got {self.total_radius_km}"
            )
        if not self.zone_width_km > 0:
            raise ValueError(f"zone_width_km must be positive, got {self.zone_width_km}")
        if self.buffer_segments < 3:
            raise ValueError(
                f"buffer_segments must be at least 3, got {self.buffer_segments}"
            )


# ═══════════════════════════════════════════════════════════════════════════════
# 🚦 2. RISK POLICY CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class RiskPolicyConfig:
    """
    Rank-based risk classification and opacity ramp.

    Attributes:
        high_max_ratio: Rings with index/count <= this are high risk.
        medium_max_ratio: Rings with index/count <= this are medium risk.
        opacity_base: Fill opacity at ratio 0.
        opacity_slope: Opacity lost per unit of ratio.
    """

    high_max_ratio: float = 0.6
    medium_max_ratio: float = 0.8
    opacity_base: float = 0.35
    opacity_slope: float = 0.2

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RiskPolicyConfig":
        """Create RiskPolicyConfig from CONFIG['risk_policy'] dictionary."""
        return cls(
            high_max_ratio=d.get("high_max_ratio", 0.6),
            medium_max_ratio=d.get("medium_max_ratio", 0.8),
            opacity_base=d.get("opacity_base", 0.35),
            opacity_slope=d.get("opacity_slope", 0.2),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🎨 3. ZONE STYLE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_DEFAULT_RISK_COLORS: Dict[str, str] = {
    "high": "#e74c3c",
    "medium": "#f39c12",
    "low": "#27ae60",
}

_DEFAULT_RISK_LABELS: Dict[str, str] = {
    "high": "Alto Riesgo",
    "medium": "Riesgo Medio",
    "low": "Riesgo Bajo",
}


@dataclass(frozen=True)
class ZoneStyleConfig:
    """Colours and display labels keyed by risk level value."""

    risk_colors: Dict[str, str] = field(
        default_factory=lambda: dict(_DEFAULT_RISK_COLORS)
    )
    risk_labels: Dict[str, str] = field(
        default_factory=lambda: dict(_DEFAULT_RISK_LABELS)
    )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ZoneStyleConfig":
        """Create ZoneStyleConfig from CONFIG['zone_style'] dictionary."""
        return cls(
            risk_colors={**_DEFAULT_RISK_COLORS, **d.get("risk_colors", {})},
            risk_labels={**_DEFAULT_RISK_LABELS, **d.get("risk_labels", {})},
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔗 4. LINKAGE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LinkageConfig:
    """
    Record linkage policy between official and community school datasets.

    Attributes:
        match_threshold_deg: Planar centroid distance (degrees) below which
            two records are considered the same school.
        min_vertices_for_geometry_upgrade: The matched polygon must have more
            vertices than this to replace the official geometry.
    """

    match_threshold_deg: float = 0.002
    min_vertices_for_geometry_upgrade: int = 5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LinkageConfig":
        """Create LinkageConfig from CONFIG['linkage'] dictionary."""
        return cls(
            match_threshold_deg=d.get("match_threshold_deg", 0.002),
            min_vertices_for_geometry_upgrade=d.get(
                "min_vertices_for_geometry_upgrade", 5
            ),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🌐 5. SOURCES CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SourcesConfig:
    """
    Provider endpoints and query extents.

    Attributes:
        use_remote_sources: Fetch from providers instead of local files.
        wfs_url: Official WFS endpoint.
        overpass_url: Overpass API interpreter endpoint.
        request_timeout_s: Per-request timeout.
        wfs_max_features: WFS `count` parameter.
        province_bbox: (minx, miny, maxx, maxy) for WFS layer requests.
        city_bbox: (south, west, north, east) for Overpass queries.
    """

    use_remote_sources: bool = False
    wfs_url: str = "https://idecor-ws.mapascordoba.gob.ar/geoserver/idecor/wfs"
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    request_timeout_s: float = 60.0
    wfs_max_features: int = 5000
    province_bbox: Tuple[float, float, float, float] = (-66.0, -35.0, -62.0, -29.5)
    city_bbox: Tuple[float, float, float, float] = (-31.48, -64.25, -31.35, -64.12)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourcesConfig":
        """Create SourcesConfig from CONFIG['sources'] dictionary."""
        return cls(
            use_remote_sources=d.get("use_remote_sources", False),
            wfs_url=d.get("wfs_url", cls.wfs_url),
            overpass_url=d.get("overpass_url", cls.overpass_url),
            request_timeout_s=d.get("request_timeout_s", 60.0),
            wfs_max_features=d.get("wfs_max_features", 5000),
            province_bbox=tuple(d.get("province_bbox", cls.province_bbox)),
            city_bbox=tuple(d.get("city_bbox", cls.city_bbox)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📁 6. FILE PATHS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilePathsConfig:
    """
    File path configuration for inputs and outputs.

    Attributes:
        official_schools: WFS GeoJSON export of official schools.
        community_schools: Overpass JSON response with school outlines.
        layers: Layer type value -> file path for the counted categories.
        output_dir: Directory for output files.
        log_dir: Directory for log files.
    """

    official_schools: str = ""
    community_schools: str = ""
    layers: Dict[str, str] = field(default_factory=dict)
    output_dir: str = "Output"
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilePathsConfig":
        """Create FilePathsConfig from CONFIG['file_paths'] dictionary."""
        return cls(
            official_schools=d.get("official_schools", ""),
            community_schools=d.get("community_schools", ""),
            layers=dict(d.get("layers", {})),
            output_dir=d.get("output_dir", "Output"),
            log_dir=d.get("log_dir", "logs"),
        )

    def output_dir_path(self, workspace_root: Path) -> Path:
        """Get output directory resolved against workspace root."""
        return workspace_root / self.output_dir

    def log_dir_path(self, workspace_root: Path) -> Path:
        """Get log directory resolved against workspace root."""
        return workspace_root / self.log_dir


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 7. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration object for the buffer analysis application.

    Create it once at application startup using AppConfig.from_dict(CONFIG)
    and pass the relevant sub-configuration to each component.

    Attributes:
        center: Default analysis centre as (lat, lng).
        buffer: Ring layout.
        risk_policy: Rank thresholds and opacity ramp.
        zone_style: Risk colours and labels.
        linkage: School record linkage policy.
        sources: Provider endpoints.
        file_paths: File path configuration.
    """

    center: Tuple[float, float] = (-31.4201, -64.1888)
    buffer: BufferConfig = field(default_factory=BufferConfig)
    risk_policy: RiskPolicyConfig = field(default_factory=RiskPolicyConfig)
    zone_style: ZoneStyleConfig = field(default_factory=ZoneStyleConfig)
    linkage: LinkageConfig = field(default_factory=LinkageConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    file_paths: FilePathsConfig = field(default_factory=FilePathsConfig)

    # Raw config dict for legacy access
    _raw_config: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "AppConfig":
        """
        Create AppConfig from the CONFIG dictionary.

        Args:
            config_dict: The CONFIG dictionary from config.py.

        Returns:
            AppConfig instance with all settings populated.
        """
        center = config_dict.get("analysis", {}).get("center", (-31.4201, -64.1888))
        return cls(
            center=(float(center[0]), float(center[1])),
            buffer=BufferConfig.from_dict(config_dict.get("buffer", {})),
            risk_policy=RiskPolicyConfig.from_dict(config_dict.get("risk_policy", {})),
            zone_style=ZoneStyleConfig.from_dict(config_dict.get("zone_style", {})),
            linkage=LinkageConfig.from_dict(config_dict.get("linkage", {})),
            sources=SourcesConfig.from_dict(config_dict.get("sources", {})),
            file_paths=FilePathsConfig.from_dict(config_dict.get("file_paths", {})),
            _raw_config=config_dict,
        )

    def get_raw(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Get a value from the raw CONFIG dictionary.

        Args:
            key: Top-level key in CONFIG dictionary.
            default: Default value if key not found.

        Returns:
            Value from CONFIG or default.
        """
        return self._raw_config.get(key, default)
