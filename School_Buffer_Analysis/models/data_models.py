"""
Typed data models for schools, civic-infrastructure features and buffer zones.

Architectural Overview:
=======================
This module contains immutable dataclasses shared by the ring builder, the
spatial aggregator and the school record linker. Every coordinate inside the
domain model is a LatLng in (latitude, longitude) order; conversion to and from
provider orderings happens only in geometry/coordinates.py.

Key Interactions:
-----------------
- Input: sources/ adapters create School and Feature instances from payloads
- Output: buffer_zones.py creates Zone instances, spatial_aggregation.py
  attaches ring polygons and produces statistics (models/zone_stats.py)
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

Data Flow:
----------
1. Official schools arrive with source=OFFICIAL and a placeholder square
2. Community schools arrive with source=COMMUNITY and a traced outline
3. Linked schools keep official attributes, take the traced outline, and
   become source=HYBRID
4. Layer features are frozen into a LayerSnapshot before each analysis

MODIFICATION POINT: Add new LayerType values here for future map layers
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from shapely.geometry.base import BaseGeometry


# ═══════════════════════════════════════════════════════════════════════════
# 📍 CANONICAL POINT
# ═══════════════════════════════════════════════════════════════════════════


class LatLng(NamedTuple):
    """WGS84 point in (latitude, longitude) order, degrees."""

    lat: float
    lng: float


Ring = Tuple[LatLng, ...]


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class RiskLevel(Enum):
    """Risk class of a buffer ring, assigned by rank position."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_string(cls, s: str) -> "RiskLevel":
        """Convert string to RiskLevel, with fallback to LOW.

        Args:
            s: String like "high", "medium", "low"

        Returns:
            Matching RiskLevel enum member, or LOW if not found
        """
        for member in cls:
            if member.value == s:
                return member
        return cls.LOW


class LayerType(Enum):
    """Map layers offered by the application.

    Only the first five are counted by the buffer analysis; the remaining
    layers are display-only overlays.
    """

    SCHOOLS = "schools"
    HOSPITALS = "hospitals"
    POLICE = "police"
    FIRE_STATIONS = "fire_stations"
    RISK_ZONES = "risk_zones"
    BURNED_AREAS = "burned_areas"
    GEOLOGY = "geology"
    NATURAL_AREAS = "natural_areas"
    NATURAL_REGIONS = "natural_regions"
    SOIL_MAP = "soil_map"

    @classmethod
    def coerce(cls, value: Union[str, "LayerType"]) -> "LayerType":
        """Accept either a LayerType or its string value.

        Raises:
            ValueError: If the string is not a known layer type
        """
        if isinstance(value, cls):
            return value
        return cls(str(value))


# Categories that appear in ZoneStatistics, in display order
COUNTED_CATEGORIES: Tuple[LayerType, ...] = (
    LayerType.SCHOOLS,
    LayerType.HOSPITALS,
    LayerType.POLICE,
    LayerType.FIRE_STATIONS,
    LayerType.RISK_ZONES,
)


class SchoolSource(Enum):
    """Provenance of a school record's geometry."""

    OFFICIAL = "official"  # Government registry, point placeholder square
    COMMUNITY = "community"  # Community-mapped traced outline
    HYBRID = "hybrid"  # Official record with a community outline

    @classmethod
    def from_string(cls, s: str) -> "SchoolSource":
        """Convert string to SchoolSource, with fallback to OFFICIAL."""
        for member in cls:
            if member.value == s:
                return member
        return cls.OFFICIAL


# ═══════════════════════════════════════════════════════════════════════════
# 🏫 SCHOOL DATACLASSES SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ContactInfo:
    """Contact details as published by the provider."""

    phone: str = ""
    email: str = ""
    website: Optional[str] = None


@dataclass(frozen=True)
class SchoolDetails:
    """Optional registry attributes plus provenance.

    Attributes:
        level: Education level ("nivel")
        sector: Public/private management ("sector" / "gestion")
        setting: Urban/rural setting ("ambito")
        students: Enrolment count when known
        status: Operational status when known
        cue: Unique establishment code
        source: Provenance of the geometry
    """

    level: Optional[str] = None
    sector: Optional[str] = None
    setting: Optional[str] = None
    students: Optional[int] = None
    status: Optional[str] = None
    cue: Optional[str] = None
    source: SchoolSource = SchoolSource.OFFICIAL


@dataclass(frozen=True)
class School:
    """Immutable school record with a required polygon.

    The polygon is a closed ring of LatLng vertices (first == last). Official
    records only carry a point, so their polygon is a small placeholder square;
    community records carry the traced building outline.

    Usage Examples:
    ---------------
    ```python
    school = School(id="osm_1", name="Escuela Normal", polygon=ring)
    center = school.centroid()          # vertex mean, may be None
    hybrid = official.with_geometry_from(school)
    ```
    """

    id: str
    name: str
    polygon: Ring = ()
    address: str = ""
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    detected: bool = True
    color: Optional[str] = None
    details: SchoolDetails = field(default_factory=SchoolDetails)

    @property
    def source(self) -> SchoolSource:
        """Provenance tag of this record's geometry."""
        return self.details.source

    @property
    def vertex_count(self) -> int:
        """Number of ring vertices, closing vertex included."""
        return len(self.polygon)

    def centroid(self) -> Optional[LatLng]:
        """Arithmetic mean of all ring vertices (not area-weighted).

        Returns:
            LatLng, or None when the school has no polygon
        """
        from ..geometry.coordinates import vertex_centroid

        return vertex_centroid(self.polygon)

    def with_geometry_from(self, other: "School") -> "School":
        """Copy of this record carrying other's polygon, tagged HYBRID.

        All other attributes (name, address, registry details) are preserved.
        """
        return replace(
            self,
            polygon=other.polygon,
            details=replace(self.details, source=SchoolSource.HYBRID),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict (polygon as [lat, lng] pairs)."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "contact_info": {
                "phone": self.contact_info.phone,
                "email": self.contact_info.email,
                "website": self.contact_info.website,
            },
            "polygon": [[p.lat, p.lng] for p in self.polygon],
            "detected": self.detected,
            "level": self.details.level,
            "sector": self.details.sector,
            "setting": self.details.setting,
            "cue": self.details.cue,
            "source": self.details.source.value,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 🏥 LAYER FEATURE DATACLASSES SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Feature:
    """A categorized point or area feature from a map layer.

    Attributes:
        id: Provider identifier
        name: Display name
        layer_type: Category this feature belongs to
        point: Representative point, or None when the source geometry was
            unusable (such features are excluded from spatial tests)
        polygon: Exterior ring for area features
        properties: Raw provider attributes
    """

    id: str
    name: str
    layer_type: LayerType
    point: Optional[LatLng] = None
    polygon: Optional[Ring] = None
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class LayerSnapshot:
    """Immutable view of the loaded layer features for one analysis.

    The map UI loads layers incrementally; the analysis never reads that
    mutable registry. Callers freeze its current state into a snapshot and
    pass the snapshot explicitly.
    """

    layers: Mapping[LayerType, Tuple[Feature, ...]] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, mapping: Optional[Mapping[Union[str, LayerType], Iterable[Feature]]]
    ) -> "LayerSnapshot":
        """Freeze a mapping of layer type (or its string value) to features."""
        if isinstance(mapping, LayerSnapshot):
            return mapping
        frozen: Dict[LayerType, Tuple[Feature, ...]] = {}
        for key, features in (mapping or {}).items():
            frozen[LayerType.coerce(key)] = tuple(features or ())
        return cls(layers=frozen)

    def get(self, layer_type: LayerType) -> Tuple[Feature, ...]:
        """Features of one layer; an unloaded layer is an empty tuple."""
        return self.layers.get(layer_type, ())

    def count(self, layer_type: LayerType) -> int:
        """Raw number of features in one layer, regardless of geometry."""
        return len(self.get(layer_type))

    def layer_types(self) -> List[LayerType]:
        """Loaded layer types in insertion order."""
        return list(self.layers.keys())


# ═══════════════════════════════════════════════════════════════════════════
# ⭕ BUFFER ZONE DATACLASS SECTION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Zone:
    """One concentric ring around the analysis centre.

    Invariants:
    -----------
    - id is 1-based and increases outward
    - radius_km never exceeds the configured total radius and the last zone
      equals it exactly

    Attributes:
        id: Ring index (1 = innermost)
        radius_km: Outer radius of this ring
        risk_level: Rank-based risk class
        color: Display colour for the risk level
        fill_opacity: Display opacity, decreasing outward
        buffer_polygon: Full geodesic disc of radius_km (x=lng, y=lat)
        ring_polygon: Area exclusive to this ring, set by the aggregator
    """

    id: int
    radius_km: float
    risk_level: RiskLevel
    color: str
    fill_opacity: float
    buffer_polygon: Optional[BaseGeometry] = None
    ring_polygon: Optional[BaseGeometry] = None

    def with_ring(self, ring_polygon: BaseGeometry) -> "Zone":
        """Copy of this zone carrying its ring polygon."""
        return replace(self, ring_polygon=ring_polygon)

    def as_dict(self) -> Dict[str, Any]:
        """Convert scalar attributes to a dict (geometry excluded)."""
        return {
            "id": self.id,
            "radius_km": self.radius_km,
            "risk_level": self.risk_level.value,
            "color": self.color,
            "fill_opacity": self.fill_opacity,
        }
