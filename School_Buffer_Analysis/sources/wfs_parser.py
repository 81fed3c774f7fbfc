"""
Parsers for WFS GeoJSON responses (official schools and map layers).

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Turn GeoJSON FeatureCollections published by the provincial
WFS into School and Feature instances. Positions arrive as [lng, lat] and are
converted to LatLng here, at the boundary.

Key Features:
- Official schools are points: each gets a placeholder square polygon and
  source=OFFICIAL. Records without point coordinates are skipped
- Layer features get a representative point per geometry type:
    Point         -> the point
    MultiPoint    -> first point
    Polygon       -> vertex mean of the exterior ring
    MultiPolygon  -> vertex mean of the first polygon's exterior ring
  Any other geometry type yields point=None (kept for totals, excluded from
  spatial tests)
- Malformed records are skipped with a debug log, never raised

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..geometry.coordinates import (
    latlng_from_lnglat,
    point_square_polygon,
    ring_from_lnglat,
    vertex_centroid,
)
from ..models.data_models import (
    ContactInfo,
    Feature,
    LatLng,
    LayerType,
    Ring,
    School,
    SchoolDetails,
    SchoolSource,
)
from .layer_catalog import get_layer_label, get_name_field

logger = logging.getLogger(__name__)

NO_ADDRESS = "Dirección no disponible"
UNNAMED_SCHOOL = "Sin nombre"
REGION_NAME = "Córdoba"


def _first(props: Mapping[str, Any], *keys: str) -> Optional[Any]:
    """First truthy attribute among keys, or None."""
    for key in keys:
        value = props.get(key)
        if value:
            return value
    return None


def _features_of(payload: Optional[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Feature list of a FeatureCollection; anything else is empty."""
    features = (payload or {}).get("features")
    return features if isinstance(features, list) else []


# ═══════════════════════════════════════════════════════════════════════════════
# 🏫 OFFICIAL SCHOOLS
# ═══════════════════════════════════════════════════════════════════════════════


def build_official_address(props: Mapping[str, Any]) -> str:
    """Street, locality, department and region joined with ", "."""
    parts = [
        _first(props, "domicilio", "direccion", "calle"),
        props.get("localidad"),
        props.get("departamento"),
        REGION_NAME,
    ]
    parts = [str(p) for p in parts if p]
    return ", ".join(parts) if parts else NO_ADDRESS


def _point_coordinates(geometry: Optional[Mapping[str, Any]]) -> Optional[LatLng]:
    """LatLng of a Point geometry, or None when coordinates are missing."""
    coords = (geometry or {}).get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    try:
        return latlng_from_lnglat(coords)
    except (TypeError, ValueError):
        return None


def parse_official_school(
    feature: Mapping[str, Any], index: int = 0
) -> Optional[School]:
    """
    Convert one WFS school feature to a School.

    Args:
        feature: GeoJSON Feature with Point geometry
        index: Position in the collection, used when the record has no id

    Returns:
        School with a placeholder square polygon, or None when the feature
        has no usable point
    """
    props = feature.get("properties") or {}
    point = _point_coordinates(feature.get("geometry"))
    if point is None:
        logger.debug(f"Skipping official school #{index} without point coordinates")
        return None

    record_id = _first(props, "id", "gid") or feature.get("id") or index

    return School(
        id=f"idecor_{record_id}",
        name=_first(props, "nombre", "establecimiento") or UNNAMED_SCHOOL,
        polygon=point_square_polygon(point),
        address=build_official_address(props),
        contact_info=ContactInfo(
            phone=_first(props, "telefono", "tel") or "",
            email=_first(props, "email", "mail") or "",
            website=_first(props, "web", "sitio_web"),
        ),
        details=SchoolDetails(
            level=_first(props, "nivel", "tipo_nivel"),
            sector=_first(props, "sector", "gestion"),
            setting=props.get("ambito"),
            cue=_first(props, "cue", "cueanexo"),
            source=SchoolSource.OFFICIAL,
        ),
    )


def parse_official_schools(payload: Optional[Mapping[str, Any]]) -> List[School]:
    """
    Convert a WFS FeatureCollection of schools to School records.

    Returns:
        Schools in payload order; features without point coordinates are
        dropped
    """
    features = _features_of(payload)
    schools: List[School] = []
    for idx, feature in enumerate(features):
        school = parse_official_school(feature, idx)
        if school is not None:
            schools.append(school)
    skipped = len(features) - len(schools)
    logger.info(
        f"   ✅ Parsed {len(schools)} official schools"
        + (f" ({skipped} skipped without coordinates)" if skipped else "")
    )
    return schools


# ═══════════════════════════════════════════════════════════════════════════════
# 🏥 LAYER FEATURES
# ═══════════════════════════════════════════════════════════════════════════════


def extract_representative_point(
    geometry: Optional[Mapping[str, Any]],
) -> Tuple[Optional[LatLng], Optional[Ring]]:
    """
    Representative point and exterior ring of a GeoJSON geometry.

    Args:
        geometry: GeoJSON geometry mapping

    Returns:
        (point, polygon); polygon is only set for Polygon and MultiPolygon.
        Unsupported or malformed geometries return (None, None)
    """
    if not geometry:
        return None, None
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")

    try:
        if geom_type == "Point":
            return latlng_from_lnglat(coords), None
        if geom_type == "MultiPoint":
            return latlng_from_lnglat(coords[0]), None
        if geom_type == "Polygon":
            ring = ring_from_lnglat(coords[0])
            return vertex_centroid(ring), ring
        if geom_type == "MultiPolygon":
            ring = ring_from_lnglat(coords[0][0])
            return vertex_centroid(ring), ring
    except (IndexError, KeyError, TypeError, ValueError) as e:
        logger.debug(f"Unusable {geom_type} geometry: {e}")
        return None, None

    return None, None


def parse_layer_feature(
    feature: Mapping[str, Any],
    layer_type: Union[str, LayerType],
    index: int = 0,
    name_field: Optional[str] = None,
) -> Feature:
    """
    Convert one WFS feature to a layer Feature.

    Args:
        feature: GeoJSON Feature
        layer_type: Category of the layer being parsed
        index: Position in the collection, used when the feature has no id
        name_field: Attribute holding the name (default from the catalogue)
    """
    layer = LayerType.coerce(layer_type)
    props: Dict[str, Any] = dict(feature.get("properties") or {})
    name_field = name_field or get_name_field(layer)
    point, polygon = extract_representative_point(feature.get("geometry"))

    return Feature(
        id=str(feature.get("id") or f"{layer.value}-{index}"),
        name=props.get(name_field) or f"{get_layer_label(layer)} sin nombre",
        layer_type=layer,
        point=point,
        polygon=polygon,
        properties=props,
    )


def parse_layer_features(
    payload: Optional[Mapping[str, Any]],
    layer_type: Union[str, LayerType],
    name_field: Optional[str] = None,
) -> List[Feature]:
    """
    Convert a WFS FeatureCollection to layer Features.

    Features without a geometry member are dropped. Features whose geometry
    type is unsupported are kept with point=None so they still count in the
    layer totals.
    """
    layer = LayerType.coerce(layer_type)
    parsed = [
        parse_layer_feature(feature, layer, idx, name_field)
        for idx, feature in enumerate(_features_of(payload))
        if feature.get("geometry")
    ]
    without_point = sum(1 for f in parsed if f.point is None)
    if without_point:
        logger.warning(
            f"   ⚠️ {without_point}/{len(parsed)} {layer.value} features have no "
            "representative point and are excluded from zone counts"
        )
    logger.info(f"   ✅ Parsed {len(parsed)} {layer.value} features")
    return parsed


# ═══════════════════════════════════════════════════════════════════════════════
# 🔧 REQUEST PARAMETERS
# ═══════════════════════════════════════════════════════════════════════════════


def format_wfs_bbox(bbox: Sequence[float], crs: str = "EPSG:4326") -> str:
    """WFS bbox parameter "minx,miny,maxx,maxy,CRS"."""
    return ",".join(str(float(v)) for v in bbox) + f",{crs}"


def build_wfs_params(
    type_name: str,
    bbox: Optional[Sequence[float]] = None,
    count: Optional[int] = 5000,
) -> Dict[str, str]:
    """
    GetFeature query parameters for a WFS layer.

    Args:
        type_name: WFS typeName (e.g., "idecor:Centros_Salud")
        bbox: (minx, miny, maxx, maxy) in EPSG:4326, omitted when None
        count: Maximum features, omitted when None
    """
    params = {
        "service": "WFS",
        "version": "2.0.0",
        "request": "GetFeature",
        "typeName": type_name,
        "outputFormat": "application/json",
        "srsName": "EPSG:4326",
    }
    if count is not None:
        params["count"] = str(count)
    if bbox is not None:
        params["bbox"] = format_wfs_bbox(bbox)
    return params
