"""
Parsers and query builders for Overpass API responses.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Turn Overpass `out geom` / `out center` elements into School
and Feature instances. Geometry nodes arrive as {"lat", "lon"} mappings.

Key Features:
- Community schools: elements without geometry are skipped; outlines with
  fewer than 3 distinct points (before closing) are rejected; open outlines
  are closed by repeating the first vertex
- Amenity features: nodes use their own lat/lon, ways use `center` when
  present and otherwise the vertex mean of their geometry
- Query builders produce the same query text for a given bbox

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..geometry.coordinates import (
    close_ring,
    distinct_vertex_count,
    latlng_from_overpass,
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
from .layer_catalog import get_layer_label

logger = logging.getLogger(__name__)

NO_ADDRESS = "Dirección no disponible"
UNNAMED_SCHOOL = "Escuela sin nombre"

# Minimum distinct outline points before the ring is closed
MIN_OUTLINE_POINTS = 3


def _elements_of(payload: Optional[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    elements = (payload or {}).get("elements")
    return elements if isinstance(elements, list) else []


def _geometry_ring(element: Mapping[str, Any]) -> Ring:
    """Outline nodes of an element as LatLng, malformed nodes dropped."""
    ring: List[LatLng] = []
    for node in element.get("geometry") or ():
        try:
            ring.append(latlng_from_overpass(node))
        except (KeyError, TypeError, ValueError):
            continue
    return tuple(ring)


# ═══════════════════════════════════════════════════════════════════════════════
# 🏫 COMMUNITY SCHOOLS
# ═══════════════════════════════════════════════════════════════════════════════


def build_community_address(tags: Mapping[str, Any]) -> str:
    """Street and house number plus ", Córdoba"."""
    parts = [str(tags[k]) for k in ("addr:street", "addr:housenumber") if tags.get(k)]
    if parts:
        return " ".join(parts) + ", Córdoba"
    return NO_ADDRESS


def parse_community_school(element: Mapping[str, Any]) -> Optional[School]:
    """
    Convert one Overpass way/relation to a School.

    Returns:
        School with a closed traced outline, or None when the element has no
        geometry or fewer than 3 distinct outline points
    """
    if not element.get("geometry"):
        return None

    ring = _geometry_ring(element)
    distinct = distinct_vertex_count(ring)
    if distinct < MIN_OUTLINE_POINTS:
        logger.debug(
            f"Rejecting OSM element {element.get('id')}: {distinct} distinct outline points"
        )
        return None

    tags = element.get("tags") or {}
    return School(
        id=f"osm_{element.get('id')}",
        name=tags.get("name") or UNNAMED_SCHOOL,
        polygon=close_ring(ring),
        address=build_community_address(tags),
        contact_info=ContactInfo(
            phone=tags.get("contact:phone") or tags.get("phone") or "",
            email=tags.get("contact:email") or tags.get("email") or "",
            website=tags.get("contact:website") or tags.get("website"),
        ),
        details=SchoolDetails(source=SchoolSource.COMMUNITY),
    )


def parse_community_schools(payload: Optional[Mapping[str, Any]]) -> List[School]:
    """Convert an Overpass response to community School records, in order."""
    elements = _elements_of(payload)
    schools: List[School] = []
    for element in elements:
        school = parse_community_school(element)
        if school is not None:
            schools.append(school)
    logger.info(
        f"   ✅ Parsed {len(schools)} community schools from {len(elements)} elements"
    )
    return schools


# ═══════════════════════════════════════════════════════════════════════════════
# 👮 AMENITY FEATURES
# ═══════════════════════════════════════════════════════════════════════════════


def _amenity_point(element: Mapping[str, Any]) -> Optional[LatLng]:
    """Node position, way centre, or vertex mean of the way geometry."""
    try:
        if "lat" in element and "lon" in element:
            return latlng_from_overpass(element)
        if element.get("center"):
            return latlng_from_overpass(element["center"])
    except (KeyError, TypeError, ValueError):
        return None
    return vertex_centroid(_geometry_ring(element))


def parse_amenity_features(
    payload: Optional[Mapping[str, Any]],
    layer_type: Union[str, LayerType] = LayerType.POLICE,
) -> List[Feature]:
    """
    Convert Overpass amenity elements to layer Features.

    Elements whose position cannot be derived are kept with point=None.
    """
    layer = LayerType.coerce(layer_type)
    label = get_layer_label(layer)
    features: List[Feature] = []
    for idx, element in enumerate(_elements_of(payload)):
        tags = dict(element.get("tags") or {})
        element_id = element.get("id")
        features.append(
            Feature(
                id=f"osm_{element_id}" if element_id is not None else f"{layer.value}-{idx}",
                name=tags.get("name") or f"{label} sin nombre",
                layer_type=layer,
                point=_amenity_point(element),
                properties=tags,
            )
        )
    logger.info(f"   ✅ Parsed {len(features)} {layer.value} features from Overpass")
    return features


# ═══════════════════════════════════════════════════════════════════════════════
# 🔧 QUERY BUILDERS
# ═══════════════════════════════════════════════════════════════════════════════


def format_overpass_bbox(bbox: Sequence[float]) -> str:
    """Overpass bbox "south,west,north,east" with 4 decimals."""
    return ",".join(f"{float(v):.4f}" for v in bbox)


def build_school_query(bbox: Sequence[float], timeout_s: int = 60) -> str:
    """Overpass QL for school outlines (ways and relations) inside bbox."""
    box = format_overpass_bbox(bbox)
    return (
        f"[out:json][timeout:{timeout_s}];\n"
        "(\n"
        f'  way["amenity"="school"]({box});\n'
        f'  relation["amenity"="school"]({box});\n'
        ");\n"
        "out geom;"
    )


def build_amenity_query(amenity: str, bbox: Sequence[float], timeout_s: int = 60) -> str:
    """Overpass QL for amenity nodes and ways inside bbox, ways with centres."""
    box = format_overpass_bbox(bbox)
    return (
        f"[out:json][timeout:{timeout_s}];\n"
        "(\n"
        f'  node["amenity"="{amenity}"]({box});\n'
        f'  way["amenity"="{amenity}"]({box});\n'
        ");\n"
        "out center;"
    )
