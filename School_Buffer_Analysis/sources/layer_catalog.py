"""
Layer catalogue for the map overlays offered by the application.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized metadata for every LayerType: display name, WFS
type name, attribute holding the feature name, and display colour.

Key Features:
1. One entry per LayerType, keyed by its string value
2. Layers without a WFS type name (police) are fetched through Overpass
3. Only the counted categories feed buffer statistics; the remaining layers
   are display-only overlays

Navigation Guide:
- LAYER_CATALOG: Main catalogue dictionary
- get_layer_entry() / get_layer_label() / get_name_field(): typed accessors

MODIFICATION POINT: Add new provider layers to LAYER_CATALOG together with a
new LayerType value in models/data_models.py.
"""

from typing import Any, Dict, List, Optional, Union

from ..models.data_models import COUNTED_CATEGORIES, LayerType

# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ LAYER CATALOGUE
# ═══════════════════════════════════════════════════════════════════════════
# Each layer has:
# - display_name: Label shown in legends and used in "<label> sin nombre"
# - wfs_type_name: WFS typeName, or None when the layer comes from Overpass
# - name_field: Feature attribute holding the display name
# - color: Marker / outline colour
# - overpass_amenity: Overpass amenity tag for layers outside the WFS
# ═══════════════════════════════════════════════════════════════════════════

LAYER_CATALOG: Dict[str, Dict[str, Any]] = {
    "schools": {
        "display_name": "Escuelas",
        "wfs_type_name": "idecor:establecimientos_educativos",
        "name_field": "nombre",
        "color": "#3498db",
    },
    "hospitals": {
        "display_name": "Centros de Salud",
        "wfs_type_name": "idecor:Centros_Salud",
        "name_field": "nombre",
        "color": "#e74c3c",
    },
    "police": {
        "display_name": "Comisarías",
        "wfs_type_name": None,  # Not published by the WFS
        "name_field": "nombre",
        "color": "#2c3e50",
        "overpass_amenity": "police",
    },
    "fire_stations": {
        "display_name": "Bomberos",
        "wfs_type_name": "idecor:cuarteles_bbvv",
        "name_field": "nombre",
        "color": "#e67e22",
    },
    "risk_zones": {
        "display_name": "Zonas de Riesgo",
        "wfs_type_name": "idecor:zonas_riesgo_cuarteles",
        "name_field": "zona_riesgo",
        "color": "#9b59b6",
    },
    "burned_areas": {
        "display_name": "Áreas Quemadas 2024",
        "wfs_type_name": "idecor:area_quemada_2024",
        "name_field": "nombre",
        "color": "#c0392b",
    },
    "geology": {
        "display_name": "Mapa Geológico",
        "wfs_type_name": "idecor:litologia_geol",
        "name_field": "litologia",
        "color": "#795548",
    },
    "natural_areas": {
        "display_name": "Áreas Naturales Protegidas",
        "wfs_type_name": "idecor:areas_naturales_provinciales",
        "name_field": "nombre",
        "color": "#27ae60",
    },
    "natural_regions": {
        "display_name": "Regiones Naturales",
        "wfs_type_name": "idecor:regiones_naturales",
        "name_field": "region",
        "color": "#16a085",
    },
    "soil_map": {
        "display_name": "Carta de Suelos",
        "wfs_type_name": "idecor:carta_suelo_500mil_2024",
        "name_field": "nombre",
        "color": "#8d6e63",
    },
}


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 ACCESSORS
# ═══════════════════════════════════════════════════════════════════════════


def get_layer_entry(layer_type: Union[str, LayerType]) -> Dict[str, Any]:
    """
    Catalogue entry for a layer.

    Args:
        layer_type: LayerType or its string value

    Returns:
        Entry dict (empty when the layer is not catalogued)
    """
    return LAYER_CATALOG.get(LayerType.coerce(layer_type).value, {})


def get_layer_label(layer_type: Union[str, LayerType]) -> str:
    """Display name of a layer, falling back to its string value."""
    layer = LayerType.coerce(layer_type)
    return get_layer_entry(layer).get("display_name", layer.value)


def get_name_field(layer_type: Union[str, LayerType]) -> str:
    """Attribute holding the feature name (default "nombre")."""
    return get_layer_entry(layer_type).get("name_field", "nombre")


def get_wfs_type_name(layer_type: Union[str, LayerType]) -> Optional[str]:
    """WFS typeName, or None for layers served by Overpass."""
    return get_layer_entry(layer_type).get("wfs_type_name")


def get_counted_layer_keys() -> List[str]:
    """String keys of the layers that feed buffer statistics."""
    return [layer.value for layer in COUNTED_CATEGORIES]
