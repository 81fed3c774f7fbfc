"""
Local layer files loaded with geopandas.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Read GeoJSON / shapefile layer exports from disk and convert
their rows to layer Features using the same representative-point rules as
the WFS parser.

Key Features:
1. Files are reprojected to EPSG:4326 (a missing CRS is assumed to be it)
2. Row geometries go through shapely.geometry.mapping so that a file and the
   equivalent WFS response produce identical features
3. Missing attribute values (NaN / None) are dropped from properties

Navigation Guide:
- load_layer_file(): read + reproject
- features_from_geodataframe(): rows -> Features
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import geopandas as gpd
from shapely.geometry import mapping

from ..models.data_models import Feature, LayerType
from .layer_catalog import get_layer_label, get_name_field
from .wfs_parser import extract_representative_point

logger = logging.getLogger(__name__)

TARGET_CRS = "EPSG:4326"


def load_layer_file(path: Union[str, Path]) -> gpd.GeoDataFrame:
    """
    Load a vector file and ensure WGS84 lon/lat coordinates.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    logger.info(f"📂 Loading layer file: {path}")
    if not path.exists():
        raise FileNotFoundError(f"Layer file not found: {path}")

    gdf = gpd.read_file(path)
    if gdf.crs is None:
        gdf = gdf.set_crs(TARGET_CRS)
    elif gdf.crs.to_string() != TARGET_CRS:
        gdf = gdf.to_crs(TARGET_CRS)

    logger.info(f"   ✅ Loaded {len(gdf)} features")
    return gdf


def features_from_geodataframe(
    gdf: gpd.GeoDataFrame,
    layer_type: Union[str, LayerType],
    name_field: Optional[str] = None,
) -> List[Feature]:
    """
    Convert GeoDataFrame rows to layer Features.

    Args:
        gdf: Layer rows; reprojected to EPSG:4326 when in another CRS
        layer_type: Category of the layer
        name_field: Attribute holding the name (default from the catalogue)

    Returns:
        Features in row order; rows with an empty geometry are dropped
    """
    layer = LayerType.coerce(layer_type)
    name_field = name_field or get_name_field(layer)
    label = get_layer_label(layer)

    if gdf.crs is not None and gdf.crs.to_string() != TARGET_CRS:
        gdf = gdf.to_crs(TARGET_CRS)

    geometry_col = gdf.geometry.name
    features: List[Feature] = []
    for idx, (_, row) in enumerate(gdf.iterrows()):
        geom = row[geometry_col]
        if geom is None or geom.is_empty:
            continue

        props = row.drop(labels=[geometry_col]).dropna().to_dict()
        point, polygon = extract_representative_point(mapping(geom))
        features.append(
            Feature(
                id=str(props.get("id") or f"{layer.value}-{idx}"),
                name=props.get(name_field) or f"{label} sin nombre",
                layer_type=layer,
                point=point,
                polygon=polygon,
                properties=props,
            )
        )

    logger.info(f"   ✅ Converted {len(features)} {layer.value} rows")
    return features
