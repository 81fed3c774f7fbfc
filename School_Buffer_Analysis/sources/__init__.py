"""Provider adapters: WFS / Overpass parsers, local layer files and HTTP fetches."""

from .geodataframe import features_from_geodataframe, load_layer_file
from .http_client import (
    fetch_amenity_features,
    fetch_community_schools,
    fetch_json,
    fetch_layer_features,
    fetch_official_schools,
)
from .layer_catalog import (
    LAYER_CATALOG,
    get_counted_layer_keys,
    get_layer_entry,
    get_layer_label,
    get_name_field,
    get_wfs_type_name,
)
from .overpass_parser import (
    build_amenity_query,
    build_school_query,
    parse_amenity_features,
    parse_community_school,
    parse_community_schools,
)
from .wfs_parser import (
    build_wfs_params,
    extract_representative_point,
    parse_layer_feature,
    parse_layer_features,
    parse_official_school,
    parse_official_schools,
)

__all__ = [
    # Catalogue
    "LAYER_CATALOG",
    "get_counted_layer_keys",
    "get_layer_entry",
    "get_layer_label",
    "get_name_field",
    "get_wfs_type_name",
    # WFS
    "build_wfs_params",
    "extract_representative_point",
    "parse_layer_feature",
    "parse_layer_features",
    "parse_official_school",
    "parse_official_schools",
    # Overpass
    "build_amenity_query",
    "build_school_query",
    "parse_amenity_features",
    "parse_community_school",
    "parse_community_schools",
    # Local files
    "features_from_geodataframe",
    "load_layer_file",
    # HTTP
    "fetch_amenity_features",
    "fetch_community_schools",
    "fetch_json",
    "fetch_layer_features",
    "fetch_official_schools",
]
