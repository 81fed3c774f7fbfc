"""
Single-attempt HTTP fetches for the WFS and Overpass providers.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Issue one request per call and return decoded JSON payloads
ready for the parsers in this package.

Key Features:
1. `requests` with an explicit timeout on every call
2. HTTP errors propagate (`requests.HTTPError` from raise_for_status)
3. No retries or mirror failover; callers decide what a failed fetch means

Navigation Guide:
- fetch_json(): GET/POST primitive
- fetch_official_schools() / fetch_layer_features(): WFS
- fetch_community_schools() / fetch_amenity_features(): Overpass
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from ..config_types import SourcesConfig
from ..models.data_models import Feature, LayerType, School
from .layer_catalog import get_layer_entry, get_wfs_type_name
from .overpass_parser import (
    build_amenity_query,
    build_school_query,
    parse_amenity_features,
    parse_community_schools,
)
from .wfs_parser import build_wfs_params, parse_layer_features, parse_official_schools

logger = logging.getLogger(__name__)


def fetch_json(
    url: str,
    params: Optional[Dict[str, str]] = None,
    data: Optional[Dict[str, str]] = None,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """
    Fetch a JSON document with a single request.

    Sends POST when `data` is given, GET otherwise.

    Raises:
        requests.RequestException: On connection errors, timeouts and HTTP
            error statuses
    """
    http = session or requests
    if data is not None:
        resp = http.post(url, data=data, timeout=timeout)
    else:
        resp = http.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


# ═══════════════════════════════════════════════════════════════════════════
# 🌐 WFS
# ═══════════════════════════════════════════════════════════════════════════


def fetch_official_schools(
    config: Optional[SourcesConfig] = None,
    session: Optional[requests.Session] = None,
) -> List[School]:
    """Official school registry from the provincial WFS."""
    config = config or SourcesConfig()
    logger.info(f"🌐 Fetching official schools from {config.wfs_url}")
    params = build_wfs_params(
        get_wfs_type_name(LayerType.SCHOOLS), bbox=None, count=None
    )
    payload = fetch_json(
        config.wfs_url, params=params, timeout=config.request_timeout_s, session=session
    )
    return parse_official_schools(payload)


def fetch_layer_features(
    layer_type: Union[str, LayerType],
    config: Optional[SourcesConfig] = None,
    bbox: Optional[Sequence[float]] = None,
    session: Optional[requests.Session] = None,
) -> List[Feature]:
    """
    Features of one map layer.

    WFS layers are requested over `bbox` (default: the province extent);
    layers served by Overpass are delegated to fetch_amenity_features().
    """
    config = config or SourcesConfig()
    layer = LayerType.coerce(layer_type)
    type_name = get_wfs_type_name(layer)
    if type_name is None:
        amenity = get_layer_entry(layer).get("overpass_amenity")
        if not amenity:
            logger.warning(f"   ⚠️ No provider configured for layer: {layer.value}")
            return []
        return fetch_amenity_features(amenity, layer, config, session=session)

    logger.info(f"🌐 Fetching {layer.value} ({type_name})")
    params = build_wfs_params(
        type_name,
        bbox=bbox if bbox is not None else config.province_bbox,
        count=config.wfs_max_features,
    )
    payload = fetch_json(
        config.wfs_url, params=params, timeout=config.request_timeout_s, session=session
    )
    return parse_layer_features(payload, layer)


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ OVERPASS
# ═══════════════════════════════════════════════════════════════════════════


def fetch_community_schools(
    config: Optional[SourcesConfig] = None,
    session: Optional[requests.Session] = None,
) -> List[School]:
    """Community-mapped school outlines inside the city extent."""
    config = config or SourcesConfig()
    logger.info(f"🌐 Fetching community schools from {config.overpass_url}")
    query = build_school_query(config.city_bbox, timeout_s=int(config.request_timeout_s))
    payload = fetch_json(
        config.overpass_url,
        data={"data": query},
        timeout=config.request_timeout_s,
        session=session,
    )
    return parse_community_schools(payload)


def fetch_amenity_features(
    amenity: str,
    layer_type: Union[str, LayerType],
    config: Optional[SourcesConfig] = None,
    session: Optional[requests.Session] = None,
) -> List[Feature]:
    """Amenity nodes and ways inside the city extent as layer Features."""
    config = config or SourcesConfig()
    logger.info(f"🌐 Fetching amenity={amenity} from Overpass")
    query = build_amenity_query(
        amenity, config.city_bbox, timeout_s=int(config.request_timeout_s)
    )
    payload = fetch_json(
        config.overpass_url,
        data={"data": query},
        timeout=config.request_timeout_s,
        session=session,
    )
    return parse_amenity_features(payload, layer_type)
