"""
Unit tests for provider adapters.

Tests:
1. Official school parsing (WFS GeoJSON points)
2. Community school parsing (Overpass outlines)
3. Layer feature parsing and representative points
4. Query / parameter builders and the layer catalogue
5. HTTP client with a stub session (no network)
6. GeoDataFrame conversion

Run with: python -m pytest _tests/test_sources.py -v
"""

import geopandas as gpd
import pytest
import requests
from shapely.geometry import LineString, Point, Polygon

from School_Buffer_Analysis.config_types import SourcesConfig
from School_Buffer_Analysis.models.data_models import LatLng, LayerType, SchoolSource
from School_Buffer_Analysis.sources.geodataframe import features_from_geodataframe
from School_Buffer_Analysis.sources.http_client import (
    fetch_community_schools,
    fetch_layer_features,
    fetch_official_schools,
)
from School_Buffer_Analysis.sources.layer_catalog import (
    LAYER_CATALOG,
    get_counted_layer_keys,
    get_layer_label,
    get_name_field,
    get_wfs_type_name,
)
from School_Buffer_Analysis.sources.overpass_parser import (
    build_amenity_query,
    build_school_query,
    parse_amenity_features,
    parse_community_school,
    parse_community_schools,
)
from School_Buffer_Analysis.sources.wfs_parser import (
    build_wfs_params,
    extract_representative_point,
    parse_layer_features,
    parse_official_school,
    parse_official_schools,
)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def official_feature():
    """WFS school feature with the usual registry attributes."""
    return {
        "type": "Feature",
        "id": "establecimientos_educativos.7",
        "geometry": {"type": "Point", "coordinates": [-64.1888, -31.4201]},
        "properties": {
            "id": 12,
            "nombre": "Escuela Normal Superior",
            "domicilio": "Av. Colón 100",
            "localidad": "Córdoba Capital",
            "departamento": "Capital",
            "telefono": "0351-4000000",
            "mail": "normal@example.org",
            "tipo_nivel": "Primario",
            "gestion": "Estatal",
            "ambito": "Urbano",
            "cueanexo": "140000100",
        },
    }


@pytest.fixture
def overpass_school():
    """Overpass way with an open triangle outline."""
    return {
        "type": "way",
        "id": 555,
        "tags": {
            "amenity": "school",
            "name": "Colegio Alemán",
            "addr:street": "Av. Colón",
            "addr:housenumber": "123",
            "contact:phone": "111",
            "phone": "222",
            "website": "https://example.org",
        },
        "geometry": [
            {"lat": -31.4201, "lon": -64.1888},
            {"lat": -31.4201, "lon": -64.1880},
            {"lat": -31.4195, "lon": -64.1880},
        ],
    }


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


class StubSession:
    """Records calls and returns a canned response."""

    def __init__(self, payload, status_code=200):
        self.response = StubResponse(payload, status_code)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(("GET", url, params, timeout))
        return self.response

    def post(self, url, data=None, timeout=None):
        self.calls.append(("POST", url, data, timeout))
        return self.response


# ═══════════════════════════════════════════════════════════════════════════
# OFFICIAL SCHOOLS
# ═══════════════════════════════════════════════════════════════════════════


class TestOfficialSchools:
    """Test WFS school parsing."""

    def test_parses_attributes(self, official_feature):
        school = parse_official_school(official_feature)

        assert school.id == "idecor_12"
        assert school.name == "Escuela Normal Superior"
        assert school.address == "Av. Colón 100, Córdoba Capital, Capital, Córdoba"
        assert school.contact_info.phone == "0351-4000000"
        assert school.contact_info.email == "normal@example.org"
        assert school.contact_info.website is None
        assert school.details.level == "Primario"
        assert school.details.sector == "Estatal"
        assert school.details.setting == "Urbano"
        assert school.details.cue == "140000100"
        assert school.source is SchoolSource.OFFICIAL

    def test_polygon_is_placeholder_square(self, official_feature):
        school = parse_official_school(official_feature)
        assert school.vertex_count == 5
        assert school.polygon[0] == school.polygon[-1]
        assert school.polygon[0] == LatLng(-31.4201 + 0.0005, -64.1888 - 0.0005)

    def test_fallbacks(self):
        feature = {
            "geometry": {"type": "Point", "coordinates": [-64.0, -31.0]},
            "properties": {"gid": 3},
        }
        school = parse_official_school(feature)
        assert school.id == "idecor_3"
        assert school.name == "Sin nombre"
        assert school.address == "Córdoba"
        assert school.contact_info.phone == ""

    def test_feature_without_point_is_skipped(self):
        assert parse_official_school({"properties": {"id": 1}}) is None
        assert parse_official_school({"geometry": None, "properties": {}}) is None

    def test_collection_skips_features_without_point(self, official_feature):
        payload = {
            "type": "FeatureCollection",
            "features": [official_feature, {"properties": {"nombre": "Sin punto"}}],
        }
        schools = parse_official_schools(payload)
        assert [s.id for s in schools] == ["idecor_12"]

    def test_empty_payloads(self):
        assert parse_official_schools(None) == []
        assert parse_official_schools({}) == []


# ═══════════════════════════════════════════════════════════════════════════
# COMMUNITY SCHOOLS
# ═══════════════════════════════════════════════════════════════════════════


class TestCommunitySchools:
    """Test Overpass outline parsing."""

    def test_parses_and_closes_outline(self, overpass_school):
        school = parse_community_school(overpass_school)

        assert school.id == "osm_555"
        assert school.name == "Colegio Alemán"
        assert school.vertex_count == 4
        assert school.polygon[0] == school.polygon[-1] == LatLng(-31.4201, -64.1888)
        assert school.source is SchoolSource.COMMUNITY

    def test_address_and_contact(self, overpass_school):
        school = parse_community_school(overpass_school)
        assert school.address == "Av. Colón 123, Córdoba"
        assert school.contact_info.phone == "111"
        assert school.contact_info.website == "https://example.org"

    def test_closed_outline_is_kept(self, overpass_school):
        nodes = overpass_school["geometry"]
        overpass_school["geometry"] = nodes + [nodes[0]]
        assert parse_community_school(overpass_school).vertex_count == 4

    def test_too_few_points_rejected(self, overpass_school):
        overpass_school["geometry"] = overpass_school["geometry"][:2]
        assert parse_community_school(overpass_school) is None

    def test_closed_two_point_outline_rejected(self):
        """Repeated nodes do not count towards the minimum outline size."""
        a = {"lat": -31.4201, "lon": -64.1888}
        b = {"lat": -31.4201, "lon": -64.1880}
        element = {"id": 7, "tags": {"name": "Aula"}, "geometry": [a, b, a]}
        assert parse_community_school(element) is None

        element["geometry"] = [a, b, b, a, a]
        assert parse_community_school(element) is None

    def test_fallbacks(self):
        element = {
            "id": 1,
            "geometry": [
                {"lat": 0.0, "lon": 0.0},
                {"lat": 0.0, "lon": 1.0},
                {"lat": 1.0, "lon": 1.0},
            ],
        }
        school = parse_community_school(element)
        assert school.name == "Escuela sin nombre"
        assert school.address == "Dirección no disponible"
        assert school.contact_info.email == ""

    def test_collection_skips_elements_without_geometry(self, overpass_school):
        payload = {"elements": [{"type": "relation", "id": 9}, overpass_school]}
        assert [s.id for s in parse_community_schools(payload)] == ["osm_555"]


# ═══════════════════════════════════════════════════════════════════════════
# LAYER FEATURES
# ═══════════════════════════════════════════════════════════════════════════


class TestLayerFeatures:
    """Test representative points and naming of layer features."""

    def test_point(self):
        point, polygon = extract_representative_point(
            {"type": "Point", "coordinates": [-64.1888, -31.4201]}
        )
        assert point == LatLng(-31.4201, -64.1888)
        assert polygon is None

    def test_multipoint_uses_first_point(self):
        point, _ = extract_representative_point(
            {"type": "MultiPoint", "coordinates": [[-64.0, -31.0], [-65.0, -32.0]]}
        )
        assert point == LatLng(-31.0, -64.0)

    def test_polygon_uses_vertex_mean(self):
        ring = [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0], [0.0, 0.0]]
        point, polygon = extract_representative_point(
            {"type": "Polygon", "coordinates": [ring]}
        )
        assert point.lat == pytest.approx(0.8)
        assert point.lng == pytest.approx(0.8)
        assert len(polygon) == 5

    def test_multipolygon_uses_first_polygon(self):
        first = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]]
        second = [[10.0, 10.0], [11.0, 10.0], [11.0, 11.0], [10.0, 10.0]]
        point, polygon = extract_representative_point(
            {"type": "MultiPolygon", "coordinates": [[first], [second]]}
        )
        assert point.lng == pytest.approx(0.5)
        assert point.lat == pytest.approx(0.25)
        assert polygon[1] == LatLng(0.0, 1.0)

    def test_unsupported_geometry_has_no_point(self):
        point, polygon = extract_representative_point(
            {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}
        )
        assert point is None and polygon is None

    def test_malformed_geometry_has_no_point(self):
        assert extract_representative_point({"type": "Polygon", "coordinates": []}) == (
            None,
            None,
        )

    def test_collection_parsing(self):
        payload = {
            "features": [
                {
                    "id": "zonas.1",
                    "geometry": {"type": "Point", "coordinates": [-64.0, -31.0]},
                    "properties": {"zona_riesgo": "Alta"},
                },
                {
                    "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
                    "properties": {},
                },
                {"geometry": None, "properties": {"zona_riesgo": "Sin geometría"}},
            ]
        }
        features = parse_layer_features(payload, "risk_zones")

        assert len(features) == 2
        assert features[0].id == "zonas.1"
        assert features[0].name == "Alta"
        assert features[0].layer_type is LayerType.RISK_ZONES
        assert features[1].id == "risk_zones-1"
        assert features[1].name == "Zonas de Riesgo sin nombre"
        assert features[1].point is None

    def test_amenity_features(self):
        payload = {
            "elements": [
                {"type": "node", "id": 1, "lat": -31.4, "lon": -64.2, "tags": {"name": "Comisaría 1"}},
                {"type": "way", "id": 2, "center": {"lat": -31.5, "lon": -64.1}, "tags": {}},
                {
                    "type": "way",
                    "id": 3,
                    "geometry": [{"lat": 0.0, "lon": 0.0}, {"lat": 2.0, "lon": 2.0}],
                },
                {"type": "way", "id": 4},
            ]
        }
        features = parse_amenity_features(payload)

        assert [f.id for f in features] == ["osm_1", "osm_2", "osm_3", "osm_4"]
        assert features[0].point == LatLng(-31.4, -64.2)
        assert features[0].name == "Comisaría 1"
        assert features[1].point == LatLng(-31.5, -64.1)
        assert features[1].name == "Comisarías sin nombre"
        assert features[2].point == LatLng(1.0, 1.0)
        assert features[3].point is None
        assert all(f.layer_type is LayerType.POLICE for f in features)


# ═══════════════════════════════════════════════════════════════════════════
# CATALOGUE AND QUERY BUILDERS
# ═══════════════════════════════════════════════════════════════════════════


class TestCatalogueAndQueries:
    """Test layer metadata and request builders."""

    def test_catalogue_covers_every_layer_type(self):
        assert set(LAYER_CATALOG) == {layer.value for layer in LayerType}

    def test_catalogue_entries(self):
        assert get_layer_label(LayerType.HOSPITALS) == "Centros de Salud"
        assert get_wfs_type_name("fire_stations") == "idecor:cuarteles_bbvv"
        assert get_wfs_type_name("police") is None
        assert get_name_field("natural_regions") == "region"

    def test_counted_layer_keys(self):
        assert get_counted_layer_keys() == [
            "schools",
            "hospitals",
            "police",
            "fire_stations",
            "risk_zones",
        ]

    def test_wfs_params(self):
        params = build_wfs_params("idecor:Centros_Salud", bbox=(-66.0, -35.0, -62.0, -29.5))
        assert params["service"] == "WFS"
        assert params["version"] == "2.0.0"
        assert params["request"] == "GetFeature"
        assert params["outputFormat"] == "application/json"
        assert params["srsName"] == "EPSG:4326"
        assert params["count"] == "5000"
        assert params["bbox"] == "-66.0,-35.0,-62.0,-29.5,EPSG:4326"

    def test_wfs_params_without_bbox_and_count(self):
        params = build_wfs_params("idecor:establecimientos_educativos", count=None)
        assert "bbox" not in params
        assert "count" not in params

    def test_school_query(self):
        query = build_school_query((-31.48, -64.25, -31.35, -64.12))
        assert query.startswith("[out:json][timeout:60];")
        assert 'way["amenity"="school"](-31.4800,-64.2500,-31.3500,-64.1200);' in query
        assert 'relation["amenity"="school"]' in query
        assert query.endswith("out geom;")

    def test_amenity_query(self):
        query = build_amenity_query("police", (-31.48, -64.25, -31.35, -64.12))
        assert 'node["amenity"="police"](-31.4800,-64.2500,-31.3500,-64.1200);' in query
        assert 'way["amenity"="police"]' in query


# ═══════════════════════════════════════════════════════════════════════════
# HTTP CLIENT
# ═══════════════════════════════════════════════════════════════════════════


class TestHttpClient:
    """Test single-attempt fetches against a stub session."""

    def test_layer_fetch_uses_wfs(self):
        session = StubSession({"features": []})
        features = fetch_layer_features("hospitals", SourcesConfig(), session=session)

        assert features == []
        method, url, params, timeout = session.calls[0]
        assert method == "GET"
        assert url == SourcesConfig().wfs_url
        assert params["typeName"] == "idecor:Centros_Salud"
        assert params["bbox"] == "-66.0,-35.0,-62.0,-29.5,EPSG:4326"
        assert timeout == 60.0

    def test_police_fetch_uses_overpass(self):
        session = StubSession(
            {"elements": [{"type": "node", "id": 7, "lat": -31.4, "lon": -64.2}]}
        )
        features = fetch_layer_features(LayerType.POLICE, session=session)

        method, url, data, _ = session.calls[0]
        assert method == "POST"
        assert url == SourcesConfig().overpass_url
        assert 'node["amenity"="police"]' in data["data"]
        assert features[0].id == "osm_7"

    def test_official_schools_fetch(self, official_feature):
        session = StubSession({"features": [official_feature]})
        schools = fetch_official_schools(session=session)
        assert [s.id for s in schools] == ["idecor_12"]
        assert session.calls[0][2]["typeName"] == "idecor:establecimientos_educativos"

    def test_community_schools_fetch(self, overpass_school):
        session = StubSession({"elements": [overpass_school]})
        schools = fetch_community_schools(session=session)
        assert [s.id for s in schools] == ["osm_555"]
        assert "out geom;" in session.calls[0][2]["data"]

    def test_http_errors_propagate(self):
        session = StubSession({}, status_code=503)
        with pytest.raises(requests.HTTPError):
            fetch_layer_features("hospitals", session=session)
        assert len(session.calls) == 1, "Fetches must not retry"


# ═══════════════════════════════════════════════════════════════════════════
# GEODATAFRAME CONVERSION
# ═══════════════════════════════════════════════════════════════════════════


class TestGeoDataFrame:
    """Test conversion of local layer files."""

    def test_rows_become_features(self):
        gdf = gpd.GeoDataFrame(
            {"nombre": ["Hospital Córdoba", None, "Línea"]},
            geometry=[
                Point(-64.1888, -31.4201),
                Polygon([(0, 0), (2, 0), (2, 2), (0, 2)]),
                LineString([(0, 0), (1, 1)]),
            ],
            crs="EPSG:4326",
        )
        features = features_from_geodataframe(gdf, LayerType.HOSPITALS)

        assert len(features) == 3
        assert features[0].point == LatLng(-31.4201, -64.1888)
        assert features[0].name == "Hospital Córdoba"
        assert features[1].name == "Centros de Salud sin nombre"
        assert features[1].point.lat == pytest.approx(0.8)
        assert "nombre" not in features[1].properties
        assert features[2].point is None
        assert features[2].id == "hospitals-2"

    def test_reprojects_to_wgs84(self):
        gdf = gpd.GeoDataFrame(
            {"nombre": ["Centro"]},
            geometry=[Point(-64.1888, -31.4201)],
            crs="EPSG:4326",
        ).to_crs("EPSG:3857")

        features = features_from_geodataframe(gdf, "hospitals")

        assert features[0].point.lat == pytest.approx(-31.4201, abs=1e-7)
        assert features[0].point.lng == pytest.approx(-64.1888, abs=1e-7)
