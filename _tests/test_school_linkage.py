"""
Unit tests for official / community school record linkage.

Tests:
1. Geometry enrichment (proximity + vertex-count heuristic)
2. Name deduplication
3. Double surfacing of records reused for geometry and appended by name
4. First-in-order matching and ordering guarantees
5. Name normalization
6. Repeated merges of the same inputs

Run with: python -m pytest _tests/test_school_linkage.py -v
"""

import logging
import math

import pytest

from School_Buffer_Analysis.config_types import LinkageConfig
from School_Buffer_Analysis.geometry.coordinates import point_square_polygon
from School_Buffer_Analysis.models.data_models import (
    LatLng,
    School,
    SchoolDetails,
    SchoolSource,
)
from School_Buffer_Analysis.school_linkage import (
    SchoolRecordLinker,
    link_school_records,
    merge_schools,
    normalize_school_name,
)

BASE = LatLng(lat=-31.4201, lng=-64.1888)


def _shift(point: LatLng, dlat: float = 0.0, dlng: float = 0.0) -> LatLng:
    return LatLng(point.lat + dlat, point.lng + dlng)


def _official(sid: str, name: str, point: LatLng) -> School:
    """Point-only registry record with its placeholder square (5 vertices)."""
    return School(
        id=sid,
        name=name,
        polygon=point_square_polygon(point),
        address="Calle Falsa 123, Córdoba",
        details=SchoolDetails(level="Primario", source=SchoolSource.OFFICIAL),
    )


def _community(sid: str, name: str, center: LatLng, distinct: int = 5) -> School:
    """Traced outline with `distinct` vertices plus the closing vertex."""
    radius = 0.0002
    ring = [
        LatLng(
            center.lat + radius * math.cos(2 * math.pi * k / distinct),
            center.lng + radius * math.sin(2 * math.pi * k / distinct),
        )
        for k in range(distinct)
    ]
    ring.append(ring[0])
    return School(
        id=sid,
        name=name,
        polygon=tuple(ring),
        details=SchoolDetails(source=SchoolSource.COMMUNITY),
    )


# ═══════════════════════════════════════════════════════════════════════════
# GEOMETRY ENRICHMENT
# ═══════════════════════════════════════════════════════════════════════════


class TestGeometryEnrichment:
    """Test proximity matching and outline upgrade."""

    def test_near_same_name_becomes_single_hybrid(self):
        """0.001° apart, 6-vertex outline, same name: one HYBRID record."""
        official = _official("idecor_1", "Escuela Normal", BASE)
        community = _community("osm_1", "Escuela Normal", _shift(BASE, dlat=0.001))

        result = link_school_records([official], [community])

        assert len(result.schools) == 1
        merged = result.schools[0]
        assert merged.id == "idecor_1"
        assert merged.source is SchoolSource.HYBRID
        assert merged.polygon == community.polygon
        assert result.hybrid_count == 1
        assert result.appended_count == 0

    def test_hybrid_keeps_official_attributes(self):
        official = _official("idecor_1", "Escuela Normal", BASE)
        community = _community("osm_1", "Escuela Normal", _shift(BASE, dlng=0.001))

        merged = merge_schools([official], [community])[0]

        assert merged.name == "Escuela Normal"
        assert merged.address == "Calle Falsa 123, Córdoba"
        assert merged.details.level == "Primario"

    def test_five_vertex_outline_does_not_upgrade(self):
        """A closed square (5 vertices) is not better than the placeholder."""
        official = _official("idecor_1", "Escuela Normal", BASE)
        square = _community("osm_1", "Escuela Normal", _shift(BASE, dlat=0.001), distinct=4)
        assert square.vertex_count == 5

        result = link_school_records([official], [square])

        assert len(result.schools) == 1
        assert result.schools[0].source is SchoolSource.OFFICIAL
        assert result.schools[0].polygon == official.polygon
        assert result.hybrid_count == 0

    def test_beyond_threshold_does_not_match(self):
        official = _official("idecor_1", "Escuela A", BASE)
        community = _community("osm_1", "Escuela B", _shift(BASE, dlat=0.0025))

        result = link_school_records([official], [community])

        assert result.schools[0].source is SchoolSource.OFFICIAL
        assert result.hybrid_count == 0
        assert len(result.schools) == 2

    def test_first_match_in_original_order_wins(self):
        """The first secondary within range wins, even if a later one is closer."""
        official = _official("idecor_1", "Escuela", BASE)
        farther = _community("osm_a", "Escuela", _shift(BASE, dlat=0.0015))
        closer = _community("osm_b", "Escuela", _shift(BASE, dlat=0.0003))

        merged = merge_schools([official], [farther, closer])

        assert merged[0].polygon == farther.polygon

    def test_first_match_is_used_even_without_upgrade(self):
        """A non-upgrading first match is not replaced by a later candidate."""
        official = _official("idecor_1", "Escuela", BASE)
        square = _community("osm_a", "Escuela", _shift(BASE, dlat=0.0005), distinct=4)
        outline = _community("osm_b", "Escuela", _shift(BASE, dlat=0.0006))

        merged = merge_schools([official], [square, outline])

        assert merged[0].source is SchoolSource.OFFICIAL

    def test_secondary_without_polygon_never_matches(self):
        official = _official("idecor_1", "Escuela", BASE)
        empty = School(id="osm_1", name="Otra Escuela")

        result = link_school_records([official], [empty])

        assert result.hybrid_count == 0
        assert [s.id for s in result.schools] == ["idecor_1", "osm_1"]

    def test_custom_threshold(self):
        official = _official("idecor_1", "Escuela", BASE)
        community = _community("osm_1", "Escuela", _shift(BASE, dlat=0.0025))
        linker = SchoolRecordLinker(LinkageConfig(match_threshold_deg=0.005))

        assert linker.merge([official], [community])[0].source is SchoolSource.HYBRID


# ═══════════════════════════════════════════════════════════════════════════
# NAME DEDUPLICATION
# ═══════════════════════════════════════════════════════════════════════════


class TestNameDeduplication:
    """Test appending of secondary records by normalized name."""

    def test_same_name_far_apart_gives_single_record(self):
        official = _official("idecor_1", "Escuela Normal", BASE)
        community = _community("osm_1", "Escuela Normal", _shift(BASE, dlat=0.05))

        merged = merge_schools([official], [community])

        assert len(merged) == 1
        assert merged[0].source is SchoolSource.OFFICIAL

    def test_name_match_ignores_case_and_accents(self):
        official = _official("idecor_1", "Escuela José Martí", BASE)
        community = _community("osm_1", "ESCUELA JOSE MARTI", _shift(BASE, dlat=0.05))

        assert len(merge_schools([official], [community])) == 1

    def test_unrelated_records_are_both_kept(self):
        official = _official("idecor_1", "Escuela A", BASE)
        community = _community("osm_1", "Colegio B", _shift(BASE, dlat=0.05))

        result = link_school_records([official], [community])

        assert [s.id for s in result.schools] == ["idecor_1", "osm_1"]
        assert result.appended_count == 1

    def test_order_is_primary_then_appended_secondaries(self):
        primary = [
            _official("idecor_2", "Escuela Dos", BASE),
            _official("idecor_1", "Escuela Uno", _shift(BASE, dlat=0.1)),
        ]
        secondary = [
            _community("osm_9", "Colegio Nueve", _shift(BASE, dlat=0.2)),
            _community("osm_3", "Colegio Tres", _shift(BASE, dlat=0.3)),
        ]

        merged = merge_schools(primary, secondary)

        assert [s.id for s in merged] == ["idecor_2", "idecor_1", "osm_9", "osm_3"]

    def test_empty_inputs(self):
        result = link_school_records([], [])
        assert result.schools == ()
        assert merge_schools([], []) == []

    def test_only_secondary(self):
        community = _community("osm_1", "Colegio", BASE)
        assert merge_schools([], [community]) == [community]


# ═══════════════════════════════════════════════════════════════════════════
# DOUBLE SURFACING
# ═══════════════════════════════════════════════════════════════════════════


class TestDoubleSurfacing:
    """A secondary record reused for geometry can also be appended by name."""

    def test_reused_outline_with_different_name_appears_twice(self):
        official = _official("idecor_1", "Escuela Normal Superior", BASE)
        community = _community(
            "osm_1", "Normal Superior Alejandro Carbó", _shift(BASE, dlat=0.001)
        )

        result = link_school_records([official], [community])

        assert len(result.schools) == 2
        assert result.schools[0].source is SchoolSource.HYBRID
        assert result.schools[1] == community
        assert result.schools[0].polygon == result.schools[1].polygon
        assert result.double_surfaced_ids == ("osm_1",)
        assert result.hybrid_count == 1
        assert result.appended_count == 1

    def test_double_surfacing_is_logged(self, caplog):
        official = _official("idecor_1", "Escuela A", BASE)
        community = _community("osm_1", "Colegio B", _shift(BASE, dlat=0.001))

        with caplog.at_level(logging.WARNING):
            link_school_records([official], [community])

        assert "osm_1" in caplog.text

    def test_no_double_surfacing_when_names_match(self):
        official = _official("idecor_1", "Escuela A", BASE)
        community = _community("osm_1", "Escuela A", _shift(BASE, dlat=0.001))

        assert link_school_records([official], [community]).double_surfaced_ids == ()


# ═══════════════════════════════════════════════════════════════════════════
# REPEATABILITY
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def mixed_records():
    """One hybrid, one double-surfaced and one appended community record."""
    far = _shift(BASE, dlat=0.05)
    officials = [
        _official("idecor_1", "Escuela Normal", BASE),
        _official("idecor_2", "Escuela Belgrano", far),
    ]
    communities = [
        _community("osm_1", "Escuela Normal", _shift(BASE, dlat=0.001)),
        _community("osm_2", "Colegio San Martín", _shift(far, dlng=0.001)),
        _community("osm_3", "Instituto Lejano", _shift(BASE, dlat=0.2)),
    ]
    return officials, communities


class TestRepeatability:
    """Repeated merges of the same inputs give the same result."""

    def test_mixed_fixture_outcome(self, mixed_records):
        result = link_school_records(*mixed_records)

        assert [s.id for s in result.schools] == ["idecor_1", "idecor_2", "osm_2", "osm_3"]
        assert result.hybrid_count == 2
        assert result.appended_count == 2
        assert result.double_surfaced_ids == ("osm_2",)

    def test_repeated_link_is_identical(self, mixed_records):
        linker = SchoolRecordLinker()
        first = linker.link(*mixed_records)
        second = linker.link(*mixed_records)
        fresh = SchoolRecordLinker().link(*mixed_records)

        assert first == second == fresh

    def test_repeated_merge_is_identical(self, mixed_records):
        officials, communities = mixed_records
        first = merge_schools(officials, communities)
        second = merge_schools(officials, communities)

        assert first == second
        assert [s.source for s in first] == [
            SchoolSource.HYBRID,
            SchoolSource.HYBRID,
            SchoolSource.COMMUNITY,
            SchoolSource.COMMUNITY,
        ]

    def test_inputs_are_not_modified(self, mixed_records):
        officials, communities = mixed_records
        before = (list(officials), list(communities))
        merge_schools(officials, communities)
        assert (officials, communities) == before


# ═══════════════════════════════════════════════════════════════════════════
# NAME NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════


class TestNormalizeSchoolName:
    """Test the duplicate-detection key."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("José Martí", "josemarti"),
            ("ESCUELA  Nro. 5", "escuelanro5"),
            ("Colegio Nacional de Monserrat", "colegionacionaldemonserrat"),
            ("Instituto Santa Ana (Anexo)", "institutosantaanaanexo"),
            ("Niño Jesús", "ninojesus"),
            ("", ""),
        ],
    )
    def test_normalization(self, raw, expected):
        assert normalize_school_name(raw) == expected

    def test_none_is_empty(self):
        assert normalize_school_name(None) == ""
